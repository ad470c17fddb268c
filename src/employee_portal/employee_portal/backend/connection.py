from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import g, has_request_context
from supabase import Client, create_client

from ..core.exceptions import AuthenticationError


@dataclass
class BackendConfig:
    url: str
    anon_key: str
    service_role_key: str


class BackendConnection:
    """Singleton-like Supabase client factory.

    Three flavours of client are handed out:
    - ``anon()``: public key, used for sign-in and password reset flows.
    - ``user()``: public key + the caller's access token, so row-level security applies.
    - ``service()``: service-role key for admin operations (bypasses row-level security).
    """

    _instance: Optional["BackendConnection"] = None

    def __init__(self, config: BackendConfig):
        self._config = config
        self._service_client: Optional[Client] = None

    @classmethod
    def get_instance(cls, config: BackendConfig) -> "BackendConnection":
        if cls._instance is None:
            cls._instance = BackendConnection(config)
        return cls._instance

    def anon(self) -> Client:
        return create_client(self._config.url, self._config.anon_key)

    def service(self) -> Client:
        if self._service_client is None:
            self._service_client = create_client(self._config.url, self._config.service_role_key)
        return self._service_client

    def for_token(self, access_token: str) -> Client:
        client = create_client(self._config.url, self._config.anon_key)
        client.postgrest.auth(access_token)
        return client

    def user(self) -> Client:
        """Client bound to the access token of the current request.

        The token is placed on ``flask.g`` by the auth guard; one client is built per request.
        """

        if not has_request_context() or not getattr(g, "access_token", None):
            raise AuthenticationError("Unauthorized")

        client = getattr(g, "backend_client", None)
        if client is None:
            client = self.for_token(g.access_token)
            g.backend_client = client
        return client
