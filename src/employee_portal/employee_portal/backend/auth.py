from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from .base import backend_call
from .connection import BackendConnection


@dataclass(frozen=True)
class AuthUser:
    user_id: str
    email: Optional[str]
    user_metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str
    user: AuthUser
    expires_at: Optional[int] = None


class AuthGateway(Protocol):
    """Hosted authentication operations used by the portal."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        raise NotImplementedError

    def refresh(self, refresh_token: str) -> AuthSession:
        raise NotImplementedError

    def sign_out(self, access_token: str) -> None:
        raise NotImplementedError

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        raise NotImplementedError

    def send_password_reset(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        raise NotImplementedError

    def exchange_code(self, code: str, *, code_verifier: Optional[str] = None) -> AuthSession:
        raise NotImplementedError

    def admin_create_user(self, *, email: str, password: str, user_metadata: Dict[str, Any]) -> AuthUser:
        raise NotImplementedError

    def admin_delete_user(self, user_id: str) -> None:
        raise NotImplementedError


def _to_user(user) -> AuthUser:
    return AuthUser(
        user_id=str(user.id),
        email=getattr(user, "email", None),
        user_metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


def _to_session(resp) -> AuthSession:
    session = resp.session
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user=_to_user(resp.user or session.user),
        expires_at=getattr(session, "expires_at", None),
    )


class SupabaseAuthGateway(AuthGateway):
    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def sign_in(self, email: str, password: str) -> AuthSession:
        with backend_call("sign in"):
            resp = self._conn.anon().auth.sign_in_with_password({"email": email, "password": password})
        return _to_session(resp)

    def refresh(self, refresh_token: str) -> AuthSession:
        with backend_call("refresh session"):
            resp = self._conn.anon().auth.refresh_session(refresh_token)
        return _to_session(resp)

    def sign_out(self, access_token: str) -> None:
        with backend_call("sign out"):
            self._conn.service().auth.admin.sign_out(access_token)

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        with backend_call("load user"):
            resp = self._conn.anon().auth.get_user(access_token)
        if not resp or not resp.user:
            return None
        return _to_user(resp.user)

    def send_password_reset(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        with backend_call("send password reset"):
            self._conn.anon().auth.reset_password_for_email(email, options)

    def exchange_code(self, code: str, *, code_verifier: Optional[str] = None) -> AuthSession:
        params: Dict[str, Any] = {"auth_code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier
        with backend_call("exchange auth code"):
            resp = self._conn.anon().auth.exchange_code_for_session(params)
        return _to_session(resp)

    def admin_create_user(self, *, email: str, password: str, user_metadata: Dict[str, Any]) -> AuthUser:
        with backend_call("create auth user"):
            resp = self._conn.service().auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": user_metadata,
                }
            )
        return _to_user(resp.user)

    def admin_delete_user(self, user_id: str) -> None:
        with backend_call("delete auth user"):
            self._conn.service().auth.admin.delete_user(user_id)
