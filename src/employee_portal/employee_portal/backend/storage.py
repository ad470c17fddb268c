from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.constants import SIGNED_URL_EXPIRY_SECONDS
from .base import backend_call
from .connection import BackendConnection


class StorageGateway(Protocol):
    def upload(self, *, bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Upload a file and return its storage path."""

        raise NotImplementedError

    def public_url(self, *, bucket: str, path: str) -> str:
        raise NotImplementedError

    def signed_url(self, *, bucket: str, path: str, expires_in: int = SIGNED_URL_EXPIRY_SECONDS) -> str:
        raise NotImplementedError

    def remove(self, *, bucket: str, paths: Sequence[str]) -> None:
        raise NotImplementedError


class SupabaseStorageGateway(StorageGateway):
    """Object storage through the service-role client; callers enforce who may upload."""

    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def upload(self, *, bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        options = {"upsert": "false"}
        if content_type:
            options["content-type"] = content_type
        with backend_call("upload file"):
            self._conn.service().storage.from_(bucket).upload(path, content, options)
        return path

    def public_url(self, *, bucket: str, path: str) -> str:
        return self._conn.service().storage.from_(bucket).get_public_url(path)

    def signed_url(self, *, bucket: str, path: str, expires_in: int = SIGNED_URL_EXPIRY_SECONDS) -> str:
        with backend_call("sign file url"):
            resp = self._conn.service().storage.from_(bucket).create_signed_url(path, expires_in)
        return resp.get("signedURL") or resp.get("signedUrl") or ""

    def remove(self, *, bucket: str, paths: Sequence[str]) -> None:
        with backend_call("remove file"):
            self._conn.service().storage.from_(bucket).remove(list(paths))


def storage_path(url_or_path: str, bucket: str) -> str:
    """Object path inside ``bucket`` for a stored path or a public/signed storage URL."""
    marker = "/storage/v1/object/"
    if marker not in url_or_path:
        return url_or_path
    tail = url_or_path.split(marker, 1)[1].split("?", 1)[0]
    # public/<bucket>/<path> or sign/<bucket>/<path>
    tail = tail.split("/", 1)[1] if "/" in tail else tail
    prefix = f"{bucket}/"
    return tail[len(prefix):] if tail.startswith(prefix) else tail
