from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..backend.storage import StorageGateway, storage_path
from ..cache import keys
from ..cache.query_cache import QueryCache
from ..common.datetime_utils import now_utc
from ..common.validators import optional_str, require_non_empty
from ..core.enums import MediaType
from ..core.exceptions import BackendError, NotFoundError, ValidationError
from .model import MediaUpload, Policy
from .repository import PolicyRepository

logger = logging.getLogger(__name__)


class PolicyService:
    """Use case: policy strips with an optional image or video."""

    def __init__(
        self,
        policies: PolicyRepository,
        storage: StorageGateway,
        cache: QueryCache,
        *,
        bucket: str = "policy-media",
        clock: Callable[[], datetime] = now_utc,
    ):
        self._policies = policies
        self._storage = storage
        self._cache = cache
        self._bucket = bucket
        self._clock = clock

    def active_policies(self) -> Sequence[Policy]:
        return self._policies.list_policies(active_only=True)

    def all_policies(self) -> Sequence[Policy]:
        return self._cache.get(keys.POLICIES, self._policies.list_policies)

    def get(self, policy_id: str) -> Policy:
        policy = self._policies.get(policy_id)
        if policy is None:
            raise NotFoundError("Policy not found")
        return policy

    def categories(self) -> List[str]:
        """Distinct categories in first-seen order."""
        return list(dict.fromkeys(self._policies.categories()))

    def create(self, payload: Mapping[str, Any], media: Optional[MediaUpload] = None) -> Policy:
        fields: Dict[str, Any] = {
            "title": require_non_empty(payload.get("title"), "Title"),
            "content": require_non_empty(payload.get("content"), "Content"),
            "category": optional_str(payload.get("category")),
            "is_active": bool(payload.get("is_active", True)),
            "image_url": None,
            "video_url": None,
            "media_type": MediaType.NONE.value,
        }
        if media is not None:
            fields.update(self._media_fields(media))
        policy = self._policies.create(fields)
        self._cache.invalidate_key(keys.POLICIES)
        return policy

    def update(
        self,
        policy_id: str,
        payload: Mapping[str, Any],
        media: Optional[MediaUpload] = None,
        *,
        remove_media: bool = False,
    ) -> Policy:
        """Update text fields; replacing or removing media deletes the old object first."""

        existing = self.get(policy_id)
        updates: Dict[str, Any] = {}
        for name in ("title", "content"):
            if name in payload:
                updates[name] = require_non_empty(payload[name], name.capitalize())
        if "category" in payload:
            updates["category"] = optional_str(payload["category"])
        if "is_active" in payload:
            updates["is_active"] = bool(payload["is_active"])

        if remove_media or media is not None:
            for url in (existing.image_url, existing.video_url):
                if url:
                    self._delete_media(url)
            updates.update({"image_url": None, "video_url": None, "media_type": MediaType.NONE.value})
        if media is not None:
            updates.update(self._media_fields(media))

        if not updates:
            raise ValidationError("Nothing to update")
        policy = self._policies.update(policy_id, updates)
        if policy is None:
            raise NotFoundError("Policy not found")
        self._cache.invalidate_key(keys.POLICIES)
        return policy

    def set_active(self, policy_id: str, *, is_active: bool) -> Policy:
        policy = self._policies.update(policy_id, {"is_active": is_active})
        if policy is None:
            raise NotFoundError("Policy not found")
        self._cache.invalidate_key(keys.POLICIES)
        return policy

    def delete(self, policy_id: str) -> None:
        self._policies.delete(policy_id)
        self._cache.invalidate_key(keys.POLICIES)

    def _media_fields(self, media: MediaUpload) -> Dict[str, Any]:
        if media.media_type == MediaType.NONE:
            raise ValidationError("Media type must be image or video")
        if not media.content:
            raise ValidationError("File is empty")
        ext = media.filename.rsplit(".", 1)[-1].lower() if "." in media.filename else "bin"
        path = f"{media.media_type.value}-{int(self._clock().timestamp() * 1000)}.{ext}"
        self._storage.upload(bucket=self._bucket, path=path, content=media.content, content_type=media.content_type)
        url = self._storage.public_url(bucket=self._bucket, path=path)
        if media.media_type == MediaType.IMAGE:
            return {"image_url": url, "media_type": MediaType.IMAGE.value}
        return {"video_url": url, "media_type": MediaType.VIDEO.value}

    def _delete_media(self, url: str) -> None:
        try:
            self._storage.remove(bucket=self._bucket, paths=[storage_path(url, self._bucket)])
        except BackendError:
            logger.exception("Failed to delete old policy media %s", url)
