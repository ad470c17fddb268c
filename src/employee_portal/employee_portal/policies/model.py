from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..core.enums import MediaType


@dataclass(frozen=True)
class Policy:
    """A policy strip shown to employees."""

    policy_id: str
    title: str
    content: str
    category: Optional[str] = None
    is_active: bool = True
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    media_type: MediaType = MediaType.NONE
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id"] = data.pop("policy_id")
        data["media_type"] = self.media_type.value
        return data


@dataclass(frozen=True)
class MediaUpload:
    filename: str
    content: bytes
    media_type: MediaType
    content_type: Optional[str] = None
