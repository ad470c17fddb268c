from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import RecipientType


@dataclass(frozen=True)
class NotificationRecipient:
    """Manager/owner address that receives admin notifications."""

    recipient_id: str
    email: str
    name: Optional[str]
    recipient_type: RecipientType
    is_active: bool = True
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.recipient_id,
            "email": self.email,
            "name": self.name,
            "recipient_type": self.recipient_type.value,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }
