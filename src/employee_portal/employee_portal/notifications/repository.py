from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RecipientType
from .model import NotificationRecipient


class RecipientRepository(Protocol):
    def list_active_recipient_emails(self) -> Sequence[str]:
        raise NotImplementedError

    def list_active_admin_emails(self) -> Sequence[str]:
        raise NotImplementedError

    def list_recipients(self) -> Sequence[NotificationRecipient]:
        raise NotImplementedError

    def add_recipient(
        self, *, email: str, name: Optional[str], recipient_type: RecipientType
    ) -> NotificationRecipient:
        raise NotImplementedError

    def remove_recipient(self, recipient_id: str) -> None:
        raise NotImplementedError

    def set_active(self, recipient_id: str, *, is_active: bool) -> None:
        raise NotImplementedError
