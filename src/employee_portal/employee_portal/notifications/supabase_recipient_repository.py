from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..backend.base import backend_call, first, rows
from ..backend.connection import BackendConnection
from ..core.enums import RecipientType
from ..core.exceptions import BackendError
from .model import NotificationRecipient
from .repository import RecipientRepository


def _to_recipient(row: Dict[str, Any]) -> NotificationRecipient:
    return NotificationRecipient(
        recipient_id=str(row["id"]),
        email=row["email"],
        name=row.get("name"),
        recipient_type=RecipientType(row.get("recipient_type") or RecipientType.MANAGER.value),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


class SupabaseRecipientRepository(RecipientRepository):
    """Recipient lookups run with the service role: senders are not always admins."""

    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def list_active_recipient_emails(self) -> Sequence[str]:
        with backend_call("load notification recipients"):
            resp = (
                self._conn.service()
                .table("notification_recipients")
                .select("email")
                .eq("is_active", True)
                .execute()
            )
        return [r["email"] for r in rows(resp) if r.get("email")]

    def list_active_admin_emails(self) -> Sequence[str]:
        with backend_call("load admin emails"):
            resp = (
                self._conn.service()
                .table("profiles")
                .select("email")
                .eq("role", "admin")
                .eq("status", "active")
                .execute()
            )
        return [r["email"] for r in rows(resp) if r.get("email")]

    def list_recipients(self) -> Sequence[NotificationRecipient]:
        with backend_call("list notification recipients"):
            resp = (
                self._conn.user()
                .table("notification_recipients")
                .select("*")
                .order("recipient_type")
                .order("name")
                .execute()
            )
        return [_to_recipient(r) for r in rows(resp)]

    def add_recipient(
        self, *, email: str, name: Optional[str], recipient_type: RecipientType
    ) -> NotificationRecipient:
        with backend_call("add notification recipient"):
            resp = (
                self._conn.user()
                .table("notification_recipients")
                .insert({"email": email, "name": name, "recipient_type": recipient_type.value})
                .execute()
            )
        row = first(resp)
        if not row:
            raise BackendError("Failed to add notification recipient")
        return _to_recipient(row)

    def remove_recipient(self, recipient_id: str) -> None:
        with backend_call("remove notification recipient"):
            self._conn.user().table("notification_recipients").delete().eq("id", recipient_id).execute()

    def set_active(self, recipient_id: str, *, is_active: bool) -> None:
        with backend_call("toggle notification recipient"):
            (
                self._conn.user()
                .table("notification_recipients")
                .update({"is_active": is_active})
                .eq("id", recipient_id)
                .execute()
            )
