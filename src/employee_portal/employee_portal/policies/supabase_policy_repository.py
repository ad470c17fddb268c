from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..backend.base import backend_call, first, rows
from ..backend.connection import BackendConnection
from ..core.enums import MediaType
from ..core.exceptions import BackendError
from .model import Policy
from .repository import PolicyRepository


def _to_policy(row: Dict[str, Any]) -> Policy:
    return Policy(
        policy_id=str(row["id"]),
        title=row["title"],
        content=row.get("content") or "",
        category=row.get("category"),
        is_active=bool(row.get("is_active", True)),
        image_url=row.get("image_url"),
        video_url=row.get("video_url"),
        media_type=MediaType(row.get("media_type") or MediaType.NONE.value),
        created_at=row.get("created_at"),
    )


class SupabasePolicyRepository(PolicyRepository):
    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def list_policies(self, *, active_only: bool = False) -> Sequence[Policy]:
        query = self._conn.user().table("policy_strips").select("*")
        if active_only:
            query = query.eq("is_active", True)
        with backend_call("list policies"):
            resp = query.order("created_at", desc=True).execute()
        return [_to_policy(r) for r in rows(resp)]

    def get(self, policy_id: str) -> Optional[Policy]:
        with backend_call("load policy"):
            resp = self._conn.user().table("policy_strips").select("*").eq("id", policy_id).maybe_single().execute()
        row = first(resp)
        return _to_policy(row) if row else None

    def create(self, fields: Dict[str, Any]) -> Policy:
        with backend_call("create policy"):
            resp = self._conn.user().table("policy_strips").insert(fields).execute()
        row = first(resp)
        if not row:
            raise BackendError("Failed to create policy")
        return _to_policy(row)

    def update(self, policy_id: str, updates: Dict[str, Any]) -> Optional[Policy]:
        with backend_call("update policy"):
            resp = self._conn.user().table("policy_strips").update(updates).eq("id", policy_id).execute()
        row = first(resp)
        return _to_policy(row) if row else None

    def delete(self, policy_id: str) -> None:
        with backend_call("delete policy"):
            self._conn.user().table("policy_strips").delete().eq("id", policy_id).execute()

    def categories(self) -> List[str]:
        with backend_call("list policy categories"):
            resp = (
                self._conn.user()
                .table("policy_strips")
                .select("category")
                .not_.is_("category", "null")
                .execute()
            )
        return [r["category"] for r in rows(resp) if r.get("category")]
