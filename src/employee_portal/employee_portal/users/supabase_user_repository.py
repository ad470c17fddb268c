from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..backend.base import backend_call, first, rows
from ..backend.connection import BackendConnection
from ..core.enums import ProfileStatus, Role
from .model import EMPLOYEE_DETAIL_FIELDS, Employee, Profile
from .repository import UserRepository

_EMPLOYEE_SELECT = "*, profiles (id, email, full_name, role, status)"


def _to_profile(row: Optional[Dict[str, Any]]) -> Optional[Profile]:
    if not row:
        return None
    return Profile(
        user_id=str(row["id"]),
        email=row.get("email"),
        full_name=row.get("full_name"),
        role=Role(row.get("role") or Role.EMPLOYEE.value),
        status=ProfileStatus(row.get("status") or ProfileStatus.ACTIVE.value),
    )


def _to_employee(row: Dict[str, Any]) -> Employee:
    profile_row = row.get("profiles")
    if isinstance(profile_row, list):
        profile_row = profile_row[0] if profile_row else None
    return Employee(
        employee_id=str(row["id"]),
        display_name=row.get("display_name"),
        is_active=bool(row.get("is_active", True)),
        details={k: row.get(k) for k in EMPLOYEE_DETAIL_FIELDS if k in row},
        registered_device_id=row.get("registered_device_id"),
        device_name=row.get("device_name"),
        device_registered_at=row.get("device_registered_at"),
        profile=_to_profile(profile_row),
    )


class SupabaseUserRepository(UserRepository):
    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with backend_call("load profile"):
            resp = (
                self._conn.service()
                .table("profiles")
                .select("id, email, full_name, role, status")
                .eq("id", user_id)
                .maybe_single()
                .execute()
            )
        return _to_profile(first(resp))

    def find_profile_by_email(self, email: str) -> Optional[Profile]:
        with backend_call("find profile"):
            resp = (
                self._conn.service()
                .table("profiles")
                .select("id, email, full_name, role, status")
                .eq("email", email)
                .maybe_single()
                .execute()
            )
        return _to_profile(first(resp))

    def list_employees(self, *, include_inactive: bool = False) -> Sequence[Employee]:
        query = self._conn.user().table("employees").select(_EMPLOYEE_SELECT).order("display_name")
        if not include_inactive:
            query = query.eq("is_active", True)
        with backend_call("list employees"):
            resp = query.execute()
        return [_to_employee(r) for r in rows(resp)]

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        with backend_call("load employee"):
            resp = (
                self._conn.user()
                .table("employees")
                .select(_EMPLOYEE_SELECT)
                .eq("id", employee_id)
                .maybe_single()
                .execute()
            )
        row = first(resp)
        return _to_employee(row) if row else None

    def upsert_profile(
        self, *, user_id: str, email: str, full_name: str, role: Role, status: ProfileStatus
    ) -> None:
        payload = {"id": user_id, "email": email, "full_name": full_name, "role": role.value, "status": status.value}
        with backend_call("upsert profile"):
            self._conn.service().table("profiles").upsert(payload, on_conflict="id").execute()

    def upsert_employee(self, *, employee_id: str, fields: Dict[str, Any]) -> None:
        payload = {"id": employee_id, **fields}
        with backend_call("upsert employee"):
            self._conn.service().table("employees").upsert(payload, on_conflict="id").execute()

    def update_employee(self, employee_id: str, updates: Dict[str, Any]) -> None:
        with backend_call("update employee"):
            self._conn.user().table("employees").update(updates).eq("id", employee_id).execute()

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> None:
        with backend_call("update profile"):
            self._conn.user().table("profiles").update(updates).eq("id", user_id).execute()

    def delete_employee(self, employee_id: str) -> None:
        with backend_call("delete employee"):
            self._conn.service().table("employees").delete().eq("id", employee_id).execute()

    def delete_profile(self, user_id: str) -> None:
        with backend_call("delete profile"):
            self._conn.service().table("profiles").delete().eq("id", user_id).execute()

    def count_active_employees(self) -> int:
        with backend_call("count employees"):
            resp = (
                self._conn.user()
                .table("employees")
                .select("id", count="exact", head=True)
                .eq("is_active", True)
                .execute()
            )
        return int(resp.count or 0)
