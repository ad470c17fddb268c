from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..backend.base import backend_call, first, nested, rows
from ..backend.connection import BackendConnection
from ..core.enums import ChecklistStatus
from ..core.exceptions import BackendError
from .model import ChecklistItem, Event, StaffAssignment
from .repository import EventRepository

_LIST_SELECT = """
    *,
    event_staff_assignments (id, role, employee_id, employees (id, display_name))
"""

_DETAIL_SELECT = """
    *,
    event_staff_assignments (id, role, employee_id, employees (id, display_name, position)),
    event_checklists (id, task_title, status, completed_by, completed_at)
"""


def _to_assignment(row: Dict[str, Any], event_id: str) -> StaffAssignment:
    return StaffAssignment(
        assignment_id=str(row["id"]),
        event_id=str(row.get("event_id") or event_id),
        employee_id=str(row["employee_id"]),
        role=row.get("role") or "",
        employee_name=nested(row, "employees", "display_name"),
        position=nested(row, "employees", "position"),
    )


def _to_checklist(row: Dict[str, Any], event_id: str) -> ChecklistItem:
    return ChecklistItem(
        item_id=str(row["id"]),
        event_id=str(row.get("event_id") or event_id),
        task_title=row["task_title"],
        status=ChecklistStatus(row.get("status") or ChecklistStatus.PENDING.value),
        completed_by=row.get("completed_by"),
        completed_at=row.get("completed_at"),
    )


def _to_event(row: Dict[str, Any]) -> Event:
    event_id = str(row["id"])
    return Event(
        event_id=event_id,
        title=row["title"],
        start_time=str(row["start_time"]),
        end_time=str(row["end_time"]),
        room=row.get("room"),
        expected_headcount=row.get("expected_headcount"),
        notes=row.get("notes"),
        created_by=row.get("created_by"),
        staff=[_to_assignment(a, event_id) for a in row.get("event_staff_assignments") or []],
        checklist=[_to_checklist(c, event_id) for c in row.get("event_checklists") or []],
    )


class SupabaseEventRepository(EventRepository):
    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def list_events(
        self, *, start: Optional[str] = None, end: Optional[str] = None, room: Optional[str] = None
    ) -> Sequence[Event]:
        query = self._conn.user().table("events").select(_LIST_SELECT).order("start_time")
        if start:
            query = query.gte("start_time", start)
        if end:
            query = query.lte("start_time", end)
        if room:
            query = query.eq("room", room)
        with backend_call("list events"):
            resp = query.execute()
        return [_to_event(r) for r in rows(resp)]

    def get(self, event_id: str) -> Optional[Event]:
        with backend_call("load event"):
            resp = self._conn.user().table("events").select(_DETAIL_SELECT).eq("id", event_id).maybe_single().execute()
        row = first(resp)
        return _to_event(row) if row else None

    def create(self, fields: Dict[str, Any]) -> Event:
        with backend_call("create event"):
            resp = self._conn.user().table("events").insert(fields).execute()
        row = first(resp)
        if not row:
            raise BackendError("Failed to create event")
        return _to_event(row)

    def update(self, event_id: str, updates: Dict[str, Any]) -> Optional[Event]:
        with backend_call("update event"):
            resp = self._conn.user().table("events").update(updates).eq("id", event_id).execute()
        row = first(resp)
        return _to_event(row) if row else None

    def delete(self, event_id: str) -> None:
        with backend_call("delete event"):
            self._conn.user().table("events").delete().eq("id", event_id).execute()

    def my_upcoming(self, limit: int) -> Sequence[Dict[str, Any]]:
        with backend_call("load upcoming events"):
            resp = self._conn.user().rpc("get_my_upcoming_events", {"p_limit": limit}).execute()
        return rows(resp)

    def assign_staff(self, *, event_id: str, employee_id: str, role: str) -> StaffAssignment:
        payload = {"event_id": event_id, "employee_id": employee_id, "role": role}
        with backend_call("assign staff"):
            resp = self._conn.user().table("event_staff_assignments").insert(payload).execute()
        row = first(resp)
        if not row:
            raise BackendError("Failed to assign staff")
        return _to_assignment(row, event_id)

    def remove_staff(self, assignment_id: str) -> None:
        with backend_call("remove staff"):
            self._conn.user().table("event_staff_assignments").delete().eq("id", assignment_id).execute()

    def add_checklist_item(self, *, event_id: str, task_title: str) -> ChecklistItem:
        with backend_call("add checklist item"):
            resp = (
                self._conn.user()
                .table("event_checklists")
                .insert({"event_id": event_id, "task_title": task_title})
                .execute()
            )
        row = first(resp)
        if not row:
            raise BackendError("Failed to add checklist item")
        return _to_checklist(row, event_id)

    def complete_checklist_item(self, item_id: str, *, completed_by: str, completed_at: str) -> None:
        updates = {
            "status": ChecklistStatus.COMPLETED.value,
            "completed_by": completed_by,
            "completed_at": completed_at,
        }
        with backend_call("complete checklist item"):
            self._conn.user().table("event_checklists").update(updates).eq("id", item_id).execute()

    def delete_checklist_item(self, item_id: str) -> None:
        with backend_call("delete checklist item"):
            self._conn.user().table("event_checklists").delete().eq("id", item_id).execute()

    def count(self, *, start: Optional[str] = None, end: Optional[str] = None) -> int:
        query = self._conn.user().table("events").select("id", count="exact", head=True)
        if start:
            query = query.gte("start_time", start)
        if end:
            query = query.lte("start_time", end)
        with backend_call("count events"):
            resp = query.execute()
        return int(resp.count or 0)
