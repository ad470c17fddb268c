from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..backend.base import backend_call, first, nested, rows
from ..backend.connection import BackendConnection
from ..core.enums import ScheduleStatus
from .model import NewSchedule, Schedule, ScheduleEmailLog
from .repository import ScheduleRepository

_SELECT = """
    *,
    employee:employees (
        id,
        display_name,
        position,
        profiles (email, full_name)
    )
"""


def _to_schedule(row: Dict[str, Any]) -> Schedule:
    employee_name = nested(row, "employee", "display_name") or nested(row, "employee", "profiles", "full_name")
    return Schedule(
        schedule_id=str(row["id"]),
        employee_id=str(row["employee_id"]),
        schedule_date=str(row["schedule_date"]),
        start_time=str(row["start_time"]),
        end_time=str(row["end_time"]),
        status=ScheduleStatus(row.get("status") or ScheduleStatus.PENDING.value),
        title=row.get("title"),
        description=row.get("description"),
        location=row.get("location"),
        created_by=row.get("created_by"),
        confirmed_at=row.get("confirmed_at"),
        cancellation_requested_at=row.get("cancellation_requested_at"),
        cancellation_reason=row.get("cancellation_reason"),
        cancelled_at=row.get("cancelled_at"),
        cancelled_by=row.get("cancelled_by"),
        employee_name=employee_name,
        employee_email=nested(row, "employee", "profiles", "email"),
    )


class SupabaseScheduleRepository(ScheduleRepository):
    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def get(self, schedule_id: str) -> Optional[Schedule]:
        with backend_call("load schedule"):
            resp = self._conn.user().table("schedules").select(_SELECT).eq("id", schedule_id).maybe_single().execute()
        row = first(resp)
        return _to_schedule(row) if row else None

    def list_schedules(
        self,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
        status: Optional[ScheduleStatus] = None,
        employee_id: Optional[str] = None,
    ) -> Sequence[Schedule]:
        query = (
            self._conn.user()
            .table("schedules")
            .select(_SELECT)
            .order("schedule_date")
            .order("start_time")
        )
        if start:
            query = query.gte("schedule_date", start)
        if end:
            query = query.lte("schedule_date", end)
        if status:
            query = query.eq("status", status.value)
        if employee_id:
            query = query.eq("employee_id", employee_id)
        with backend_call("list schedules"):
            resp = query.execute()
        return [_to_schedule(r) for r in rows(resp)]

    def create_many(self, schedules: Sequence[NewSchedule]) -> Sequence[Schedule]:
        if not schedules:
            return []
        with backend_call("create schedules"):
            resp = self._conn.user().table("schedules").insert([s.to_row() for s in schedules]).execute()
        return [_to_schedule(r) for r in rows(resp)]

    def update(
        self,
        schedule_id: str,
        updates: Dict[str, Any],
        *,
        expected_status: Optional[ScheduleStatus] = None,
    ) -> Optional[Schedule]:
        query = self._conn.user().table("schedules").update(updates).eq("id", schedule_id)
        if expected_status:
            query = query.eq("status", expected_status.value)
        with backend_call("update schedule"):
            resp = query.execute()
        row = first(resp)
        return _to_schedule(row) if row else None

    def delete(self, schedule_id: str) -> None:
        with backend_call("delete schedule"):
            self._conn.user().table("schedules").delete().eq("id", schedule_id).execute()

    def confirm(self, schedule_id: str) -> None:
        with backend_call("confirm schedule"):
            self._conn.user().rpc("confirm_schedule", {"p_schedule_id": schedule_id}).execute()

    def request_cancellation(self, schedule_id: str, reason: str) -> None:
        with backend_call("request schedule cancellation"):
            self._conn.user().rpc(
                "request_schedule_cancellation", {"p_schedule_id": schedule_id, "p_reason": reason}
            ).execute()

    def count(
        self,
        *,
        status: Optional[ScheduleStatus] = None,
        day: Optional[str] = None,
        exclude_status: Optional[ScheduleStatus] = None,
    ) -> int:
        query = self._conn.user().table("schedules").select("id", count="exact", head=True)
        if status:
            query = query.eq("status", status.value)
        if day:
            query = query.eq("schedule_date", day)
        if exclude_status:
            query = query.neq("status", exclude_status.value)
        with backend_call("count schedules"):
            resp = query.execute()
        return int(resp.count or 0)

    def log_email(
        self,
        *,
        schedule_id: str,
        email_type: str,
        recipient_email: str,
        recipient_type: str,
        status: str,
        error_message: Optional[str] = None,
    ) -> None:
        payload = {
            "schedule_id": schedule_id,
            "email_type": email_type,
            "recipient_email": recipient_email,
            "recipient_type": recipient_type,
            "status": status,
            "error_message": error_message,
        }
        with backend_call("log schedule email"):
            self._conn.user().table("schedule_email_logs").insert(payload).execute()

    def list_email_logs(self, schedule_id: str) -> Sequence[ScheduleEmailLog]:
        with backend_call("list schedule email logs"):
            resp = (
                self._conn.user()
                .table("schedule_email_logs")
                .select("*")
                .eq("schedule_id", schedule_id)
                .order("sent_at", desc=True)
                .execute()
            )
        return [
            ScheduleEmailLog(
                log_id=str(r["id"]),
                schedule_id=str(r["schedule_id"]),
                email_type=r["email_type"],
                recipient_email=r["recipient_email"],
                recipient_type=r["recipient_type"],
                status=r.get("status") or "sent",
                sent_at=r.get("sent_at"),
                error_message=r.get("error_message"),
            )
            for r in rows(resp)
        ]
