from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..backend.base import backend_call, first, nested, rows
from ..backend.connection import BackendConnection
from ..core.exceptions import BackendError
from .model import AttendanceLog, OpenAttendance
from .repository import AttendanceRepository

_PHASES = ("clock_in", "clock_out")


def _to_log(row: Dict[str, Any]) -> AttendanceLog:
    hours = row.get("total_hours")
    return AttendanceLog(
        log_id=str(row["id"]),
        employee_id=str(row["employee_id"]),
        clock_in=row["clock_in"],
        clock_out=row.get("clock_out"),
        total_hours=float(hours) if hours is not None else None,
        late_flag=bool(row.get("late_flag")),
        early_checkout_flag=bool(row.get("early_checkout_flag")),
        clock_in_device_id=row.get("clock_in_device_id"),
        clock_in_device_name=row.get("clock_in_device_name"),
        clock_out_device_id=row.get("clock_out_device_id"),
        clock_out_device_name=row.get("clock_out_device_name"),
        employee_name=nested(row, "employees", "display_name"),
        employee_position=nested(row, "employees", "position"),
    )


def _scalar(resp) -> Optional[str]:
    data = resp.data if resp is not None else None
    if isinstance(data, list):
        data = data[0] if data else None
    return str(data) if data else None


class SupabaseAttendanceRepository(AttendanceRepository):
    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def get_open_attendance(self) -> Optional[OpenAttendance]:
        with backend_call("load open attendance"):
            resp = self._conn.user().rpc("get_open_attendance", {}).execute()
        row = first(resp)
        if not row:
            return None
        return OpenAttendance(log_id=str(row["id"]), clock_in=row["clock_in"])

    def clock_in(self) -> str:
        with backend_call("clock in"):
            resp = self._conn.user().rpc("clock_in", {}).execute()
        log_id = _scalar(resp)
        if not log_id:
            raise BackendError("Clock in failed")
        return log_id

    def clock_out(self) -> str:
        with backend_call("clock out"):
            resp = self._conn.user().rpc("clock_out", {}).execute()
        log_id = _scalar(resp)
        if not log_id:
            raise BackendError("Clock out failed")
        return log_id

    def record_device(self, log_id: str, *, phase: str, device_id: str, device_name: str) -> None:
        if phase not in _PHASES:
            raise ValueError(f"Unknown phase: {phase}")
        updates = {f"{phase}_device_id": device_id, f"{phase}_device_name": device_name}
        with backend_call("record attendance device"):
            self._conn.user().table("attendance_logs").update(updates).eq("id", log_id).execute()

    def list_mine(self, *, start: Optional[str] = None, end: Optional[str] = None) -> Sequence[AttendanceLog]:
        query = self._conn.user().table("attendance_logs").select("*").order("clock_in", desc=True)
        if start:
            query = query.gte("clock_in", start)
        if end:
            query = query.lte("clock_in", end)
        with backend_call("list attendance"):
            resp = query.execute()
        return [_to_log(r) for r in rows(resp)]

    def list_all(
        self,
        *,
        employee_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Sequence[AttendanceLog]:
        query = (
            self._conn.user()
            .table("attendance_logs")
            .select("*, employees (id, display_name, position)")
            .order("clock_in", desc=True)
        )
        if employee_id:
            query = query.eq("employee_id", employee_id)
        if start:
            query = query.gte("clock_in", start)
        if end:
            query = query.lte("clock_in", end)
        with backend_call("list all attendance"):
            resp = query.execute()
        return [_to_log(r) for r in rows(resp)]

    def update(self, log_id: str, updates: Dict[str, Any]) -> None:
        with backend_call("update attendance"):
            self._conn.user().table("attendance_logs").update(updates).eq("id", log_id).execute()

    def delete(self, log_id: str) -> None:
        with backend_call("delete attendance"):
            self._conn.user().table("attendance_logs").delete().eq("id", log_id).execute()
