from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from .model import AttendanceLog, OpenAttendance


class AttendanceRepository(Protocol):
    """Attendance logs. Clock-in/out go through procedures bound to the caller."""

    def get_open_attendance(self) -> Optional[OpenAttendance]:
        raise NotImplementedError

    def clock_in(self) -> str:
        """Open a log for the caller and return its id."""

        raise NotImplementedError

    def clock_out(self) -> str:
        """Close the caller's open log and return its id."""

        raise NotImplementedError

    def record_device(self, log_id: str, *, phase: str, device_id: str, device_name: str) -> None:
        """Stamp the device on a log; ``phase`` is ``clock_in`` or ``clock_out``."""

        raise NotImplementedError

    def list_mine(self, *, start: Optional[str] = None, end: Optional[str] = None) -> Sequence[AttendanceLog]:
        raise NotImplementedError

    def list_all(
        self,
        *,
        employee_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Sequence[AttendanceLog]:
        raise NotImplementedError

    def update(self, log_id: str, updates: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, log_id: str) -> None:
        raise NotImplementedError
