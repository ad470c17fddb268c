from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import ScheduleStatus
from .model import NewSchedule, Schedule, ScheduleEmailLog


class ScheduleRepository(Protocol):
    def get(self, schedule_id: str) -> Optional[Schedule]:
        """Schedule joined with its employee's name and email."""

        raise NotImplementedError

    def list_schedules(
        self,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
        status: Optional[ScheduleStatus] = None,
        employee_id: Optional[str] = None,
    ) -> Sequence[Schedule]:
        raise NotImplementedError

    def create_many(self, schedules: Sequence[NewSchedule]) -> Sequence[Schedule]:
        raise NotImplementedError

    def update(
        self,
        schedule_id: str,
        updates: Dict[str, Any],
        *,
        expected_status: Optional[ScheduleStatus] = None,
    ) -> Optional[Schedule]:
        """Apply ``updates``; returns ``None`` when nothing matched (missing or wrong status)."""

        raise NotImplementedError

    def delete(self, schedule_id: str) -> None:
        raise NotImplementedError

    def confirm(self, schedule_id: str) -> None:
        raise NotImplementedError

    def request_cancellation(self, schedule_id: str, reason: str) -> None:
        raise NotImplementedError

    def count(
        self,
        *,
        status: Optional[ScheduleStatus] = None,
        day: Optional[str] = None,
        exclude_status: Optional[ScheduleStatus] = None,
    ) -> int:
        raise NotImplementedError

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
        raise NotImplementedError

    def list_email_logs(self, schedule_id: str) -> Sequence[ScheduleEmailLog]:
        raise NotImplementedError
