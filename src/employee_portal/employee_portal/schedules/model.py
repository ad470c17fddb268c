from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..core.enums import ScheduleStatus

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class Schedule:
    schedule_id: str
    employee_id: str
    schedule_date: str
    start_time: str
    end_time: str
    status: ScheduleStatus = ScheduleStatus.PENDING
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    created_by: Optional[str] = None
    confirmed_at: Optional[str] = None
    cancellation_requested_at: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[str] = None
    cancelled_by: Optional[str] = None
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id"] = data.pop("schedule_id")
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class NewSchedule:
    employee_id: str
    schedule_date: str
    start_time: str
    end_time: str
    created_by: str
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        row["status"] = ScheduleStatus.PENDING.value
        return row


@dataclass(frozen=True)
class ScheduleStats:
    pending: int
    cancellation_requested: int
    today: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "pending": self.pending,
            "cancellationRequested": self.cancellation_requested,
            "todaySchedules": self.today,
        }


@dataclass(frozen=True)
class ScheduleEmailLog:
    log_id: str
    schedule_id: str
    email_type: str
    recipient_email: str
    recipient_type: str
    status: str
    sent_at: Optional[str] = None
    error_message: Optional[str] = None
