from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AdminStats:
    active_employees: int = 0
    clocked_in_today: int = 0
    tasks_completed_today: int = 0
    tasks_pending_today: int = 0
    events_today: int = 0
    events_this_week: int = 0
    schedules_pending_confirmation: int = 0
    schedules_cancellation_requested: int = 0

    @classmethod
    def from_row(cls, row: Optional[Dict[str, Any]]) -> "AdminStats":
        row = row or {}
        return cls(**{name: int(row.get(name) or 0) for name in cls.__dataclass_fields__})

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class EmployeeDashboard:
    open_attendance: Optional[Dict[str, Any]] = None
    today_tasks: List[Dict[str, Any]] = field(default_factory=list)
    upcoming_events: List[Dict[str, Any]] = field(default_factory=list)
    active_policies: List[Dict[str, Any]] = field(default_factory=list)
    device_info: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, data: Optional[Dict[str, Any]]) -> "EmployeeDashboard":
        data = data or {}
        return cls(
            open_attendance=data.get("open_attendance"),
            today_tasks=list(data.get("today_tasks") or []),
            upcoming_events=list(data.get("upcoming_events") or []),
            active_policies=list(data.get("active_policies") or []),
            device_info=data.get("device_info"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
