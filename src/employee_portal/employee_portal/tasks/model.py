from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..core.enums import TaskInstanceStatus

TASK_FIELDS = (
    "title",
    "description",
    "is_recurring",
    "frequency",
    "location",
    "role_target",
    "cutoff_time",
    "requires_photo",
    "requires_video",
    "requires_notes",
)


@dataclass(frozen=True)
class Task:
    """Task template; instances assign it to an employee for a date."""

    task_id: str
    title: str
    description: Optional[str] = None
    is_recurring: bool = False
    frequency: Optional[str] = None
    location: Optional[str] = None
    role_target: Optional[str] = None
    cutoff_time: Optional[str] = None
    requires_photo: bool = False
    requires_video: bool = False
    requires_notes: bool = False
    created_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id"] = data.pop("task_id")
        return data


@dataclass(frozen=True)
class TaskInstance:
    instance_id: str
    task_id: str
    employee_id: str
    scheduled_date: str
    status: TaskInstanceStatus = TaskInstanceStatus.PENDING
    completed_at: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    video_url: Optional[str] = None
    task_title: Optional[str] = None
    task_description: Optional[str] = None
    task_location: Optional[str] = None
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id"] = data.pop("instance_id")
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    overdue: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)
