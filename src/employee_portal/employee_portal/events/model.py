from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ..core.enums import ChecklistStatus

EVENT_FIELDS = ("title", "start_time", "end_time", "room", "expected_headcount", "notes")


@dataclass(frozen=True)
class StaffAssignment:
    assignment_id: str
    event_id: str
    employee_id: str
    role: str
    employee_name: Optional[str] = None
    position: Optional[str] = None


@dataclass(frozen=True)
class ChecklistItem:
    item_id: str
    event_id: str
    task_title: str
    status: ChecklistStatus = ChecklistStatus.PENDING
    completed_by: Optional[str] = None
    completed_at: Optional[str] = None


@dataclass(frozen=True)
class Event:
    event_id: str
    title: str
    start_time: str
    end_time: str
    room: Optional[str] = None
    expected_headcount: Optional[int] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    staff: List[StaffAssignment] = field(default_factory=list)
    checklist: List[ChecklistItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id"] = data.pop("event_id")
        data["staff"] = [
            {"id": s.assignment_id, "employee_id": s.employee_id, "role": s.role, "employee_name": s.employee_name}
            for s in self.staff
        ]
        data["checklist"] = [
            {
                "id": c.item_id,
                "task_title": c.task_title,
                "status": c.status.value,
                "completed_by": c.completed_by,
                "completed_at": c.completed_at,
            }
            for c in self.checklist
        ]
        return data
