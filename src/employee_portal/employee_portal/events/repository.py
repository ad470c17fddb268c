from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from .model import ChecklistItem, Event, StaffAssignment


class EventRepository(Protocol):
    def list_events(
        self, *, start: Optional[str] = None, end: Optional[str] = None, room: Optional[str] = None
    ) -> Sequence[Event]:
        raise NotImplementedError

    def get(self, event_id: str) -> Optional[Event]:
        """Event with its staff assignments and checklist."""

        raise NotImplementedError

    def create(self, fields: Dict[str, Any]) -> Event:
        raise NotImplementedError

    def update(self, event_id: str, updates: Dict[str, Any]) -> Optional[Event]:
        raise NotImplementedError

    def delete(self, event_id: str) -> None:
        raise NotImplementedError

    def my_upcoming(self, limit: int) -> Sequence[Dict[str, Any]]:
        raise NotImplementedError

    def assign_staff(self, *, event_id: str, employee_id: str, role: str) -> StaffAssignment:
        raise NotImplementedError

    def remove_staff(self, assignment_id: str) -> None:
        raise NotImplementedError

    def add_checklist_item(self, *, event_id: str, task_title: str) -> ChecklistItem:
        raise NotImplementedError

    def complete_checklist_item(self, item_id: str, *, completed_by: str, completed_at: str) -> None:
        raise NotImplementedError

    def delete_checklist_item(self, item_id: str) -> None:
        raise NotImplementedError

    def count(self, *, start: Optional[str] = None, end: Optional[str] = None) -> int:
        raise NotImplementedError
