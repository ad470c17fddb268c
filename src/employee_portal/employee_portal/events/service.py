from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..cache import keys
from ..cache.query_cache import QueryCache
from ..common.datetime_utils import format_date, format_time, now_utc
from ..common.validators import optional_str, require_fields, require_non_empty
from ..core.constants import DEFAULT_UPCOMING_EVENTS_LIMIT
from ..core.enums import EventNotificationType
from ..core.exceptions import BackendError, NotFoundError, ValidationError
from ..notifications.mailer import SendResult
from ..notifications.service import NotificationService
from ..users.model import SessionUser
from ..users.repository import UserRepository
from .model import EVENT_FIELDS, ChecklistItem, Event, StaffAssignment
from .repository import EventRepository


def _event_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name in EVENT_FIELDS:
        if name not in payload:
            continue
        if name == "expected_headcount":
            value = payload[name]
            try:
                fields[name] = int(value) if value not in (None, "") else None
            except (TypeError, ValueError):
                raise ValidationError("Expected headcount must be a number")
        else:
            fields[name] = optional_str(payload[name])
    return fields


class EventService:
    """Use case: events, staffing and event checklists."""

    def __init__(
        self,
        events: EventRepository,
        users: UserRepository,
        cache: QueryCache,
        notifications: Optional[NotificationService] = None,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._events = events
        self._users = users
        self._cache = cache
        self._notifications = notifications
        self._clock = clock

    def list_events(
        self, *, start: Optional[str] = None, end: Optional[str] = None, room: Optional[str] = None
    ) -> Sequence[Event]:
        if start or end or room:
            return self._events.list_events(start=start, end=end, room=room)
        return self._cache.get(keys.EVENTS, self._events.list_events)

    def today(self) -> Sequence[Event]:
        day = self._clock().date()
        start = datetime.combine(day, time.min, tzinfo=self._clock().tzinfo)
        end = start + timedelta(days=1) - timedelta(microseconds=1)
        return self._events.list_events(start=start.isoformat(), end=end.isoformat())

    def get(self, event_id: str) -> Event:
        event = self._events.get(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def create(self, *, current_user: SessionUser, payload: Mapping[str, Any]) -> Event:
        require_fields(payload, "title", "start_time", "end_time")
        fields = _event_fields(payload)
        fields["created_by"] = current_user.user_id
        event = self._events.create(fields)
        self._invalidate()
        return event

    def update(self, event_id: str, payload: Mapping[str, Any]) -> Event:
        updates = _event_fields(payload)
        if "title" in updates:
            updates["title"] = require_non_empty(updates["title"], "Title")
        if not updates:
            raise ValidationError("Nothing to update")
        event = self._events.update(event_id, updates)
        if event is None:
            raise NotFoundError("Event not found")
        self._invalidate()
        return event

    def delete(self, event_id: str) -> None:
        self._events.delete(event_id)
        self._invalidate()

    def my_upcoming(self, user: SessionUser, *, limit: int = DEFAULT_UPCOMING_EVENTS_LIMIT) -> Sequence[Dict[str, Any]]:
        return self._cache.get(keys.employee_events(user.user_id), lambda: self._events.my_upcoming(limit))

    def assign_staff(self, event_id: str, payload: Mapping[str, Any]) -> StaffAssignment:
        require_fields(payload, "employee_id")
        role = optional_str(payload.get("role")) or "Staff"
        assignment = self._events.assign_staff(event_id=event_id, employee_id=str(payload["employee_id"]), role=role)
        self._invalidate()
        return assignment

    def remove_staff(self, assignment_id: str) -> None:
        self._events.remove_staff(assignment_id)
        self._invalidate()

    def add_checklist_item(self, event_id: str, task_title: Optional[str]) -> ChecklistItem:
        item = self._events.add_checklist_item(event_id=event_id, task_title=require_non_empty(task_title, "Task title"))
        self._cache.invalidate_key(keys.EVENTS)
        return item

    def complete_checklist_item(self, *, user: SessionUser, item_id: str) -> None:
        self._events.complete_checklist_item(item_id, completed_by=user.user_id, completed_at=self._clock().isoformat())
        self._cache.invalidate_key(keys.EVENTS)

    def delete_checklist_item(self, item_id: str) -> None:
        self._events.delete_checklist_item(item_id)
        self._cache.invalidate_key(keys.EVENTS)

    def count(self, *, start: Optional[str] = None, end: Optional[str] = None) -> int:
        return self._events.count(start=start, end=end)

    def _invalidate(self) -> None:
        self._cache.invalidate_key(keys.EVENTS)
        self._cache.invalidate_key(keys.ADMIN_STATS)
        self._cache.invalidate("employee:events:")
        self._cache.invalidate("employee:dashboard:")

    # ------------------------------------------------------------------
    # notifications
    # ------------------------------------------------------------------

    def notify(self, payload: Mapping[str, Any]) -> SendResult:
        event_id = payload.get("eventId")
        employee_id = payload.get("employeeId")
        kind = payload.get("type")
        if not event_id or not employee_id or not kind:
            raise ValidationError("Missing required fields")

        try:
            event = self._events.get(event_id)
        except BackendError:
            event = None
        if event is None:
            raise NotFoundError("Event not found")

        try:
            employee = self._users.get_employee(employee_id)
        except BackendError:
            employee = None
        if employee is None:
            raise NotFoundError("Employee not found")
        if not employee.email:
            raise ValidationError("Employee email not found")

        event_date = format_date(event.start_time)
        start = format_time(event.start_time)
        end = format_time(event.end_time) if event.end_time else ""
        event_time = f"{start} - {end}" if end else start
        name = employee.display_name or "Employee"

        if kind == EventNotificationType.EVENT_ASSIGNED.value:
            if self._notifications is None:
                return SendResult(success=False, error="Email is not configured")
            return self._notifications.event_assigned(
                employee_name=name,
                employee_email=employee.email,
                event_title=event.title,
                event_date=event_date,
                event_time=event_time,
                room=event.room,
                role=optional_str(payload.get("role")) or "Staff",
            )
        if kind == EventNotificationType.EVENT_REMOVED.value:
            if self._notifications is None:
                return SendResult(success=False, error="Email is not configured")
            return self._notifications.event_removed(
                employee_name=name,
                employee_email=employee.email,
                event_title=event.title,
                event_date=event_date,
            )
        raise ValidationError("Invalid notification type")
