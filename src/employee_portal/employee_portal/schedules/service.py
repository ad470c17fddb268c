from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..cache import keys
from ..cache.query_cache import QueryCache
from ..common.datetime_utils import format_clock, format_date, now_utc, parse_iso_date, parse_time
from ..common.validators import optional_str, require_fields, require_non_empty
from ..core.constants import DEFAULT_UPCOMING_SCHEDULE_DAYS
from ..core.enums import RecipientType, ScheduleNotificationType, ScheduleStatus
from ..core.exceptions import AuthorizationError, BackendError, NotFoundError, ValidationError
from ..notifications.mailer import SendResult
from ..notifications.service import NotificationService
from ..users.model import SessionUser
from .model import WEEKDAYS, NewSchedule, Schedule, ScheduleEmailLog, ScheduleStats
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

_EDITABLE = ("schedule_date", "start_time", "end_time", "title", "description", "location", "status")

# schedule_email_logs.email_type only accepts these values.
_LOGGED_TYPES = {
    ScheduleNotificationType.SCHEDULE_ASSIGNED: "schedule_assigned",
    ScheduleNotificationType.SCHEDULE_CONFIRMED: "schedule_confirmed",
    ScheduleNotificationType.CANCELLATION_REQUESTED: "cancellation_requested",
    ScheduleNotificationType.CANCELLATION_APPROVED: "cancellation_approved",
    ScheduleNotificationType.ADMIN_CANCELLED: "schedule_cancelled_by_admin",
}

_MANAGER_FACING = (ScheduleNotificationType.SCHEDULE_CONFIRMED, ScheduleNotificationType.CANCELLATION_REQUESTED)


def _require_admin(user: SessionUser) -> None:
    if not user.is_admin:
        raise AuthorizationError("Only admin can manage schedules")


def plan_bulk_schedules(
    *,
    employee_id: str,
    start_date: str,
    end_date: str,
    days: Sequence[str],
    start_time: str,
    end_time: str,
    created_by: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> List[NewSchedule]:
    """One pending schedule per date in ``[start_date, end_date]`` whose weekday is in ``days``."""

    start = parse_iso_date(start_date)
    end = parse_iso_date(end_date)
    if end < start:
        raise ValidationError("End date must be on or after start date")
    parse_time(start_time)
    parse_time(end_time)

    wanted = {str(d).strip().lower() for d in days}
    unknown = wanted.difference(WEEKDAYS)
    if unknown:
        raise ValidationError(f"Invalid day: {sorted(unknown)[0]}")

    planned: List[NewSchedule] = []
    current = start
    while current <= end:
        if WEEKDAYS[current.weekday()] in wanted:
            planned.append(
                NewSchedule(
                    employee_id=employee_id,
                    schedule_date=current.isoformat(),
                    start_time=start_time,
                    end_time=end_time,
                    created_by=created_by,
                    title=title,
                    description=description,
                    location=location,
                )
            )
        current += timedelta(days=1)

    if not planned:
        raise ValidationError("No schedules to create")
    return planned


class ScheduleService:
    """Use case: schedule assignment and the confirm / cancel workflow."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        cache: QueryCache,
        notifications: Optional[NotificationService] = None,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._schedules = schedules
        self._cache = cache
        self._notifications = notifications
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    def get(self, schedule_id: str) -> Schedule:
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found")
        return schedule

    def list_schedules(
        self,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
        status: Optional[str] = None,
        employee_id: Optional[str] = None,
    ) -> Sequence[Schedule]:
        try:
            status_filter = ScheduleStatus(status) if status else None
        except ValueError:
            raise ValidationError("Invalid schedule status")
        return self._schedules.list_schedules(start=start, end=end, status=status_filter, employee_id=employee_id)

    def my_schedules(self, user: SessionUser, *, start: Optional[str] = None, end: Optional[str] = None) -> Sequence[Schedule]:
        return self._schedules.list_schedules(start=start, end=end, employee_id=user.user_id)

    def upcoming(self, employee_id: str, *, days: int = DEFAULT_UPCOMING_SCHEDULE_DAYS) -> List[Schedule]:
        today = self._today()
        found = self._schedules.list_schedules(
            start=today.isoformat(),
            end=(today + timedelta(days=days)).isoformat(),
            employee_id=employee_id,
        )
        return [s for s in found if s.status != ScheduleStatus.CANCELLED]

    def create_schedule(self, *, current_user: SessionUser, payload: Mapping[str, Any]) -> Schedule:
        _require_admin(current_user)
        require_fields(payload, "employee_id", "schedule_date", "start_time", "end_time")
        parse_iso_date(payload["schedule_date"])
        parse_time(payload["start_time"])
        parse_time(payload["end_time"])

        new = NewSchedule(
            employee_id=str(payload["employee_id"]),
            schedule_date=str(payload["schedule_date"]),
            start_time=str(payload["start_time"]),
            end_time=str(payload["end_time"]),
            created_by=current_user.user_id,
            title=optional_str(payload.get("title")),
            description=optional_str(payload.get("description")),
            location=optional_str(payload.get("location")),
        )
        created = self._schedules.create_many([new])
        if not created:
            raise BackendError("Failed to create schedule")
        self._invalidate(new.employee_id)
        return created[0]

    def create_bulk(self, *, current_user: SessionUser, payload: Mapping[str, Any]) -> Sequence[Schedule]:
        _require_admin(current_user)
        require_fields(payload, "employee_id", "start_date", "end_date", "days", "start_time", "end_time")
        planned = plan_bulk_schedules(
            employee_id=str(payload["employee_id"]),
            start_date=str(payload["start_date"]),
            end_date=str(payload["end_date"]),
            days=payload["days"],
            start_time=str(payload["start_time"]),
            end_time=str(payload["end_time"]),
            created_by=current_user.user_id,
            title=optional_str(payload.get("title")),
            description=optional_str(payload.get("description")),
            location=optional_str(payload.get("location")),
        )
        created = self._schedules.create_many(planned)
        self._invalidate(planned[0].employee_id)
        logger.info("Created %d schedules for %s", len(created), planned[0].employee_id)
        return created

    def update_schedule(self, *, current_user: SessionUser, schedule_id: str, payload: Mapping[str, Any]) -> Schedule:
        _require_admin(current_user)
        updates: Dict[str, Any] = {k: payload[k] for k in _EDITABLE if k in payload}
        if not updates:
            raise ValidationError("Nothing to update")
        if "status" in updates:
            try:
                updates["status"] = ScheduleStatus(updates["status"]).value
            except ValueError:
                raise ValidationError("Invalid schedule status")
        updated = self._schedules.update(schedule_id, updates)
        if updated is None:
            raise NotFoundError("Schedule not found")
        self._invalidate(updated.employee_id)
        return updated

    def delete_schedule(self, *, current_user: SessionUser, schedule_id: str) -> None:
        _require_admin(current_user)
        schedule = self.get(schedule_id)
        self._schedules.delete(schedule_id)
        self._invalidate(schedule.employee_id)

    def confirm(self, *, current_user: SessionUser, schedule_id: str) -> None:
        self._schedules.confirm(schedule_id)
        self._invalidate(current_user.user_id)

    def request_cancellation(self, *, current_user: SessionUser, schedule_id: str, reason: Optional[str]) -> None:
        reason = require_non_empty(reason, "Reason")
        self._schedules.request_cancellation(schedule_id, reason)
        self._invalidate(current_user.user_id)

    def approve_cancellation(self, *, current_user: SessionUser, schedule_id: str) -> Schedule:
        _require_admin(current_user)
        updated = self._schedules.update(
            schedule_id,
            {
                "status": ScheduleStatus.CANCELLED.value,
                "cancelled_at": self._now_iso(),
                "cancelled_by": current_user.user_id,
            },
            expected_status=ScheduleStatus.CANCELLATION_REQUESTED,
        )
        if updated is None:
            raise NotFoundError("No pending cancellation request for this schedule")
        self._invalidate(updated.employee_id)
        return updated

    def admin_cancel(self, *, current_user: SessionUser, schedule_id: str, reason: Optional[str] = None) -> Schedule:
        _require_admin(current_user)
        updated = self._schedules.update(
            schedule_id,
            {
                "status": ScheduleStatus.CANCELLED.value,
                "cancelled_at": self._now_iso(),
                "cancelled_by": current_user.user_id,
                "cancellation_reason": optional_str(reason) or "Cancelled by admin",
            },
        )
        if updated is None:
            raise NotFoundError("Schedule not found")
        self._invalidate(updated.employee_id)
        return updated

    def pending_cancellations(self) -> Sequence[Schedule]:
        found = self._schedules.list_schedules(status=ScheduleStatus.CANCELLATION_REQUESTED)
        return sorted(found, key=lambda s: s.cancellation_requested_at or "")

    def pending_confirmations(self) -> Sequence[Schedule]:
        return self._schedules.list_schedules(status=ScheduleStatus.PENDING)

    def stats(self) -> ScheduleStats:
        return ScheduleStats(
            pending=self._schedules.count(status=ScheduleStatus.PENDING),
            cancellation_requested=self._schedules.count(status=ScheduleStatus.CANCELLATION_REQUESTED),
            today=self._schedules.count(day=self._today().isoformat(), exclude_status=ScheduleStatus.CANCELLED),
        )

    def email_logs(self, schedule_id: str) -> Sequence[ScheduleEmailLog]:
        return self._schedules.list_email_logs(schedule_id)

    # ------------------------------------------------------------------
    # notifications
    # ------------------------------------------------------------------

    def notify(self, *, schedule_id: Optional[str], notification_type: Optional[str], reason: Optional[str] = None) -> SendResult:
        """Email the employee (and admins) about a schedule change, then log the send."""

        if not schedule_id or not notification_type:
            raise ValidationError("Missing required fields")
        try:
            kind = ScheduleNotificationType(notification_type)
        except ValueError:
            raise ValidationError("Invalid notification type")

        try:
            schedule = self._schedules.get(schedule_id)
        except BackendError:
            schedule = None
        if schedule is None:
            raise NotFoundError("Schedule not found")

        name = schedule.employee_name or "Employee"
        email = schedule.employee_email
        if not email and kind != ScheduleNotificationType.CANCELLATION_REQUESTED:
            raise ValidationError("Employee email not found")

        result = self._send(kind, schedule, name, email, reason)
        if not result.success:
            logger.error("Email send failed: %s", result.error)

        email_type = _LOGGED_TYPES.get(kind)
        if email_type:
            recipient_type = RecipientType.MANAGER if kind in _MANAGER_FACING else RecipientType.EMPLOYEE
            try:
                self._schedules.log_email(
                    schedule_id=schedule_id,
                    email_type=email_type,
                    recipient_email=email or "managers",
                    recipient_type=recipient_type.value,
                    status="sent" if result.success else "failed",
                    error_message=result.error,
                )
            except BackendError as e:
                logger.error("Failed to log email: %s", e)
        return result

    def _send(
        self,
        kind: ScheduleNotificationType,
        schedule: Schedule,
        name: str,
        email: Optional[str],
        reason: Optional[str],
    ) -> SendResult:
        if self._notifications is None:
            return SendResult(success=False, error="Email is not configured")

        n = self._notifications
        when = dict(
            employee_name=name,
            schedule_date=format_date(schedule.schedule_date),
            start_time=format_clock(schedule.start_time),
            end_time=format_clock(schedule.end_time),
        )
        if kind == ScheduleNotificationType.SCHEDULE_ASSIGNED:
            return n.schedule_assigned(employee_email=email, notes=schedule.description, **when)
        if kind == ScheduleNotificationType.SCHEDULE_CONFIRMED:
            return n.schedule_confirmed(employee_email=email, **when)
        if kind == ScheduleNotificationType.CANCELLATION_REQUESTED:
            return n.cancellation_requested(
                reason=reason or schedule.cancellation_reason or "No reason provided", **when
            )
        if kind == ScheduleNotificationType.CANCELLATION_APPROVED:
            return n.cancellation_approved(employee_email=email, **when)
        if kind == ScheduleNotificationType.ADMIN_CANCELLED:
            return n.admin_cancelled(employee_email=email, reason=reason or schedule.cancellation_reason, **when)
        return n.schedule_deleted(employee_email=email, reason=reason, **when)

    def bulk_notify(self, payload: Mapping[str, Any]) -> SendResult:
        require_fields(payload, "employeeName", "scheduleCount", "startDate", "endDate", "days")
        if self._notifications is None:
            return SendResult(success=False, error="Email is not configured")
        return self._notifications.bulk_schedules_created(
            employee_name=str(payload["employeeName"]),
            schedule_count=int(payload["scheduleCount"]),
            start_date=format_date(payload["startDate"]),
            end_date=format_date(payload["endDate"]),
            days=list(payload["days"]),
            start_time=format_clock(str(payload.get("startTime") or "")),
            end_time=format_clock(str(payload.get("endTime") or "")),
        )

    def _invalidate(self, employee_id: str) -> None:
        self._cache.invalidate_key(keys.ADMIN_STATS)
        self._cache.invalidate_key(keys.employee_dashboard(employee_id))
