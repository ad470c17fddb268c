from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import RecipientType
from ..core.exceptions import BackendError, ValidationError
from .mailer import Mailer, SendResult
from .model import NotificationRecipient
from .repository import RecipientRepository
from .templates import EmailRenderer, Notice, details, join_days

logger = logging.getLogger(__name__)

_OK = SendResult(success=True)


class NotificationService:
    """Email notifications for portal events.

    Employee-facing messages go to the affected employee; admin-facing copies go to
    the configured admin address, every active admin profile and every active
    notification recipient (deduplicated). Sending never raises: the result of the
    primary message is returned and failures are logged.
    """

    def __init__(
        self,
        mailer: Mailer,
        renderer: EmailRenderer,
        recipients: RecipientRepository,
        *,
        admin_email: Optional[str] = None,
    ):
        self._mailer = mailer
        self._renderer = renderer
        self._recipients = recipients
        self._admin_email = admin_email

    # ------------------------------------------------------------------
    # recipients
    # ------------------------------------------------------------------

    def admin_recipients(self) -> List[str]:
        """Admin address + active custom recipients + active admin profiles."""
        try:
            custom = list(self._recipients.list_active_recipient_emails())
        except BackendError:
            logger.exception("Failed to fetch notification recipients")
            custom = []
        try:
            admins = list(self._recipients.list_active_admin_emails())
        except BackendError:
            logger.exception("Failed to fetch admin emails")
            admins = []

        seen = set()
        result: List[str] = []
        for email in [self._admin_email, *custom, *admins]:
            if not email or email in seen:
                continue
            seen.add(email)
            result.append(email)
        return result

    def list_recipients(self) -> Sequence[NotificationRecipient]:
        return self._recipients.list_recipients()

    def add_recipient(self, *, email: str, name: Optional[str], recipient_type: str) -> NotificationRecipient:
        email = require_non_empty(email, "Email").lower()
        try:
            rtype = RecipientType(recipient_type)
        except ValueError:
            raise ValidationError("Invalid recipient type")
        if rtype == RecipientType.EMPLOYEE:
            raise ValidationError("Invalid recipient type")
        return self._recipients.add_recipient(email=email, name=name, recipient_type=rtype)

    def remove_recipient(self, recipient_id: str) -> None:
        self._recipients.remove_recipient(recipient_id)

    def toggle_recipient(self, recipient_id: str, *, is_active: bool) -> None:
        self._recipients.set_active(recipient_id, is_active=is_active)

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    def _send(self, to, subject: str, notice: Notice) -> SendResult:
        return self._mailer.send(to=to, subject=subject, html=self._renderer.render_notice(notice))

    def _notify_admins(self, subject: str, notice: Notice) -> SendResult:
        recipients = self.admin_recipients()
        if not recipients:
            return _OK
        return self._send(recipients, subject, notice)

    # ------------------------------------------------------------------
    # account
    # ------------------------------------------------------------------

    def welcome(self, *, employee_name: str, email: str, temp_password: str) -> SendResult:
        company = self._renderer.company_name
        html = self._renderer.render(
            "welcome.html",
            employee_name=employee_name,
            email=email,
            temp_password=temp_password,
            login_url=self._renderer.url("/login"),
        )
        return self._mailer.send(to=email, subject=f"Welcome to {company} - Your Account Details", html=html)

    def employee_created(self, *, employee_name: str, email: str, position: Optional[str], created_at: str) -> SendResult:
        return self._notify_admins(
            f"New Employee Created - {employee_name}",
            Notice(
                heading="New Employee Created",
                intro="A new employee account has been created in the system.",
                details_title="New Hire Details",
                details=details(("Name", employee_name), ("Email", email), ("Position", position), ("Created", created_at)),
                button_label="View Employees",
                button_path="/admin/employees",
                tone="success",
            ),
        )

    def employee_deactivated(self, *, employee_name: str) -> SendResult:
        return self._notify_admins(
            f"Employee Deactivated - {employee_name}",
            Notice(
                heading="Employee Deactivated",
                intro="An employee account has been deactivated.",
                details=details(("Employee", employee_name), ("Status", "Inactive")),
                button_label="View Employees",
                button_path="/admin/employees",
                tone="warning",
            ),
        )

    def employee_deleted(
        self, *, employee_name: str, email: Optional[str], position: Optional[str], deleted_at: str
    ) -> SendResult:
        company = self._renderer.company_name
        result = SendResult(success=False, error="No employee email")
        if email:
            result = self._send(
                email,
                f"Your {company} Account Has Been Removed",
                Notice(
                    heading="Account Removed",
                    greeting_name=employee_name,
                    intro=f"Your employee account at {company} has been removed from the system.",
                    details=details(("Effective", deleted_at)),
                    outro=(
                        "If you believe this was done in error, please contact your manager or HR.",
                        f"Thank you for your time with {company}.",
                    ),
                    tone="danger",
                ),
            )
            if not result.success:
                logger.warning("Could not send deletion email to %s: %s", email, result.error)

        self._notify_admins(
            f"Employee Deleted - {employee_name}",
            Notice(
                heading="Employee Permanently Deleted",
                intro="An employee has been permanently deleted from the system.",
                details_title="Deletion Details",
                details=details(("Employee", employee_name), ("Email", email), ("Position", position), ("Deleted", deleted_at)),
                warning="This action cannot be undone.",
                button_label="View Employees",
                button_path="/admin/employees",
                tone="danger",
            ),
        )
        return result

    # ------------------------------------------------------------------
    # schedules
    # ------------------------------------------------------------------

    def schedule_assigned(
        self,
        *,
        employee_name: str,
        employee_email: str,
        schedule_date: str,
        start_time: str,
        end_time: str,
        notes: Optional[str] = None,
    ) -> SendResult:
        when = f"{start_time} - {end_time}"
        result = self._send(
            employee_email,
            f"New Schedule Assigned - {schedule_date}",
            Notice(
                heading="New Schedule Assigned",
                greeting_name=employee_name,
                intro="You have been assigned a new work schedule.",
                details_title="Schedule Details",
                details=details(("Date", schedule_date), ("Time", when), ("Notes", notes)),
                outro=("Please log in to the portal to confirm your schedule.",),
                button_label="View Schedule",
                button_path="/employee/schedules",
            ),
        )
        self._notify_admins(
            f"Schedule Assigned - {employee_name} ({schedule_date})",
            Notice(
                heading="Schedule Assigned",
                intro="A new schedule has been assigned to an employee.",
                details_title="Schedule Details",
                details=details(("Employee", employee_name), ("Date", schedule_date), ("Time", when), ("Notes", notes)),
                button_label="View Schedules",
                button_path="/admin/schedules",
            ),
        )
        return result

    def schedule_confirmed(
        self, *, employee_name: str, employee_email: str, schedule_date: str, start_time: str, end_time: str
    ) -> SendResult:
        when = f"{start_time} - {end_time}"
        result = self._send(
            employee_email,
            f"Schedule Confirmed - {schedule_date}",
            Notice(
                heading="Schedule Confirmed",
                greeting_name=employee_name,
                intro="Your schedule has been confirmed successfully.",
                details_title="Confirmed Schedule",
                details=details(("Date", schedule_date), ("Time", when)),
                outro=("Thank you for confirming. Please arrive on time for your shift.",),
                button_label="View My Schedules",
                button_path="/employee/schedules",
                tone="success",
            ),
        )
        self._notify_admins(
            f"Schedule Confirmed - {employee_name} ({schedule_date})",
            Notice(
                heading="Schedule Confirmed",
                intro="An employee has confirmed their schedule.",
                details_title="Confirmation Details",
                details=details(("Employee", employee_name), ("Date", schedule_date), ("Time", when)),
                button_label="View Schedules",
                button_path="/admin/schedules",
            ),
        )
        return result

    def cancellation_requested(
        self, *, employee_name: str, schedule_date: str, start_time: str, end_time: str, reason: str
    ) -> SendResult:
        return self._notify_admins(
            f"Cancellation Request - {employee_name} ({schedule_date})",
            Notice(
                heading="Cancellation Request",
                intro="An employee has requested to cancel their schedule.",
                details_title="Request Details",
                details=details(
                    ("Employee", employee_name),
                    ("Date", schedule_date),
                    ("Time", f"{start_time} - {end_time}"),
                    ("Reason", reason),
                ),
                outro=("Please review and approve or deny this request.",),
                button_label="Review Request",
                button_path="/admin/schedules",
                tone="warning",
            ),
        )

    def cancellation_approved(
        self, *, employee_name: str, employee_email: str, schedule_date: str, start_time: str, end_time: str
    ) -> SendResult:
        when = f"{start_time} - {end_time}"
        result = self._send(
            employee_email,
            f"Schedule Cancellation Approved - {schedule_date}",
            Notice(
                heading="Cancellation Approved",
                greeting_name=employee_name,
                intro="Your schedule cancellation request has been approved.",
                details_title="Cancelled Schedule",
                details=details(("Date", schedule_date), ("Time", when)),
                outro=("You are no longer scheduled to work on this date.",),
                tone="success",
            ),
        )
        self._notify_admins(
            f"Schedule Cancelled - {employee_name} ({schedule_date})",
            Notice(
                heading="Schedule Cancelled",
                intro="A schedule cancellation has been approved.",
                details_title="Details",
                details=details(("Employee", employee_name), ("Date", schedule_date), ("Time", when)),
                tone="muted",
            ),
        )
        return result

    def admin_cancelled(
        self,
        *,
        employee_name: str,
        employee_email: str,
        schedule_date: str,
        start_time: str,
        end_time: str,
        reason: Optional[str] = None,
    ) -> SendResult:
        when = f"{start_time} - {end_time}"
        result = self._send(
            employee_email,
            f"Schedule Cancelled - {schedule_date}",
            Notice(
                heading="Schedule Cancelled",
                greeting_name=employee_name,
                intro="Your schedule has been cancelled by management.",
                details_title="Cancelled Schedule",
                details=details(("Date", schedule_date), ("Time", when), ("Reason", reason)),
                outro=("If you have any questions, please contact your manager.",),
                tone="danger",
            ),
        )
        self._notify_admins(
            f"Schedule Cancelled - {employee_name} ({schedule_date})",
            Notice(
                heading="Schedule Cancelled by Admin",
                intro="A schedule has been cancelled by management.",
                details_title="Cancelled Schedule",
                details=details(("Employee", employee_name), ("Date", schedule_date), ("Time", when), ("Reason", reason)),
                button_label="View Schedules",
                button_path="/admin/schedules",
                tone="danger",
            ),
        )
        return result

    def schedule_deleted(
        self,
        *,
        employee_name: str,
        employee_email: str,
        schedule_date: str,
        start_time: str,
        end_time: str,
        reason: Optional[str] = None,
    ) -> SendResult:
        when = f"{start_time} - {end_time}"
        result = self._send(
            employee_email,
            f"Schedule Removed - {schedule_date}",
            Notice(
                heading="Schedule Removed",
                greeting_name=employee_name,
                intro="A schedule assigned to you has been removed.",
                details_title="Removed Schedule",
                details=details(("Date", schedule_date), ("Time", when), ("Reason", reason)),
                outro=("If you have any questions, please contact your manager.",),
                tone="muted",
            ),
        )
        self._notify_admins(
            f"Schedule Deleted - {employee_name} ({schedule_date})",
            Notice(
                heading="Schedule Deleted",
                intro="A schedule has been deleted.",
                details_title="Deleted Schedule",
                details=details(("Employee", employee_name), ("Date", schedule_date), ("Time", when), ("Reason", reason)),
                button_label="View Schedules",
                button_path="/admin/schedules",
                tone="muted",
            ),
        )
        return result

    def bulk_schedules_created(
        self,
        *,
        employee_name: str,
        schedule_count: int,
        start_date: str,
        end_date: str,
        days: Sequence[str],
        start_time: str,
        end_time: str,
    ) -> SendResult:
        return self._notify_admins(
            f"Bulk Schedules Created - {employee_name} ({schedule_count} schedules)",
            Notice(
                heading="Bulk Schedules Created",
                intro="Bulk schedules have been created for an employee.",
                details_title="Schedule Summary",
                details=details(
                    ("Employee", employee_name),
                    ("Schedules Created", schedule_count),
                    ("Date Range", f"{start_date} to {end_date}"),
                    ("Days", join_days(days)),
                    ("Time", f"{start_time} - {end_time}"),
                ),
                button_label="View Schedules",
                button_path="/admin/schedules",
            ),
        )

    # ------------------------------------------------------------------
    # tasks
    # ------------------------------------------------------------------

    def task_assigned(
        self,
        *,
        employee_name: str,
        employee_email: str,
        task_title: str,
        scheduled_date: str,
        task_description: Optional[str] = None,
        location: Optional[str] = None,
    ) -> SendResult:
        result = self._send(
            employee_email,
            f"New Task Assigned - {task_title}",
            Notice(
                heading="New Task Assigned",
                greeting_name=employee_name,
                intro="You have been assigned a new task.",
                details_title="Task Details",
                details=details(
                    ("Task", task_title),
                    ("Description", task_description),
                    ("Date", scheduled_date),
                    ("Location", location),
                ),
                button_label="View Tasks",
                button_path="/employee/tasks",
            ),
        )
        self._notify_admins(
            f"Task Assigned - {employee_name} ({task_title})",
            Notice(
                heading="Task Assigned",
                intro="A new task has been assigned to an employee.",
                details_title="Task Details",
                details=details(
                    ("Employee", employee_name),
                    ("Task", task_title),
                    ("Description", task_description),
                    ("Date", scheduled_date),
                    ("Location", location),
                ),
                button_label="View Tasks",
                button_path="/admin/tasks",
            ),
        )
        return result

    def task_completed(
        self,
        *,
        employee_name: str,
        task_title: str,
        scheduled_date: str,
        completed_at: str,
        notes: Optional[str] = None,
    ) -> SendResult:
        return self._notify_admins(
            f"Task Completed - {task_title} by {employee_name}",
            Notice(
                heading="Task Completed",
                intro="An employee has completed a task.",
                details_title="Completion Details",
                details=details(
                    ("Employee", employee_name),
                    ("Task", task_title),
                    ("Scheduled Date", scheduled_date),
                    ("Completed At", completed_at),
                    ("Notes", notes),
                ),
                button_label="View Tasks",
                button_path="/admin/tasks",
                tone="success",
            ),
        )

    # ------------------------------------------------------------------
    # events
    # ------------------------------------------------------------------

    def event_assigned(
        self,
        *,
        employee_name: str,
        employee_email: str,
        event_title: str,
        event_date: str,
        event_time: str,
        role: str,
        room: Optional[str] = None,
    ) -> SendResult:
        result = self._send(
            employee_email,
            f"Event Assignment - {event_title}",
            Notice(
                heading="Event Assignment",
                greeting_name=employee_name,
                intro="You have been assigned to an event.",
                details_title="Event Details",
                details=details(
                    ("Event", event_title),
                    ("Date", event_date),
                    ("Time", event_time),
                    ("Room", room),
                    ("Your Role", role),
                ),
                button_label="View Events",
                button_path="/employee",
                tone="event",
            ),
        )
        self._notify_admins(
            f"Event Assignment - {employee_name} ({event_title})",
            Notice(
                heading="Employee Assigned to Event",
                intro="An employee has been assigned to an event.",
                details_title="Assignment Details",
                details=details(
                    ("Employee", employee_name),
                    ("Event", event_title),
                    ("Date", event_date),
                    ("Time", event_time),
                    ("Room", room),
                    ("Role", role),
                ),
                button_label="View Events",
                button_path="/admin/events",
                tone="event",
            ),
        )
        return result

    def event_removed(
        self, *, employee_name: str, employee_email: str, event_title: str, event_date: str
    ) -> SendResult:
        result = self._send(
            employee_email,
            f"Removed from Event - {event_title}",
            Notice(
                heading="Event Assignment Removed",
                greeting_name=employee_name,
                intro="You have been removed from an event assignment.",
                details_title="Event Details",
                details=details(("Event", event_title), ("Date", event_date)),
                outro=("If you have any questions, please contact your manager.",),
                tone="muted",
            ),
        )
        self._notify_admins(
            f"Event Assignment Removed - {employee_name} ({event_title})",
            Notice(
                heading="Employee Removed from Event",
                intro="An employee has been removed from an event.",
                details_title="Removal Details",
                details=details(("Employee", employee_name), ("Event", event_title), ("Date", event_date)),
                button_label="View Events",
                button_path="/admin/events",
                tone="muted",
            ),
        )
        return result
