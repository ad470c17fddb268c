from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..backend.storage import StorageGateway, storage_path
from ..cache import keys
from ..cache.query_cache import QueryCache
from ..common.datetime_utils import format_date, format_datetime, now_utc, parse_iso_date
from ..common.validators import optional_str, require_fields, require_non_empty
from ..core.enums import TaskInstanceStatus, TaskNotificationType
from ..core.exceptions import BackendError, NotFoundError, ValidationError
from ..notifications.mailer import SendResult
from ..notifications.service import NotificationService
from ..users.model import SessionUser
from ..users.repository import UserRepository
from .model import TASK_FIELDS, Task, TaskInstance, TaskStats
from .repository import TaskRepository

logger = logging.getLogger(__name__)

_BOOL_FIELDS = ("is_recurring", "requires_photo", "requires_video", "requires_notes")


def _task_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name in TASK_FIELDS:
        if name not in payload:
            continue
        fields[name] = bool(payload[name]) if name in _BOOL_FIELDS else optional_str(payload[name])
    return fields


class TaskService:
    """Use case: task templates, daily assignments and completion."""

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        cache: QueryCache,
        notifications: Optional[NotificationService] = None,
        *,
        storage: Optional[StorageGateway] = None,
        media_bucket: str = "task-media",
        clock: Callable[[], datetime] = now_utc,
    ):
        self._tasks = tasks
        self._users = users
        self._cache = cache
        self._notifications = notifications
        self._storage = storage
        self._media_bucket = media_bucket
        self._clock = clock

    def _today(self) -> str:
        return self._clock().date().isoformat()

    def list_tasks(self) -> Sequence[Task]:
        return self._cache.get(keys.TASKS, self._tasks.list_tasks)

    def get_task(self, task_id: str) -> Task:
        task = self._tasks.get_task(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def create_task(self, *, current_user: SessionUser, payload: Mapping[str, Any]) -> Task:
        fields = _task_fields(payload)
        fields["title"] = require_non_empty(payload.get("title"), "Title")
        fields["created_by"] = current_user.user_id
        task = self._tasks.create_task(fields)
        self._cache.invalidate_key(keys.TASKS)
        return task

    def update_task(self, task_id: str, payload: Mapping[str, Any]) -> Task:
        updates = _task_fields(payload)
        if "title" in updates:
            updates["title"] = require_non_empty(updates["title"], "Title")
        if not updates:
            raise ValidationError("Nothing to update")
        task = self._tasks.update_task(task_id, updates)
        if task is None:
            raise NotFoundError("Task not found")
        self._cache.invalidate_key(keys.TASKS)
        return task

    def delete_task(self, task_id: str) -> None:
        self._tasks.delete_task(task_id)
        self._cache.invalidate_key(keys.TASKS)
        self._cache.invalidate(keys.EMPLOYEE_PREFIX)

    def today_tasks(self, user: SessionUser) -> Sequence[Dict[str, Any]]:
        return self._cache.get(keys.employee_tasks(user.user_id, self._today()), self._tasks.today_tasks)

    def complete(self, *, user: SessionUser, instance_id: str, payload: Mapping[str, Any]) -> None:
        self._tasks.complete(
            instance_id,
            notes=optional_str(payload.get("notes")),
            photo_url=optional_str(payload.get("photo_url")),
            video_url=optional_str(payload.get("video_url")),
        )
        self._cache.invalidate(keys.employee_tasks(user.user_id, ""))
        self._cache.invalidate_key(keys.employee_dashboard(user.user_id))
        self._cache.invalidate_key(keys.ADMIN_STATS)

    def upload_media(
        self,
        *,
        user: SessionUser,
        instance_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Store a completion photo or video under the caller's folder and return its path."""
        if self._storage is None:
            raise ValidationError("File storage is not configured")
        if not content:
            raise ValidationError("File is empty")
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        path = f"{user.user_id}/{instance_id}-{int(self._clock().timestamp() * 1000)}.{ext}"
        return self._storage.upload(bucket=self._media_bucket, path=path, content=content, content_type=content_type)

    def signed_media_url(self, url_or_path: Optional[str]) -> Optional[str]:
        """Short-lived URL for a stored completion photo or video; ``None`` when there is none."""
        if not url_or_path or self._storage is None:
            return None
        try:
            path = storage_path(url_or_path, self._media_bucket)
            return self._storage.signed_url(bucket=self._media_bucket, path=path) or None
        except BackendError:
            logger.exception("Error creating signed URL")
            return None

    def list_instances(
        self,
        *,
        employee_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[TaskInstance]:
        if status:
            try:
                TaskInstanceStatus(status)
            except ValueError:
                raise ValidationError("Invalid task status")
        return self._tasks.list_instances(employee_id=employee_id, start=start, end=end, status=status)

    def assign(self, payload: Mapping[str, Any]) -> TaskInstance:
        require_fields(payload, "task_id", "employee_id", "scheduled_date")
        scheduled = parse_iso_date(str(payload["scheduled_date"])).isoformat()
        instance = self._tasks.create_instance(
            task_id=str(payload["task_id"]),
            employee_id=str(payload["employee_id"]),
            scheduled_date=scheduled,
        )
        self._invalidate_employee(instance.employee_id)
        return instance

    def update_instance(self, instance_id: str, payload: Mapping[str, Any]) -> None:
        updates: Dict[str, Any] = {}
        if "scheduled_date" in payload:
            updates["scheduled_date"] = parse_iso_date(str(payload["scheduled_date"])).isoformat()
        if "status" in payload:
            try:
                updates["status"] = TaskInstanceStatus(payload["status"]).value
            except ValueError:
                raise ValidationError("Invalid task status")
        if "notes" in payload:
            updates["notes"] = optional_str(payload["notes"])
        if not updates:
            raise ValidationError("Nothing to update")
        self._tasks.update_instance(instance_id, updates)
        self._cache.invalidate(keys.EMPLOYEE_PREFIX)
        self._cache.invalidate_key(keys.ADMIN_STATS)

    def delete_instance(self, instance_id: str) -> None:
        self._tasks.delete_instance(instance_id)
        self._cache.invalidate(keys.EMPLOYEE_PREFIX)
        self._cache.invalidate_key(keys.ADMIN_STATS)

    def stats(self, day: Optional[str] = None) -> TaskStats:
        target = parse_iso_date(day).isoformat() if day else self._today()
        statuses = self._tasks.instance_statuses(target)
        return TaskStats(
            total=len(statuses),
            completed=statuses.count(TaskInstanceStatus.COMPLETED.value),
            pending=statuses.count(TaskInstanceStatus.PENDING.value),
            overdue=statuses.count(TaskInstanceStatus.OVERDUE.value),
        )

    def _invalidate_employee(self, employee_id: str) -> None:
        self._cache.invalidate(keys.employee_tasks(employee_id, ""))
        self._cache.invalidate_key(keys.employee_dashboard(employee_id))
        self._cache.invalidate_key(keys.ADMIN_STATS)

    # ------------------------------------------------------------------
    # notifications
    # ------------------------------------------------------------------

    def notify(self, payload: Mapping[str, Any]) -> SendResult:
        kind = payload.get("type")
        if not kind:
            raise ValidationError("Missing notification type")
        if kind == TaskNotificationType.TASK_ASSIGNED.value:
            return self._notify_assigned(payload)
        if kind == TaskNotificationType.TASK_COMPLETED.value:
            return self._notify_completed(payload)
        # Unknown types are acknowledged without sending.
        return SendResult(success=False)

    def _load_instance(self, instance_id: str) -> TaskInstance:
        try:
            instance = self._tasks.get_instance(instance_id)
        except BackendError:
            instance = None
        if instance is None:
            raise NotFoundError("Task instance not found")
        return instance

    def _notify_assigned(self, payload: Mapping[str, Any]) -> SendResult:
        instance_id = payload.get("taskInstanceId")
        task_id = payload.get("taskId")
        employee_id = payload.get("employeeId")
        if not instance_id and (not task_id or not employee_id):
            raise ValidationError("Missing required fields for task assignment")

        if instance_id:
            instance = self._load_instance(instance_id)
            title = instance.task_title
            description = instance.task_description
            location = instance.task_location
            name = instance.employee_name
            email = instance.employee_email
            scheduled_date = instance.scheduled_date
        else:
            task = self._tasks.get_task(task_id)
            if task is None:
                raise NotFoundError("Task not found")
            employee = self._users.get_employee(employee_id)
            if employee is None:
                raise NotFoundError("Employee not found")
            title = task.title
            description = task.description
            location = task.location
            name = employee.display_name
            email = employee.email
            scheduled_date = self._today()

        if not email:
            raise ValidationError("Employee email not found")
        if self._notifications is None:
            return SendResult(success=False, error="Email is not configured")
        return self._notifications.task_assigned(
            employee_name=name or "Employee",
            employee_email=email,
            task_title=title or "Unknown Task",
            task_description=description,
            scheduled_date=format_date(scheduled_date),
            location=location,
        )

    def _notify_completed(self, payload: Mapping[str, Any]) -> SendResult:
        instance_id = payload.get("taskInstanceId")
        if not instance_id:
            raise ValidationError("Missing task instance ID")
        instance = self._load_instance(instance_id)
        if self._notifications is None:
            return SendResult(success=False, error="Email is not configured")
        return self._notifications.task_completed(
            employee_name=instance.employee_name or "Employee",
            task_title=instance.task_title or "Unknown Task",
            scheduled_date=format_date(instance.scheduled_date),
            completed_at=format_datetime(instance.completed_at or self._clock()),
            notes=optional_str(payload.get("notes")) or instance.notes,
        )
