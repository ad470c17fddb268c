from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Profile role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class ProfileStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ScheduleStatus(str, Enum):
    """Lifecycle of a schedule assignment."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLATION_REQUESTED = "cancellation_requested"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class TaskInstanceStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class ChecklistStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class MediaType(str, Enum):
    NONE = "none"
    IMAGE = "image"
    VIDEO = "video"


class RecipientType(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    OWNER = "owner"


class ScheduleNotificationType(str, Enum):
    SCHEDULE_ASSIGNED = "schedule_assigned"
    SCHEDULE_CONFIRMED = "schedule_confirmed"
    CANCELLATION_REQUESTED = "cancellation_requested"
    CANCELLATION_APPROVED = "cancellation_approved"
    ADMIN_CANCELLED = "admin_cancelled"
    SCHEDULE_DELETED = "schedule_deleted"


class TaskNotificationType(str, Enum):
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"


class EventNotificationType(str, Enum):
    EVENT_ASSIGNED = "event_assigned"
    EVENT_REMOVED = "event_removed"
