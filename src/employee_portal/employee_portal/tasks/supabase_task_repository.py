from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..backend.base import backend_call, first, nested, rows
from ..backend.connection import BackendConnection
from ..core.enums import TaskInstanceStatus
from ..core.exceptions import BackendError
from .model import Task, TaskInstance
from .repository import TaskRepository

_INSTANCE_SELECT = """
    *,
    tasks (id, title, description, location, requires_photo, requires_video, requires_notes),
    employees (id, display_name, profiles (email, full_name))
"""


def _to_task(row: Dict[str, Any]) -> Task:
    return Task(
        task_id=str(row["id"]),
        title=row["title"],
        description=row.get("description"),
        is_recurring=bool(row.get("is_recurring")),
        frequency=row.get("frequency"),
        location=row.get("location"),
        role_target=row.get("role_target"),
        cutoff_time=row.get("cutoff_time"),
        requires_photo=bool(row.get("requires_photo")),
        requires_video=bool(row.get("requires_video")),
        requires_notes=bool(row.get("requires_notes")),
        created_by=row.get("created_by"),
    )


def _to_instance(row: Dict[str, Any]) -> TaskInstance:
    return TaskInstance(
        instance_id=str(row["id"]),
        task_id=str(row["task_id"]),
        employee_id=str(row["employee_id"]),
        scheduled_date=str(row["scheduled_date"]),
        status=TaskInstanceStatus(row.get("status") or TaskInstanceStatus.PENDING.value),
        completed_at=row.get("completed_at"),
        notes=row.get("notes"),
        photo_url=row.get("photo_url"),
        video_url=row.get("video_url"),
        task_title=nested(row, "tasks", "title"),
        task_description=nested(row, "tasks", "description"),
        task_location=nested(row, "tasks", "location"),
        employee_name=nested(row, "employees", "display_name") or nested(row, "employees", "profiles", "full_name"),
        employee_email=nested(row, "employees", "profiles", "email"),
    )


class SupabaseTaskRepository(TaskRepository):
    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def list_tasks(self) -> Sequence[Task]:
        with backend_call("list tasks"):
            resp = self._conn.user().table("tasks").select("*").order("title").execute()
        return [_to_task(r) for r in rows(resp)]

    def get_task(self, task_id: str) -> Optional[Task]:
        with backend_call("load task"):
            resp = self._conn.user().table("tasks").select("*").eq("id", task_id).maybe_single().execute()
        row = first(resp)
        return _to_task(row) if row else None

    def create_task(self, fields: Dict[str, Any]) -> Task:
        with backend_call("create task"):
            resp = self._conn.user().table("tasks").insert(fields).execute()
        row = first(resp)
        if not row:
            raise BackendError("Failed to create task")
        return _to_task(row)

    def update_task(self, task_id: str, updates: Dict[str, Any]) -> Optional[Task]:
        with backend_call("update task"):
            resp = self._conn.user().table("tasks").update(updates).eq("id", task_id).execute()
        row = first(resp)
        return _to_task(row) if row else None

    def delete_task(self, task_id: str) -> None:
        with backend_call("delete task"):
            self._conn.user().table("tasks").delete().eq("id", task_id).execute()

    def today_tasks(self) -> Sequence[Dict[str, Any]]:
        with backend_call("load today's tasks"):
            resp = self._conn.user().rpc("get_today_tasks").execute()
        return rows(resp)

    def complete(
        self,
        instance_id: str,
        *,
        notes: Optional[str] = None,
        photo_url: Optional[str] = None,
        video_url: Optional[str] = None,
    ) -> None:
        params = {
            "p_task_instance_id": instance_id,
            "p_notes": notes,
            "p_photo_url": photo_url,
            "p_video_url": video_url,
        }
        with backend_call("complete task"):
            self._conn.user().rpc("complete_task", params).execute()

    def get_instance(self, instance_id: str) -> Optional[TaskInstance]:
        with backend_call("load task instance"):
            resp = (
                self._conn.user()
                .table("task_instances")
                .select(_INSTANCE_SELECT)
                .eq("id", instance_id)
                .maybe_single()
                .execute()
            )
        row = first(resp)
        return _to_instance(row) if row else None

    def list_instances(
        self,
        *,
        employee_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[TaskInstance]:
        query = self._conn.user().table("task_instances").select(_INSTANCE_SELECT).order("scheduled_date", desc=True)
        if employee_id:
            query = query.eq("employee_id", employee_id)
        if start:
            query = query.gte("scheduled_date", start)
        if end:
            query = query.lte("scheduled_date", end)
        if status:
            query = query.eq("status", status)
        with backend_call("list task instances"):
            resp = query.execute()
        return [_to_instance(r) for r in rows(resp)]

    def create_instance(self, *, task_id: str, employee_id: str, scheduled_date: str) -> TaskInstance:
        payload = {"task_id": task_id, "employee_id": employee_id, "scheduled_date": scheduled_date}
        with backend_call("assign task"):
            resp = self._conn.user().table("task_instances").insert(payload).execute()
        row = first(resp)
        if not row:
            raise BackendError("Failed to assign task")
        return _to_instance(row)

    def update_instance(self, instance_id: str, updates: Dict[str, Any]) -> None:
        with backend_call("update task instance"):
            self._conn.user().table("task_instances").update(updates).eq("id", instance_id).execute()

    def delete_instance(self, instance_id: str) -> None:
        with backend_call("delete task instance"):
            self._conn.user().table("task_instances").delete().eq("id", instance_id).execute()

    def instance_statuses(self, day: str) -> List[str]:
        with backend_call("load task stats"):
            resp = self._conn.user().table("task_instances").select("status").eq("scheduled_date", day).execute()
        return [r.get("status") for r in rows(resp)]
