from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from .model import Task, TaskInstance


class TaskRepository(Protocol):
    def list_tasks(self) -> Sequence[Task]:
        raise NotImplementedError

    def get_task(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    def create_task(self, fields: Dict[str, Any]) -> Task:
        raise NotImplementedError

    def update_task(self, task_id: str, updates: Dict[str, Any]) -> Optional[Task]:
        raise NotImplementedError

    def delete_task(self, task_id: str) -> None:
        raise NotImplementedError

    def today_tasks(self) -> Sequence[Dict[str, Any]]:
        """Rows of ``get_today_tasks`` for the calling employee."""

        raise NotImplementedError

    def complete(
        self,
        instance_id: str,
        *,
        notes: Optional[str] = None,
        photo_url: Optional[str] = None,
        video_url: Optional[str] = None,
    ) -> None:
        raise NotImplementedError

    def get_instance(self, instance_id: str) -> Optional[TaskInstance]:
        """Instance joined with its task and employee (name, email)."""

        raise NotImplementedError

    def list_instances(
        self,
        *,
        employee_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[TaskInstance]:
        raise NotImplementedError

    def create_instance(self, *, task_id: str, employee_id: str, scheduled_date: str) -> TaskInstance:
        raise NotImplementedError

    def update_instance(self, instance_id: str, updates: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_instance(self, instance_id: str) -> None:
        raise NotImplementedError

    def instance_statuses(self, day: str) -> List[str]:
        raise NotImplementedError
