from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import ProfileStatus, Role
from .model import Employee, Profile


class UserRepository(Protocol):
    """Profiles and employees.

    Reads go through the caller's token (row-level security); account provisioning
    and removal run with the service role.
    """

    def get_profile(self, user_id: str) -> Optional[Profile]:
        raise NotImplementedError

    def find_profile_by_email(self, email: str) -> Optional[Profile]:
        raise NotImplementedError

    def list_employees(self, *, include_inactive: bool = False) -> Sequence[Employee]:
        raise NotImplementedError

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def upsert_profile(
        self, *, user_id: str, email: str, full_name: str, role: Role, status: ProfileStatus
    ) -> None:
        raise NotImplementedError

    def upsert_employee(self, *, employee_id: str, fields: Dict[str, Any]) -> None:
        raise NotImplementedError

    def update_employee(self, employee_id: str, updates: Dict[str, Any]) -> None:
        raise NotImplementedError

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_employee(self, employee_id: str) -> None:
        raise NotImplementedError

    def delete_profile(self, user_id: str) -> None:
        raise NotImplementedError

    def count_active_employees(self) -> int:
        raise NotImplementedError
