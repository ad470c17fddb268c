from __future__ import annotations

from typing import Optional

from ..backend.base import backend_call, first
from ..backend.connection import BackendConnection
from ..core.exceptions import NotFoundError
from .model import DeviceRegistration
from .repository import DeviceRegistrationRepository


class SupabaseDeviceRepository(DeviceRegistrationRepository):
    """Device binding through the ``check_device`` / ``register_device`` / ``admin_clear_device`` procedures.

    The first two act on ``auth.uid()``, so they always run with the caller's token.
    """

    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def check_device(self, device_id: Optional[str]) -> DeviceRegistration:
        with backend_call("check device"):
            resp = self._conn.user().rpc("check_device", {"p_device_id": device_id}).execute()
        row = first(resp)
        if not row:
            raise NotFoundError("Employee not found")
        return DeviceRegistration(
            registered_device_id=row.get("registered_device_id"),
            device_name=row.get("device_name"),
        )

    def register_device(self, *, device_id: str, device_name: Optional[str]) -> None:
        with backend_call("register device"):
            self._conn.user().rpc(
                "register_device", {"p_device_id": device_id, "p_device_name": device_name}
            ).execute()

    def clear_device(self, *, employee_id: str) -> None:
        with backend_call("clear device"):
            self._conn.user().rpc("admin_clear_device", {"p_employee_id": employee_id}).execute()
