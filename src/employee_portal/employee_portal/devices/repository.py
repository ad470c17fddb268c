from __future__ import annotations

from typing import Optional, Protocol

from .model import DeviceRegistration


class DeviceRegistrationRepository(Protocol):
    """Server-side device binding of the signed-in employee."""

    def check_device(self, device_id: Optional[str]) -> DeviceRegistration:
        raise NotImplementedError

    def register_device(self, *, device_id: str, device_name: Optional[str]) -> None:
        raise NotImplementedError

    def clear_device(self, *, employee_id: str) -> None:
        """Admin-only reset so the employee can register a new device."""

        raise NotImplementedError
