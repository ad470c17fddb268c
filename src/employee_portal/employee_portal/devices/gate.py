from __future__ import annotations

from enum import Enum
from typing import Optional

from ..core.exceptions import DeviceMismatchError, DeviceRegistrationRequired


class DeviceStatus(str, Enum):
    NO_DEVICE_REGISTERED = "no_device_registered"
    DEVICE_MATCHES = "device_matches"
    DEVICE_MISMATCH = "device_mismatch"


def evaluate_device(local_device_id: Optional[str], registered_device_id: Optional[str]) -> DeviceStatus:
    if not registered_device_id:
        return DeviceStatus.NO_DEVICE_REGISTERED
    if local_device_id == registered_device_id:
        return DeviceStatus.DEVICE_MATCHES
    return DeviceStatus.DEVICE_MISMATCH


def ensure_clock_in_allowed(status: DeviceStatus, *, register: bool) -> None:
    """Raise unless the gate lets the clock-in through.

    ``register`` is the caller's consent to bind this device on first use.
    """

    if status == DeviceStatus.DEVICE_MISMATCH:
        raise DeviceMismatchError(
            "This device is not registered for your account. Clock in from your registered device "
            "or ask an admin to reset it."
        )
    if status == DeviceStatus.NO_DEVICE_REGISTERED and not register:
        raise DeviceRegistrationRequired("No device registered yet. Register this device to clock in.")
