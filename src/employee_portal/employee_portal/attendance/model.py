from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..devices.gate import DeviceStatus
from ..devices.model import DeviceInfo, DeviceRegistration


@dataclass(frozen=True)
class AttendanceLog:
    log_id: str
    employee_id: str
    clock_in: str
    clock_out: Optional[str] = None
    total_hours: Optional[float] = None
    late_flag: bool = False
    early_checkout_flag: bool = False
    clock_in_device_id: Optional[str] = None
    clock_in_device_name: Optional[str] = None
    clock_out_device_id: Optional[str] = None
    clock_out_device_name: Optional[str] = None
    employee_name: Optional[str] = None
    employee_position: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id"] = data.pop("log_id")
        return data


@dataclass(frozen=True)
class OpenAttendance:
    log_id: str
    clock_in: str


@dataclass(frozen=True)
class DeviceCheck:
    status: DeviceStatus
    device: Optional[DeviceInfo]
    registration: DeviceRegistration

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "deviceId": self.device.device_id if self.device else None,
            "deviceName": self.device.device_name if self.device else None,
            "isNew": self.device.is_new if self.device else False,
            "registeredDeviceId": self.registration.registered_device_id,
            "registeredDeviceName": self.registration.device_name,
        }


@dataclass(frozen=True)
class ClockResult:
    log_id: str
    device: DeviceInfo
    registered: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attendanceId": self.log_id,
            "deviceId": self.device.device_id,
            "deviceName": self.device.device_name,
            "deviceRegistered": self.registered,
        }
