from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..cache import keys
from ..cache.query_cache import QueryCache
from ..common.datetime_utils import now_utc, parse_iso_date
from ..core.exceptions import ValidationError
from ..devices.gate import DeviceStatus, ensure_clock_in_allowed, evaluate_device
from ..devices.identity import DeviceIdentityProvider
from ..devices.model import DeviceSignals
from ..devices.repository import DeviceRegistrationRepository
from ..users.model import SessionUser
from .model import AttendanceLog, ClockResult, DeviceCheck, OpenAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_EDITABLE = ("clock_in", "clock_out", "late_flag", "early_checkout_flag")


class AttendanceService:
    """Clock-in/out gated by the registered device, plus attendance history."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        devices: DeviceRegistrationRepository,
        cache: QueryCache,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._devices = devices
        self._cache = cache
        self._clock = clock

    def check_device(self, identity: DeviceIdentityProvider, signals: DeviceSignals) -> DeviceCheck:
        device = identity.get_device_info(signals)
        registration = self._devices.check_device(device.device_id)
        status = evaluate_device(device.device_id, registration.registered_device_id)
        return DeviceCheck(status=status, device=device, registration=registration)

    def stored_device_status(self, identity: DeviceIdentityProvider) -> DeviceCheck:
        """Gate status for the id this browser already holds; nothing is fingerprinted."""
        device = identity.stored_device_info()
        local_id = device.device_id if device else None
        registration = self._devices.check_device(local_id)
        status = evaluate_device(local_id, registration.registered_device_id)
        return DeviceCheck(status=status, device=device, registration=registration)

    def get_open_attendance(self) -> Optional[OpenAttendance]:
        return self._attendance.get_open_attendance()

    def clock_in(
        self,
        *,
        user: SessionUser,
        identity: DeviceIdentityProvider,
        signals: DeviceSignals,
        register: bool = False,
    ) -> ClockResult:
        """Clock the caller in from this device.

        With no device registered yet the call fails with ``DeviceRegistrationRequired``
        unless ``register`` is set, in which case this device is bound first.
        """

        check = self.check_device(identity, signals)
        ensure_clock_in_allowed(check.status, register=register)

        if self._attendance.get_open_attendance() is not None:
            raise ValidationError("Already clocked in")

        registered = False
        if check.status == DeviceStatus.NO_DEVICE_REGISTERED:
            self._devices.register_device(device_id=check.device.device_id, device_name=check.device.device_name)
            registered = True
            logger.info("Registered device %s for %s", check.device.device_id, user.user_id)

        log_id = self._attendance.clock_in()
        self._attendance.record_device(
            log_id, phase="clock_in", device_id=check.device.device_id, device_name=check.device.device_name
        )
        self._invalidate(user)
        return ClockResult(log_id=log_id, device=check.device, registered=registered)

    def clock_out(
        self,
        *,
        user: SessionUser,
        identity: DeviceIdentityProvider,
        signals: DeviceSignals,
    ) -> ClockResult:
        if self._attendance.get_open_attendance() is None:
            raise ValidationError("Not clocked in")

        device = identity.get_device_info(signals)
        log_id = self._attendance.clock_out()
        self._attendance.record_device(
            log_id, phase="clock_out", device_id=device.device_id, device_name=device.device_name
        )
        self._invalidate(user)
        return ClockResult(log_id=log_id, device=device)

    def my_history(self, *, start: Optional[str] = None, end: Optional[str] = None) -> Sequence[AttendanceLog]:
        return self._attendance.list_mine(start=start, end=end)

    def list_all(
        self,
        *,
        employee_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> Sequence[AttendanceLog]:
        return self._attendance.list_all(employee_id=employee_id, start=start, end=end)

    def day_report(self, day: Optional[str] = None) -> Sequence[AttendanceLog]:
        """All logs opened on ``day`` (default today), cached for the admin attendance view."""
        target: date = parse_iso_date(day) if day else self._clock().date()
        start = target.isoformat()
        end = (target + timedelta(days=1)).isoformat()
        return self._cache.get(keys.attendance(start), lambda: self._attendance.list_all(start=start, end=end))

    def update_log(self, log_id: str, payload: Mapping[str, Any]) -> None:
        updates: Dict[str, Any] = {k: payload[k] for k in _EDITABLE if k in payload}
        if not updates:
            raise ValidationError("Nothing to update")
        self._attendance.update(log_id, updates)
        self._cache.invalidate(keys.ATTENDANCE_PREFIX)
        self._cache.invalidate_key(keys.ADMIN_STATS)

    def delete_log(self, log_id: str) -> None:
        self._attendance.delete(log_id)
        self._cache.invalidate(keys.ATTENDANCE_PREFIX)
        self._cache.invalidate_key(keys.ADMIN_STATS)

    def clear_device(self, employee_id: str) -> None:
        self._devices.clear_device(employee_id=employee_id)
        self._cache.invalidate_key(keys.EMPLOYEES)

    def _invalidate(self, user: SessionUser) -> None:
        self._cache.invalidate_key(keys.attendance(self._clock().date().isoformat()))
        self._cache.invalidate_key(keys.ADMIN_STATS)
        self._cache.invalidate_key(keys.employee_dashboard(user.user_id))
