from __future__ import annotations

from typing import Callable, Optional, Protocol

from ..core.constants import DEVICE_ID_KEY, DEVICE_NAME_KEY, UNKNOWN_DEVICE_NAME
from .fingerprint import detect_device_name, fingerprint, random_suffix
from .model import DeviceInfo, DeviceSignals
from .storage import DeviceStorage


class DeviceIdentityProvider(Protocol):
    """Source of the local device identity used by the clock-in gate.

    The fingerprint implementation below is the default; a stronger attestation
    mechanism can be swapped in behind this interface.
    """

    def get_device_info(self, signals: DeviceSignals) -> DeviceInfo:
        raise NotImplementedError

    def stored_device_info(self) -> Optional[DeviceInfo]:
        """The persisted identity, or ``None``. Never creates one."""
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class FingerprintDeviceIdentity(DeviceIdentityProvider):
    def __init__(
        self,
        storage: DeviceStorage,
        *,
        suffix_factory: Callable[[], str] = random_suffix,
    ):
        self._storage = storage
        self._suffix_factory = suffix_factory

    def get_device_info(self, signals: DeviceSignals) -> DeviceInfo:
        device_id = self._storage.get_item(DEVICE_ID_KEY)
        device_name = self._storage.get_item(DEVICE_NAME_KEY)
        is_new = False

        if not device_id:
            device_id = f"{fingerprint(signals)}-{self._suffix_factory()}"
            device_name = detect_device_name(signals.user_agent)
            self._storage.set_item(DEVICE_ID_KEY, device_id)
            self._storage.set_item(DEVICE_NAME_KEY, device_name)
            is_new = True

        if not device_name:
            device_name = detect_device_name(signals.user_agent)
            self._storage.set_item(DEVICE_NAME_KEY, device_name)

        return DeviceInfo(device_id=device_id, device_name=device_name, is_new=is_new)

    def stored_device_info(self) -> Optional[DeviceInfo]:
        device_id = self._storage.get_item(DEVICE_ID_KEY)
        if not device_id:
            return None
        return DeviceInfo(device_id=device_id, device_name=self._storage.get_item(DEVICE_NAME_KEY) or UNKNOWN_DEVICE_NAME)

    def get_device_id(self, signals: DeviceSignals) -> str:
        return self.get_device_info(signals).device_id

    def is_device_registered(self, registered_device_id: Optional[str], signals: DeviceSignals) -> bool:
        if not registered_device_id:
            return False
        return self.get_device_id(signals) == registered_device_id

    def clear(self) -> None:
        self._storage.remove_item(DEVICE_ID_KEY)
        self._storage.remove_item(DEVICE_NAME_KEY)


def format_device_display(device_name: Optional[str], device_id: Optional[str]) -> str:
    if not device_id:
        return "No device registered"
    return f"{device_name or UNKNOWN_DEVICE_NAME} ({device_id[-8:]})"
