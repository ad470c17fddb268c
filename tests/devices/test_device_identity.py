import itertools

import pytest

from src.employee_portal.employee_portal.core.exceptions import DeviceMismatchError, DeviceRegistrationRequired
from src.employee_portal.employee_portal.devices.fingerprint import fingerprint
from src.employee_portal.employee_portal.devices.gate import DeviceStatus, ensure_clock_in_allowed, evaluate_device
from src.employee_portal.employee_portal.devices.identity import FingerprintDeviceIdentity, format_device_display
from src.employee_portal.employee_portal.devices.model import DeviceSignals
from src.employee_portal.employee_portal.devices.storage import InMemoryDeviceStorage, SessionDeviceStorage

SIGNALS = DeviceSignals(screen_width=1280, screen_height=720, timezone="UTC", user_agent="Mozilla/5.0 (Macintosh)")


def _counter_suffix():
    counter = itertools.count(1)
    return lambda: f"S{next(counter):05d}"


def test_first_call_creates_and_persists_id():
    storage = InMemoryDeviceStorage()
    identity = FingerprintDeviceIdentity(storage, suffix_factory=lambda: "ABC123")

    info = identity.get_device_info(SIGNALS)

    assert info.is_new is True
    assert info.device_id == f"{fingerprint(SIGNALS)}-ABC123"
    assert info.device_name == "Mac"
    assert storage.get_item("portal_device_id") == info.device_id


def test_id_is_stable_for_same_storage():
    identity = FingerprintDeviceIdentity(InMemoryDeviceStorage(), suffix_factory=_counter_suffix())
    first = identity.get_device_info(SIGNALS)
    second = identity.get_device_info(DeviceSignals(timezone="Asia/Tokyo"))

    assert second.device_id == first.device_id
    assert second.is_new is False


def test_identical_hardware_gets_distinct_ids():
    suffix = _counter_suffix()
    a = FingerprintDeviceIdentity(InMemoryDeviceStorage(), suffix_factory=suffix).get_device_id(SIGNALS)
    b = FingerprintDeviceIdentity(InMemoryDeviceStorage(), suffix_factory=suffix).get_device_id(SIGNALS)

    assert a != b
    assert a.rsplit("-", 1)[0] == b.rsplit("-", 1)[0]


def test_clear_forgets_device():
    identity = FingerprintDeviceIdentity(InMemoryDeviceStorage(), suffix_factory=_counter_suffix())
    before = identity.get_device_id(SIGNALS)
    identity.clear()

    assert identity.get_device_id(SIGNALS) != before


def test_missing_name_is_filled_in():
    storage = InMemoryDeviceStorage({"portal_device_id": "DEV-00000001-AAAAAA"})
    info = FingerprintDeviceIdentity(storage).get_device_info(SIGNALS)

    assert info.device_id == "DEV-00000001-AAAAAA"
    assert info.device_name == "Mac"
    assert info.is_new is False


def test_is_device_registered():
    identity = FingerprintDeviceIdentity(InMemoryDeviceStorage({"portal_device_id": "DEV-1"}))
    assert identity.is_device_registered("DEV-1", SIGNALS) is True
    assert identity.is_device_registered("DEV-2", SIGNALS) is False
    assert identity.is_device_registered(None, SIGNALS) is False


def test_session_storage_over_plain_mapping():
    backing = {}
    storage = SessionDeviceStorage(backing)
    storage.set_item("portal_device_id", "DEV-9")
    assert storage.get_item("portal_device_id") == "DEV-9"
    storage.remove_item("portal_device_id")
    assert storage.get_item("portal_device_id") is None


def test_evaluate_device():
    assert evaluate_device("DEV-1", None) == DeviceStatus.NO_DEVICE_REGISTERED
    assert evaluate_device("DEV-1", "") == DeviceStatus.NO_DEVICE_REGISTERED
    assert evaluate_device("DEV-1", "DEV-1") == DeviceStatus.DEVICE_MATCHES
    assert evaluate_device("DEV-1", "DEV-2") == DeviceStatus.DEVICE_MISMATCH


def test_gate_blocks_mismatch_even_with_register():
    with pytest.raises(DeviceMismatchError):
        ensure_clock_in_allowed(DeviceStatus.DEVICE_MISMATCH, register=True)


def test_gate_requires_consent_to_register():
    with pytest.raises(DeviceRegistrationRequired):
        ensure_clock_in_allowed(DeviceStatus.NO_DEVICE_REGISTERED, register=False)
    ensure_clock_in_allowed(DeviceStatus.NO_DEVICE_REGISTERED, register=True)
    ensure_clock_in_allowed(DeviceStatus.DEVICE_MATCHES, register=False)


def test_format_device_display():
    assert format_device_display("iPhone", "DEV-1234ABCD-XYZ123") == "iPhone (D-XYZ123)"
    assert format_device_display(None, "DEV-1234ABCD-XYZ123") == "Unknown Device (D-XYZ123)"
    assert format_device_display("iPhone", None) == "No device registered"


def test_stored_device_info_never_creates_an_id():
    storage = InMemoryDeviceStorage()
    identity = FingerprintDeviceIdentity(storage, suffix_factory=lambda: "ABC123")

    assert identity.stored_device_info() is None
    assert storage.get_item("portal_device_id") is None

    created = identity.get_device_info(SIGNALS)
    stored = identity.stored_device_info()
    assert stored.device_id == created.device_id
    assert stored.device_name == "Mac"
    assert stored.is_new is False
