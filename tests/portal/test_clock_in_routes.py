from __future__ import annotations

from src.employee_portal.employee_portal.attendance.model import OpenAttendance
from src.employee_portal.employee_portal.attendance.service import AttendanceService
from src.employee_portal.employee_portal.cache.query_cache import QueryCache
from src.employee_portal.employee_portal.core.enums import Role
from src.employee_portal.employee_portal.devices.fingerprint import fingerprint
from src.employee_portal.employee_portal.devices.identity import FingerprintDeviceIdentity
from src.employee_portal.employee_portal.devices.model import DeviceRegistration, DeviceSignals
from src.employee_portal.employee_portal.devices.storage import InMemoryDeviceStorage
from src.employee_portal.employee_portal.users.model import SessionUser

DEVICE = {
    "screen": {"width": 1920, "height": 1080, "colorDepth": 24},
    "timezone": "America/New_York",
    "language": "en-US",
    "platform": "Win32",
    "hardwareConcurrency": 8,
}
UA = {"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0.0.0"}


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class FakeAttendanceRepo:
    def __init__(self):
        self.open = None
        self.devices = []
        self._next = 0

    def get_open_attendance(self):
        return self.open

    def clock_in(self):
        self._next += 1
        log_id = f"log-{self._next}"
        self.open = OpenAttendance(log_id=log_id, clock_in="2026-10-19T09:00:00+00:00")
        return log_id

    def clock_out(self):
        log_id = self.open.log_id
        self.open = None
        return log_id

    def record_device(self, log_id, *, phase, device_id, device_name):
        self.devices.append((log_id, phase, device_id, device_name))


class FakeDeviceRepo:
    def __init__(self):
        self.registered = None
        self.name = None

    def check_device(self, device_id):
        return DeviceRegistration(registered_device_id=self.registered, device_name=self.name)

    def register_device(self, *, device_id, device_name):
        self.registered = device_id
        self.name = device_name

    def clear_device(self, *, employee_id):
        self.registered = None
        self.name = None


def _setup(make_app):
    attendance = FakeAttendanceRepo()
    devices = FakeDeviceRepo()
    app = make_app(attendance_service=AttendanceService(attendance, devices, QueryCache()))
    return app, attendance, devices


def _clock_in(client, **extra):
    return client.post(
        "/api/attendance/clock-in",
        json={"device": DEVICE, **extra},
        headers={**auth("emp-token"), **UA},
    )


def test_clock_in_requires_login(make_app):
    app, _, _ = _setup(make_app)
    resp = app.test_client().post("/api/attendance/clock-in", json={"device": DEVICE})
    assert resp.status_code == 401


def test_first_clock_in_asks_for_registration(make_app):
    app, attendance, devices = _setup(make_app)
    resp = _clock_in(app.test_client())

    assert resp.status_code == 409
    assert resp.get_json()["code"] == "device_registration_required"
    assert attendance.open is None
    assert devices.registered is None


def test_registered_device_is_bound_to_one_browser(make_app):
    app, attendance, devices = _setup(make_app)
    browser = app.test_client()

    resp = _clock_in(browser, register=True)
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["deviceRegistered"] is True
    assert body["deviceName"] == "Windows PC"
    assert devices.registered == body["deviceId"]
    assert attendance.devices == [("log-1", "clock_in", body["deviceId"], "Windows PC")]

    resp = browser.post("/api/attendance/clock-out", json={"device": DEVICE}, headers={**auth("emp-token"), **UA})
    assert resp.status_code == 200

    # same browser, same stored id: allowed without re-registering
    resp = _clock_in(browser)
    assert resp.status_code == 200
    assert resp.get_json()["deviceRegistered"] is False
    browser.post("/api/attendance/clock-out", json={"device": DEVICE}, headers={**auth("emp-token"), **UA})

    # identical hardware in a fresh browser profile gets its own id
    resp = _clock_in(app.test_client())
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "device_mismatch"
    assert attendance.open is None


def test_clock_in_twice_is_rejected(make_app):
    app, _, _ = _setup(make_app)
    browser = app.test_client()
    _clock_in(browser, register=True)

    resp = _clock_in(browser)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Already clocked in"


def test_clock_out_without_open_record(make_app):
    app, _, _ = _setup(make_app)
    resp = app.test_client().post("/api/attendance/clock-out", json={"device": DEVICE}, headers=auth("emp-token"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Not clocked in"


def test_device_status_reports_registration(make_app):
    app, _, devices = _setup(make_app)
    devices.registered = "DEV-00000000-ZZZZZZ"
    devices.name = "iPhone"

    resp = app.test_client().get("/api/attendance/device", headers=auth("emp-token"))
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["status"] == "device_mismatch"
    assert body["display"] == "iPhone (0-ZZZZZZ)"


def test_admin_can_reset_device(make_app):
    app, _, devices = _setup(make_app)
    devices.registered = "DEV-1"
    client = app.test_client()

    assert client.delete("/api/admin/employees/emp-1/device", headers=auth("emp-token")).status_code == 403
    assert client.delete("/api/admin/employees/emp-1/device", headers=auth("admin-token")).status_code == 200
    assert devices.registered is None


def test_status_check_leaves_the_id_to_real_signals(make_app):
    app, _, devices = _setup(make_app)
    browser = app.test_client()

    resp = browser.get("/api/attendance/device", headers=auth("emp-token"))
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["status"] == "no_device_registered"
    assert body["deviceId"] is None

    assert _clock_in(browser, register=True).status_code == 200
    signals = DeviceSignals.from_payload(DEVICE, user_agent=UA["User-Agent"])
    assert devices.registered.startswith(f"{fingerprint(signals)}-")

    resp = browser.get("/api/attendance/device", headers=auth("emp-token"))
    assert resp.get_json()["status"] == "device_matches"
    assert resp.get_json()["deviceId"] == devices.registered


def test_device_payload_is_required(make_app):
    app, attendance, devices = _setup(make_app)
    browser = app.test_client()

    resp = browser.post("/api/attendance/device", json={}, headers={**auth("emp-token"), **UA})
    assert resp.status_code == 400
    resp = browser.post("/api/attendance/clock-in", json={"register": True}, headers={**auth("emp-token"), **UA})
    assert resp.status_code == 400
    assert attendance.open is None
    assert devices.registered is None


def test_clock_in_clears_only_that_employees_dashboard():
    cache = QueryCache()
    cache.set("employee:dashboard:emp-1", {"hours": 1})
    cache.set("employee:dashboard:emp-10", {"hours": 10})
    service = AttendanceService(FakeAttendanceRepo(), FakeDeviceRepo(), cache)

    service.clock_in(
        user=SessionUser(user_id="emp-1", email="emp@example.com", full_name="Emp One", role=Role.EMPLOYEE),
        identity=FingerprintDeviceIdentity(InMemoryDeviceStorage()),
        signals=DeviceSignals.from_payload(DEVICE),
        register=True,
    )

    assert "employee:dashboard:emp-1" not in cache
    assert "employee:dashboard:emp-10" in cache
