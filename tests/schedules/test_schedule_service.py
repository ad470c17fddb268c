from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.employee_portal.employee_portal.cache import keys
from src.employee_portal.employee_portal.cache.query_cache import QueryCache
from src.employee_portal.employee_portal.core.enums import Role, ScheduleStatus
from src.employee_portal.employee_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.employee_portal.employee_portal.schedules.model import Schedule
from src.employee_portal.employee_portal.schedules.service import ScheduleService, plan_bulk_schedules
from src.employee_portal.employee_portal.users.model import SessionUser

ADMIN = SessionUser(user_id="adm-1", email="boss@example.com", full_name="Boss", role=Role.ADMIN)
EMPLOYEE = SessionUser(user_id="emp-1", email="emp@example.com", full_name="Emp", role=Role.EMPLOYEE)


def _fixed_clock():
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeScheduleRepo:
    def __init__(self):
        self._rows = {}
        self._next_id = 1

    def get(self, schedule_id):
        return self._rows.get(schedule_id)

    def list_schedules(self, *, start=None, end=None, status=None, employee_id=None):
        found = []
        for s in self._rows.values():
            if start and s.schedule_date < start:
                continue
            if end and s.schedule_date > end:
                continue
            if status and s.status != status:
                continue
            if employee_id and s.employee_id != employee_id:
                continue
            found.append(s)
        return found

    def create_many(self, schedules):
        created = []
        for new in schedules:
            sid = f"sch-{self._next_id}"
            self._next_id += 1
            row = new.to_row()
            row["status"] = ScheduleStatus(row["status"])
            self._rows[sid] = Schedule(schedule_id=sid, **row)
            created.append(self._rows[sid])
        return created

    def update(self, schedule_id, updates, *, expected_status=None):
        current = self._rows.get(schedule_id)
        if current is None or (expected_status and current.status != expected_status):
            return None
        data = {**vars(current), **updates}
        data["status"] = ScheduleStatus(data["status"])
        self._rows[schedule_id] = Schedule(**data)
        return self._rows[schedule_id]

    def delete(self, schedule_id):
        self._rows.pop(schedule_id, None)

    def count(self, *, status=None, day=None, exclude_status=None):
        return sum(
            1
            for s in self._rows.values()
            if (status is None or s.status == status)
            and (day is None or s.schedule_date == day)
            and (exclude_status is None or s.status != exclude_status)
        )


def _service(cache=None):
    return ScheduleService(FakeScheduleRepo(), cache or QueryCache(), clock=_fixed_clock)


def _payload(**overrides):
    payload = {
        "employee_id": "emp-1",
        "schedule_date": "2026-10-20",
        "start_time": "09:00",
        "end_time": "17:00",
    }
    payload.update(overrides)
    return payload


# 2026-10-19 is a Monday.


def test_plan_bulk_picks_matching_weekdays():
    planned = plan_bulk_schedules(
        employee_id="emp-1",
        start_date="2026-10-19",
        end_date="2026-10-25",
        days=["Monday", "wednesday"],
        start_time="09:00",
        end_time="17:00",
        created_by="adm-1",
    )
    assert [p.schedule_date for p in planned] == ["2026-10-19", "2026-10-21"]
    assert all(p.to_row()["status"] == "pending" for p in planned)


def test_plan_bulk_includes_end_date():
    planned = plan_bulk_schedules(
        employee_id="emp-1",
        start_date="2026-10-19",
        end_date="2026-10-26",
        days=["monday"],
        start_time="09:00",
        end_time="17:00",
        created_by="adm-1",
    )
    assert [p.schedule_date for p in planned] == ["2026-10-19", "2026-10-26"]


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"days": ["funday"]}, "Invalid day: funday"),
        ({"days": ["tuesday"], "end_date": "2026-10-19"}, "No schedules to create"),
        ({"end_date": "2026-10-01"}, "End date must be on or after start date"),
    ],
)
def test_plan_bulk_rejects_bad_input(overrides, message):
    args = dict(
        employee_id="emp-1",
        start_date="2026-10-19",
        end_date="2026-10-25",
        days=["monday"],
        start_time="09:00",
        end_time="17:00",
        created_by="adm-1",
    )
    args.update(overrides)
    with pytest.raises(ValidationError, match=message):
        plan_bulk_schedules(**args)


def test_only_admin_creates_schedules():
    with pytest.raises(AuthorizationError):
        _service().create_schedule(current_user=EMPLOYEE, payload=_payload())


def test_create_invalidates_admin_stats_and_dashboard():
    cache = QueryCache()
    cache.set(keys.ADMIN_STATS, {"x": 1})
    cache.set(keys.employee_dashboard("emp-1"), {"y": 1})
    cache.set(keys.employee_dashboard("emp-2"), {"z": 1})

    created = _service(cache).create_schedule(current_user=ADMIN, payload=_payload())

    assert created.status == ScheduleStatus.PENDING
    assert created.created_by == "adm-1"
    assert keys.ADMIN_STATS not in cache
    assert keys.employee_dashboard("emp-1") not in cache
    assert keys.employee_dashboard("emp-2") in cache


def test_create_validates_time():
    with pytest.raises(ValidationError):
        _service().create_schedule(current_user=ADMIN, payload=_payload(start_time="9am"))


def test_approve_requires_pending_request():
    svc = _service()
    created = svc.create_schedule(current_user=ADMIN, payload=_payload())

    with pytest.raises(NotFoundError):
        svc.approve_cancellation(current_user=ADMIN, schedule_id=created.schedule_id)


def test_admin_cancel_uses_default_reason():
    svc = _service()
    created = svc.create_schedule(current_user=ADMIN, payload=_payload())

    cancelled = svc.admin_cancel(current_user=ADMIN, schedule_id=created.schedule_id, reason="  ")

    assert cancelled.status == ScheduleStatus.CANCELLED
    assert cancelled.cancellation_reason == "Cancelled by admin"
    assert cancelled.cancelled_by == "adm-1"


def test_cancellation_request_needs_reason():
    with pytest.raises(ValidationError):
        _service().request_cancellation(current_user=EMPLOYEE, schedule_id="sch-1", reason="")


def test_upcoming_skips_cancelled():
    svc = _service()
    kept = svc.create_schedule(current_user=ADMIN, payload=_payload())
    dropped = svc.create_schedule(current_user=ADMIN, payload=_payload(schedule_date="2026-10-21"))
    svc.admin_cancel(current_user=ADMIN, schedule_id=dropped.schedule_id)

    assert [s.schedule_id for s in svc.upcoming("emp-1")] == [kept.schedule_id]


def test_stats_counts_today_without_cancelled():
    svc = _service()
    svc.create_schedule(current_user=ADMIN, payload=_payload(schedule_date="2026-10-19"))
    other = svc.create_schedule(current_user=ADMIN, payload=_payload(schedule_date="2026-10-19"))
    svc.admin_cancel(current_user=ADMIN, schedule_id=other.schedule_id)

    stats = svc.stats().to_dict()
    assert stats == {"pending": 1, "cancellationRequested": 0, "todaySchedules": 1}


def test_unknown_status_filter():
    with pytest.raises(ValidationError):
        _service().list_schedules(status="archived")
