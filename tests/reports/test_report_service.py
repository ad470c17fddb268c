from __future__ import annotations

import pytest

from src.employee_portal.employee_portal.attendance.model import AttendanceLog
from src.employee_portal.employee_portal.core.enums import ChecklistStatus, TaskInstanceStatus
from src.employee_portal.employee_portal.core.exceptions import ValidationError
from src.employee_portal.employee_portal.events.model import ChecklistItem, Event, StaffAssignment
from src.employee_portal.employee_portal.reports.export import rows_to_xlsx
from src.employee_portal.employee_portal.reports.service import ReportService
from src.employee_portal.employee_portal.tasks.model import TaskInstance
from src.employee_portal.employee_portal.users.model import Employee


class FakeAttendanceRepo:
    def __init__(self, logs):
        self._logs = logs
        self.last_args = None

    def list_all(self, *, employee_id=None, start=None, end=None):
        self.last_args = {"employee_id": employee_id, "start": start, "end": end}
        return self._logs


class FakeTaskRepo:
    def __init__(self, instances):
        self._instances = instances
        self.last_args = None

    def list_instances(self, *, employee_id=None, start=None, end=None, status=None):
        self.last_args = {"start": start, "end": end}
        return self._instances


class FakeEventRepo:
    def __init__(self, events):
        self._events = events

    def list_events(self, *, start=None, end=None, room=None):
        return self._events


class FakeUserRepo:
    def __init__(self, employees):
        self._employees = employees

    def list_employees(self, *, include_inactive=False):
        return self._employees


LOGS = [
    AttendanceLog(
        log_id="l1",
        employee_id="e1",
        clock_in="2026-10-19T09:05:00+00:00",
        clock_out="2026-10-19T17:00:00+00:00",
        total_hours=7.916,
        late_flag=True,
        employee_name="Ann",
    ),
    AttendanceLog(
        log_id="l2",
        employee_id="e1",
        clock_in="2026-10-20T09:00:00+00:00",
        clock_out="2026-10-20T13:00:00+00:00",
        total_hours=4.0,
        employee_name="Ann",
    ),
    AttendanceLog(log_id="l3", employee_id="e2", clock_in="2026-10-20T10:00:00+00:00", employee_name="Bob"),
]

INSTANCES = [
    TaskInstance(instance_id="t1", task_id="k", employee_id="e1", scheduled_date="2026-10-19", status=TaskInstanceStatus.COMPLETED),
    TaskInstance(instance_id="t2", task_id="k", employee_id="e1", scheduled_date="2026-10-20", status=TaskInstanceStatus.COMPLETED),
    TaskInstance(instance_id="t3", task_id="k", employee_id="e1", scheduled_date="2026-10-20", status=TaskInstanceStatus.OVERDUE),
    TaskInstance(instance_id="t4", task_id="k", employee_id="e2", scheduled_date="2026-10-20"),
]

EMPLOYEES = [
    Employee(employee_id="e1", display_name="Ann", details={"position": "Host"}),
    Employee(employee_id="e2", display_name="Bob"),
    Employee(employee_id="e3", display_name="Cy"),
]


def _service(logs=LOGS, instances=INSTANCES, events=(), employees=EMPLOYEES):
    return ReportService(
        FakeAttendanceRepo(list(logs)),
        FakeTaskRepo(list(instances)),
        FakeEventRepo(list(events)),
        FakeUserRepo(list(employees)),
    )


def test_attendance_summary():
    report = _service().attendance_report(start="2026-10-19", end="2026-10-20")

    assert report.summary == {
        "currently_clocked_in": 1,
        "completed_shifts": 2,
        "late_arrivals": 1,
        "total_hours": 11.92,
    }
    assert report.rows[2]["clock_out"] == "-"


def test_attendance_range_covers_whole_days():
    attendance = FakeAttendanceRepo([])
    svc = ReportService(attendance, FakeTaskRepo([]), FakeEventRepo([]), FakeUserRepo([]))
    svc.attendance_report(start="2026-10-19", end="2026-10-20")

    assert attendance.last_args["start"].startswith("2026-10-19T00:00:00")
    assert attendance.last_args["end"].startswith("2026-10-20T23:59:59")


def test_task_summary_counts_by_status():
    report = _service().task_report(start="2026-10-19", end="2026-10-20")
    assert report.summary == {"completed": 2, "pending": 1, "overdue": 1}
    assert report.rows[0]["task"] == "Unknown Task"


def test_employee_performance():
    report = _service().employee_performance(start="2026-10-19", end="2026-10-20")
    by_id = {row["employee_id"]: row for row in report.rows}

    ann = by_id["e1"]
    assert ann["position"] == "Host"
    assert ann["total_shifts"] == 2
    assert ann["completed_shifts"] == 2
    assert ann["total_hours"] == 11.92
    assert ann["late_arrivals"] == 1
    assert ann["total_tasks"] == 3
    assert ann["completed_tasks"] == 2
    assert ann["task_completion_rate"] == 66.7

    assert by_id["e2"]["completed_shifts"] == 0
    assert by_id["e3"]["task_completion_rate"] == 0.0
    assert report.summary == {"employees": 3}


def test_events_report_rows():
    event = Event(
        event_id="ev1",
        title="Birthday Party",
        start_time="2026-10-19T14:00:00+00:00",
        end_time="2026-10-19T16:00:00+00:00",
        room="Room A",
        expected_headcount=20,
        staff=[StaffAssignment(assignment_id="a1", event_id="ev1", employee_id="e1", role="Host", employee_name="Ann")],
        checklist=[
            ChecklistItem(item_id="c1", event_id="ev1", task_title="Balloons", status=ChecklistStatus.COMPLETED),
            ChecklistItem(item_id="c2", event_id="ev1", task_title="Cake"),
        ],
    )
    report = _service(events=[event]).events_report(start="2026-10-19", end="2026-10-19")

    row = report.rows[0]
    assert row["time"] == "02:00 PM - 04:00 PM"
    assert row["staff"] == "Ann (Host)"
    assert row["checklist"] == "1/2"


def test_invalid_report_requests():
    svc = _service()
    with pytest.raises(ValidationError):
        svc.build("payroll", start="2026-10-19", end="2026-10-20")
    with pytest.raises(ValidationError):
        svc.build("tasks", start="2026-10-20", end="2026-10-19")
    with pytest.raises(ValidationError):
        svc.build("tasks", start="", end="2026-10-19")


def test_export_writes_xlsx():
    report = _service().employee_performance(start="2026-10-19", end="2026-10-20")
    output = rows_to_xlsx(report.rows, sheet_name="Employee")

    assert output.read(2) == b"PK"
