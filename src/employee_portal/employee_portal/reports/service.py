from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Tuple

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_date, format_datetime, format_time, parse_iso_date
from ..core.enums import ChecklistStatus, TaskInstanceStatus
from ..core.exceptions import ValidationError
from ..events.repository import EventRepository
from ..tasks.repository import TaskRepository
from ..users.repository import UserRepository


@dataclass(frozen=True)
class ReportData:
    rows: List[Dict[str, Any]]
    summary: Dict[str, Any] = field(default_factory=dict)


def _day_bounds(start: str, end: str) -> Tuple[date, date, str, str]:
    """Whole UTC days covering ``start``..``end`` (inclusive)."""
    start_day = parse_iso_date(start)
    end_day = parse_iso_date(end)
    if end_day < start_day:
        raise ValidationError("End date must be on or after start date")
    lower = datetime.combine(start_day, time.min, tzinfo=timezone.utc).isoformat()
    upper = datetime.combine(end_day, time.max, tzinfo=timezone.utc).isoformat()
    return start_day, end_day, lower, upper


class ReportService:
    """Admin reports over a date range: attendance, tasks, events and per-employee performance."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        tasks: TaskRepository,
        events: EventRepository,
        users: UserRepository,
    ):
        self._attendance = attendance
        self._tasks = tasks
        self._events = events
        self._users = users

    def build(self, report_type: str, *, start: str, end: str) -> ReportData:
        if report_type == "attendance":
            return self.attendance_report(start=start, end=end)
        if report_type == "tasks":
            return self.task_report(start=start, end=end)
        if report_type == "events":
            return self.events_report(start=start, end=end)
        if report_type == "employee":
            return self.employee_performance(start=start, end=end)
        raise ValidationError("Invalid report type")

    def attendance_report(self, *, start: str, end: str) -> ReportData:
        _, _, lower, upper = _day_bounds(start, end)
        logs = self._attendance.list_all(start=lower, end=upper)

        rows = [
            {
                "employee": log.employee_name or "-",
                "position": log.employee_position or "-",
                "date": format_date(log.clock_in),
                "clock_in": format_time(log.clock_in),
                "clock_out": format_time(log.clock_out) if log.clock_out else "-",
                "total_hours": round(log.total_hours or 0.0, 2),
                "late": log.late_flag,
                "early_checkout": log.early_checkout_flag,
            }
            for log in logs
        ]
        summary = {
            "currently_clocked_in": sum(1 for log in logs if not log.clock_out),
            "completed_shifts": sum(1 for log in logs if log.clock_out),
            "late_arrivals": sum(1 for log in logs if log.late_flag),
            "total_hours": round(sum(log.total_hours or 0.0 for log in logs), 2),
        }
        return ReportData(rows=rows, summary=summary)

    def task_report(self, *, start: str, end: str) -> ReportData:
        start_day, end_day, _, _ = _day_bounds(start, end)
        instances = self._tasks.list_instances(start=start_day.isoformat(), end=end_day.isoformat())

        rows = [
            {
                "id": i.instance_id,
                "task": i.task_title or "Unknown Task",
                "employee": i.employee_name or "-",
                "scheduled_date": format_date(i.scheduled_date),
                "status": i.status.value,
                "completed_at": format_datetime(i.completed_at) if i.completed_at else "-",
                "notes": i.notes or "",
                "has_photo": bool(i.photo_url),
                "has_video": bool(i.video_url),
            }
            for i in instances
        ]
        summary = {
            "completed": sum(1 for i in instances if i.status == TaskInstanceStatus.COMPLETED),
            "pending": sum(1 for i in instances if i.status == TaskInstanceStatus.PENDING),
            "overdue": sum(1 for i in instances if i.status == TaskInstanceStatus.OVERDUE),
        }
        return ReportData(rows=rows, summary=summary)

    def events_report(self, *, start: str, end: str) -> ReportData:
        _, _, lower, upper = _day_bounds(start, end)
        events = self._events.list_events(start=lower, end=upper)

        rows = []
        for e in events:
            done = sum(1 for c in e.checklist if c.status == ChecklistStatus.COMPLETED)
            rows.append(
                {
                    "event": e.title,
                    "date": format_date(e.start_time),
                    "time": f"{format_time(e.start_time)} - {format_time(e.end_time)}",
                    "room": e.room or "-",
                    "expected_headcount": e.expected_headcount,
                    "staff": ", ".join(f"{s.employee_name or '-'} ({s.role})" for s in e.staff),
                    "checklist": f"{done}/{len(e.checklist)}",
                }
            )
        return ReportData(rows=rows, summary={"events": len(events)})

    def employee_performance(self, *, start: str, end: str) -> ReportData:
        start_day, end_day, lower, upper = _day_bounds(start, end)
        employees = self._users.list_employees(include_inactive=False)
        logs = self._attendance.list_all(start=lower, end=upper)
        instances = self._tasks.list_instances(start=start_day.isoformat(), end=end_day.isoformat())

        rows = []
        for emp in employees:
            emp_logs = [log for log in logs if log.employee_id == emp.employee_id]
            emp_tasks = [i for i in instances if i.employee_id == emp.employee_id]
            completed_tasks = sum(1 for i in emp_tasks if i.status == TaskInstanceStatus.COMPLETED)
            rate = (completed_tasks / len(emp_tasks) * 100) if emp_tasks else 0.0
            rows.append(
                {
                    "employee_id": emp.employee_id,
                    "employee": emp.name,
                    "position": emp.position or "-",
                    "total_shifts": len(emp_logs),
                    "completed_shifts": sum(1 for log in emp_logs if log.clock_out),
                    "total_hours": round(sum(log.total_hours or 0.0 for log in emp_logs), 2),
                    "late_arrivals": sum(1 for log in emp_logs if log.late_flag),
                    "total_tasks": len(emp_tasks),
                    "completed_tasks": completed_tasks,
                    "task_completion_rate": round(rate, 1),
                }
            )
        return ReportData(rows=rows, summary={"employees": len(rows)})
