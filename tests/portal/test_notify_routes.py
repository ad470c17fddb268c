from __future__ import annotations

from src.employee_portal.employee_portal.cache.query_cache import QueryCache
from src.employee_portal.employee_portal.core.enums import ScheduleStatus
from src.employee_portal.employee_portal.schedules.model import Schedule
from src.employee_portal.employee_portal.schedules.service import ScheduleService
from src.employee_portal.employee_portal.tasks.service import TaskService


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class FakeScheduleRepo:
    def __init__(self, schedules=()):
        self._schedules = {s.schedule_id: s for s in schedules}
        self.logged = []

    def get(self, schedule_id):
        return self._schedules.get(schedule_id)

    def list_schedules(self, *, start=None, end=None, status=None, employee_id=None):
        return [s for s in self._schedules.values() if status is None or s.status == status]

    def log_email(self, **kwargs):
        self.logged.append(kwargs)


class FakeTaskRepo:
    def get_instance(self, instance_id):
        return None


SCHEDULE = Schedule(
    schedule_id="sch-1",
    employee_id="emp-1",
    schedule_date="2026-10-20",
    start_time="09:00:00",
    end_time="17:00:00",
    employee_name="Emp One",
    employee_email="emp@example.com",
)


def _app(make_app, repo=None):
    repo = repo or FakeScheduleRepo([SCHEDULE])
    schedule_service = ScheduleService(repo, QueryCache())
    task_service = TaskService(FakeTaskRepo(), users=None, cache=QueryCache())
    return make_app(schedule_service=schedule_service, task_service=task_service), repo


def test_notify_requires_login(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post("/api/schedules/notify", json={"scheduleId": "sch-1", "type": "schedule_assigned"})
    assert resp.status_code == 401


def test_notify_missing_fields(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post("/api/schedules/notify", json={"scheduleId": "sch-1"}, headers=auth("emp-token"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Missing required fields"


def test_notify_unknown_type(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post(
        "/api/schedules/notify", json={"scheduleId": "sch-1", "type": "party"}, headers=auth("emp-token")
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid notification type"


def test_notify_unknown_schedule(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post(
        "/api/schedules/notify", json={"scheduleId": "nope", "type": "schedule_assigned"}, headers=auth("emp-token")
    )
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Schedule not found"


def test_notify_without_mailer_still_logs(make_app):
    app, repo = _app(make_app)
    resp = app.test_client().post(
        "/api/schedules/notify", json={"scheduleId": "sch-1", "type": "schedule_assigned"}, headers=auth("emp-token")
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "emailSent": False}
    assert repo.logged[0]["email_type"] == "schedule_assigned"
    assert repo.logged[0]["recipient_type"] == "employee"
    assert repo.logged[0]["status"] == "failed"


def test_deleted_schedule_notice_is_not_logged(make_app):
    app, repo = _app(make_app)
    app.test_client().post(
        "/api/schedules/notify", json={"scheduleId": "sch-1", "type": "schedule_deleted"}, headers=auth("emp-token")
    )
    assert repo.logged == []


def test_bulk_notify_is_admin_only(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post("/api/schedules/bulk-notify", json={}, headers=auth("emp-token"))
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Forbidden - Admin only"


def test_admin_routes_reject_employees(make_app):
    app, _ = _app(make_app)
    client = app.test_client()
    assert client.get("/api/admin/schedules", headers=auth("emp-token")).status_code == 403
    assert client.get("/api/admin/schedules", headers=auth("admin-token")).status_code == 200


def test_admin_pending_lists(make_app):
    requested = Schedule(
        schedule_id="sch-2",
        employee_id="emp-1",
        schedule_date="2026-10-21",
        start_time="09:00",
        end_time="17:00",
        status=ScheduleStatus.CANCELLATION_REQUESTED,
    )
    app, _ = _app(make_app, FakeScheduleRepo([SCHEDULE, requested]))
    body = app.test_client().get("/api/admin/schedules/pending", headers=auth("admin-token")).get_json()

    assert [s["id"] for s in body["confirmations"]] == ["sch-1"]
    assert [s["id"] for s in body["cancellations"]] == ["sch-2"]


def test_task_notify_missing_type(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post("/api/tasks/notify", json={}, headers=auth("emp-token"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Missing notification type"


def test_task_notify_unknown_instance(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post(
        "/api/tasks/notify", json={"type": "task_completed", "taskInstanceId": "ti-9"}, headers=auth("emp-token")
    )
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Task instance not found"


def test_task_notify_unknown_type_is_acknowledged(make_app):
    app, _ = _app(make_app)
    resp = app.test_client().post("/api/tasks/notify", json={"type": "something_else"}, headers=auth("emp-token"))
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "emailSent": False}


def test_health(make_app):
    app, _ = _app(make_app)
    assert app.test_client().get("/health").get_json() == {"status": "ok"}
