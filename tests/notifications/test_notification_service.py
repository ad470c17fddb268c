from __future__ import annotations

import pytest

from src.employee_portal.employee_portal.core.enums import RecipientType
from src.employee_portal.employee_portal.core.exceptions import BackendError, ValidationError
from src.employee_portal.employee_portal.notifications.mailer import SendResult, html_to_text
from src.employee_portal.employee_portal.notifications.service import NotificationService
from src.employee_portal.employee_portal.notifications.templates import EmailRenderer, details, join_days


class FakeMailer:
    def __init__(self, result=SendResult(success=True)):
        self.sent = []
        self._result = result

    def send(self, *, to, subject, html, text=None):
        self.sent.append({"to": to, "subject": subject, "html": html})
        return self._result


class FakeRecipientRepo:
    def __init__(self, custom=(), admins=(), fail=False):
        self._custom = list(custom)
        self._admins = list(admins)
        self._fail = fail
        self.added = []

    def list_active_recipient_emails(self):
        if self._fail:
            raise BackendError("list recipients failed")
        return self._custom

    def list_active_admin_emails(self):
        return self._admins

    def add_recipient(self, *, email, name, recipient_type):
        self.added.append((email, name, recipient_type))
        return None


def _service(mailer=None, repo=None, admin_email="owner@example.com"):
    return NotificationService(
        mailer or FakeMailer(),
        EmailRenderer(company_name="PlayFunia", portal_url="http://portal.test/"),
        repo or FakeRecipientRepo(),
        admin_email=admin_email,
    )


def test_admin_recipients_are_deduplicated_in_order():
    repo = FakeRecipientRepo(
        custom=["mgr@example.com", "owner@example.com"],
        admins=["boss@example.com", "mgr@example.com"],
    )
    assert _service(repo=repo).admin_recipients() == ["owner@example.com", "mgr@example.com", "boss@example.com"]


def test_recipient_lookup_failure_falls_back_to_admin_email():
    assert _service(repo=FakeRecipientRepo(fail=True, admins=["boss@example.com"])).admin_recipients() == [
        "owner@example.com",
        "boss@example.com",
    ]


def test_no_admin_recipients_is_a_quiet_success():
    mailer = FakeMailer()
    result = _service(mailer=mailer, admin_email=None).employee_deactivated(employee_name="Emp")

    assert result.success is True
    assert mailer.sent == []


def test_schedule_assigned_goes_to_employee_then_admins():
    mailer = FakeMailer()
    result = _service(mailer=mailer).schedule_assigned(
        employee_name="Emp One",
        employee_email="emp@example.com",
        schedule_date="Oct 20, 2026",
        start_time="09:00 AM",
        end_time="05:00 PM",
    )

    assert result.success is True
    assert [m["to"] for m in mailer.sent] == ["emp@example.com", ["owner@example.com"]]
    assert mailer.sent[0]["subject"] == "New Schedule Assigned - Oct 20, 2026"
    assert "09:00 AM - 05:00 PM" in mailer.sent[0]["html"]
    assert "http://portal.test/employee/schedules" in mailer.sent[0]["html"]


def test_primary_failure_is_reported():
    mailer = FakeMailer(SendResult(success=False, error="smtp down"))
    result = _service(mailer=mailer).schedule_assigned(
        employee_name="Emp",
        employee_email="emp@example.com",
        schedule_date="Oct 20, 2026",
        start_time="09:00 AM",
        end_time="05:00 PM",
    )
    assert result == SendResult(success=False, error="smtp down")


def test_rendered_html_escapes_values():
    mailer = FakeMailer()
    _service(mailer=mailer).schedule_assigned(
        employee_name="<script>x</script>",
        employee_email="emp@example.com",
        schedule_date="Oct 20, 2026",
        start_time="09:00 AM",
        end_time="05:00 PM",
    )
    assert "<script>x</script>" not in mailer.sent[0]["html"]


def test_add_recipient_validates_type():
    repo = FakeRecipientRepo()
    svc = _service(repo=repo)

    svc.add_recipient(email=" Mgr@Example.com ", name="Mgr", recipient_type="manager")
    assert repo.added == [("mgr@example.com", "Mgr", RecipientType.MANAGER)]

    with pytest.raises(ValidationError):
        svc.add_recipient(email="x@example.com", name=None, recipient_type="employee")
    with pytest.raises(ValidationError):
        svc.add_recipient(email="x@example.com", name=None, recipient_type="intern")


def test_template_helpers():
    assert details(("Date", "Oct 1"), ("Notes", None), ("Room", "")) == (("Date", "Oct 1"),)
    assert join_days(["monday", "friday"]) == "Monday, Friday"
    assert html_to_text("<p>Hello <b>there</b></p>") == "Hello there"
