from __future__ import annotations

from types import SimpleNamespace

import pytest

from src.employee_portal.employee_portal.cache.query_cache import QueryCache
from src.employee_portal.employee_portal.container import session_device_identity
from src.employee_portal.employee_portal.core.enums import Role
from src.employee_portal.employee_portal.core.exceptions import AuthenticationError
from src.employee_portal.employee_portal.main import create_app
from src.employee_portal.employee_portal.users.model import SessionUser

EMPLOYEE = SessionUser(user_id="emp-1", email="emp@example.com", full_name="Emp One", role=Role.EMPLOYEE)
ADMIN = SessionUser(user_id="adm-1", email="boss@example.com", full_name="Boss", role=Role.ADMIN)


class FakeAuthService:
    """Resolves fixed bearer tokens to users."""

    tokens = {"emp-token": EMPLOYEE, "admin-token": ADMIN}

    def resolve(self, access_token):
        user = self.tokens.get(access_token or "")
        if user is None:
            raise AuthenticationError("Unauthorized")
        return user

    def refresh(self, refresh_token):
        raise AuthenticationError("Unauthorized")


@pytest.fixture
def make_app(monkeypatch):
    """Build the Flask app around a container whose services are given as keyword args."""

    monkeypatch.setenv("APP_ENV", "testing")

    def _make(**services):
        container = SimpleNamespace(
            cache=QueryCache(),
            auth_gateway=None,
            storage=None,
            auth_service=FakeAuthService(),
            employee_service=None,
            attendance_service=None,
            schedule_service=None,
            task_service=None,
            event_service=None,
            policy_service=None,
            dashboard_service=None,
            report_service=None,
            notification_service=None,
            device_identity_factory=session_device_identity,
        )
        for name, value in services.items():
            setattr(container, name, value)
        return create_app(container)

    return _make
