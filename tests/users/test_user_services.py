from __future__ import annotations

import pytest

from src.employee_portal.employee_portal.backend.auth import AuthSession, AuthUser
from src.employee_portal.employee_portal.cache import keys
from src.employee_portal.employee_portal.cache.query_cache import QueryCache
from src.employee_portal.employee_portal.core.enums import ProfileStatus, Role
from src.employee_portal.employee_portal.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendError,
    ValidationError,
)
from src.employee_portal.employee_portal.users.model import Employee, Profile, SessionUser
from src.employee_portal.employee_portal.users.service import AuthService, EmployeeService


class FakeUserRepo:
    def __init__(self, profiles=(), employees=()):
        self.profiles = {p.user_id: p for p in profiles}
        self.employees = {e.employee_id: e for e in employees}
        self.deleted = []
        self.fail_upsert = False

    def get_profile(self, user_id):
        return self.profiles.get(user_id)

    def find_profile_by_email(self, email):
        return next((p for p in self.profiles.values() if p.email == email), None)

    def get_employee(self, employee_id):
        return self.employees.get(employee_id)

    def upsert_profile(self, *, user_id, email, full_name, role, status):
        if self.fail_upsert:
            raise BackendError("profile exists")
        self.profiles[user_id] = Profile(user_id=user_id, email=email, full_name=full_name, role=role, status=status)

    def upsert_employee(self, *, employee_id, fields):
        self.employees[employee_id] = Employee(employee_id=employee_id, display_name=fields.get("display_name"))

    def delete_employee(self, employee_id):
        self.deleted.append(("employee", employee_id))

    def delete_profile(self, user_id):
        self.deleted.append(("profile", user_id))


class FakeGateway:
    def __init__(self, session=None, users=None):
        self._session = session
        self._users = users or {}
        self.signed_out = []
        self.deleted = []
        self.created = []

    def sign_in(self, email, password):
        if self._session is None:
            raise AuthenticationError("Invalid login credentials")
        return self._session

    def sign_out(self, access_token):
        self.signed_out.append(access_token)

    def get_user(self, access_token):
        return self._users.get(access_token)

    def exchange_code(self, code, *, code_verifier=None):
        if self._session is None:
            raise AuthenticationError("bad code")
        return self._session

    def admin_create_user(self, *, email, password, user_metadata):
        self.created.append(email)
        return AuthUser(user_id="new-1", email=email, user_metadata=user_metadata)

    def admin_delete_user(self, user_id):
        self.deleted.append(user_id)


def _session(email="emp@example.com", user_id="emp-1"):
    return AuthSession(access_token="at", refresh_token="rt", user=AuthUser(user_id=user_id, email=email))


EMP_PROFILE = Profile(user_id="emp-1", email="emp@example.com", full_name="Emp", role=Role.EMPLOYEE)


def test_login_rejects_inactive_profile():
    inactive = Profile(
        user_id="emp-1", email="emp@example.com", full_name="Emp", role=Role.EMPLOYEE, status=ProfileStatus.INACTIVE
    )
    gateway = FakeGateway(session=_session())
    with pytest.raises(AuthenticationError):
        AuthService(FakeUserRepo([inactive]), gateway).login("emp@example.com", "secret")
    assert gateway.signed_out == ["at"]


def test_login_returns_session_user():
    _, user = AuthService(FakeUserRepo([EMP_PROFILE]), FakeGateway(session=_session())).login(" EMP@example.com", "pw")
    assert user == SessionUser(user_id="emp-1", email="emp@example.com", full_name="Emp", role=Role.EMPLOYEE)


def test_resolve():
    gateway = FakeGateway(users={"tok": AuthUser(user_id="emp-1", email="emp@example.com")})
    svc = AuthService(FakeUserRepo([EMP_PROFILE]), gateway)

    assert svc.resolve("tok").user_id == "emp-1"
    with pytest.raises(AuthenticationError):
        svc.resolve(None)
    with pytest.raises(AuthenticationError):
        svc.resolve("expired")


def test_resolve_blocks_inactive():
    inactive = Profile(user_id="emp-1", email="e", full_name=None, role=Role.EMPLOYEE, status=ProfileStatus.INACTIVE)
    gateway = FakeGateway(users={"tok": AuthUser(user_id="emp-1", email="e")})
    with pytest.raises(AuthorizationError):
        AuthService(FakeUserRepo([inactive]), gateway).resolve("tok")


def test_callback_redirects_by_role():
    admin = Profile(user_id="adm-1", email="boss@example.com", full_name="Boss", role=Role.ADMIN)
    svc = AuthService(FakeUserRepo([admin]), FakeGateway(session=_session("boss@example.com", "adm-1")))

    outcome = svc.oauth_callback("code")
    assert outcome.redirect_path == "/admin"
    assert outcome.user.is_admin


def test_callback_removes_strangers():
    gateway = FakeGateway(session=_session("stranger@example.com", "x-1"))
    outcome = AuthService(FakeUserRepo([EMP_PROFILE]), gateway).oauth_callback("code")

    assert outcome.redirect_path == "/login?error=not_existing_user"
    assert outcome.session is None
    assert gateway.signed_out == ["at"]
    assert gateway.deleted == ["x-1"]


def test_callback_errors():
    svc = AuthService(FakeUserRepo(), FakeGateway())
    assert svc.oauth_callback(None).redirect_path == "/login?error=auth_callback_error"
    assert svc.oauth_callback("bad").redirect_path == "/login?error=auth_failed"


def test_check_user_exists():
    svc = AuthService(FakeUserRepo([EMP_PROFILE]), FakeGateway())
    assert svc.check_user_exists(" Emp@Example.com ") is True
    assert svc.check_user_exists("nobody@example.com") is False
    with pytest.raises(ValidationError):
        svc.check_user_exists("")


def test_create_employee_survives_trigger_created_rows():
    repo = FakeUserRepo()
    repo.fail_upsert = True
    cache = QueryCache()
    cache.set(keys.EMPLOYEES, [])

    user = EmployeeService(repo, FakeGateway(), cache).create_employee(
        {"email": "New@Example.com", "password": "secret1", "full_name": "New Hire"}
    )

    assert user.email == "new@example.com"
    assert repo.employees["new-1"].display_name == "New Hire"
    assert keys.EMPLOYEES not in cache


def test_create_employee_password_length():
    with pytest.raises(ValidationError):
        EmployeeService(FakeUserRepo(), FakeGateway(), QueryCache()).create_employee(
            {"email": "a@example.com", "password": "123", "full_name": "A"}
        )


def test_cannot_delete_self():
    me = SessionUser(user_id="adm-1", email=None, full_name=None, role=Role.ADMIN)
    with pytest.raises(ValidationError):
        EmployeeService(FakeUserRepo(), FakeGateway(), QueryCache()).delete_employee(current_user=me, employee_id="adm-1")


def test_delete_removes_rows_then_auth_user():
    me = SessionUser(user_id="adm-1", email=None, full_name=None, role=Role.ADMIN)
    repo = FakeUserRepo()
    gateway = FakeGateway()
    EmployeeService(repo, gateway, QueryCache()).delete_employee(current_user=me, employee_id="emp-1")

    assert repo.deleted == [("employee", "emp-1"), ("profile", "emp-1")]
    assert gateway.deleted == ["emp-1"]
