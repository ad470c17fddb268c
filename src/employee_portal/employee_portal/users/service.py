from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from ..backend.auth import AuthGateway, AuthSession, AuthUser
from ..cache import keys
from ..cache.query_cache import QueryCache
from ..common.datetime_utils import format_datetime, now_utc
from ..common.validators import optional_str, require_fields, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import ProfileStatus, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..notifications.service import NotificationService
from .model import EMPLOYEE_DETAIL_FIELDS, ID_DOCUMENT_TYPES, Employee, SessionUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackOutcome:
    redirect_path: str
    session: Optional[AuthSession] = None
    user: Optional[SessionUser] = None


def _session_user(auth_user: AuthUser, profile) -> SessionUser:
    if profile is None:
        role = Role.EMPLOYEE
        full_name = auth_user.user_metadata.get("full_name")
    else:
        role = profile.role
        full_name = profile.full_name
    return SessionUser(
        user_id=auth_user.user_id,
        email=auth_user.email or (profile.email if profile else None),
        full_name=full_name,
        role=role,
    )


class AuthService:
    """Use case: sign-in, session resolution, password reset and the OAuth callback."""

    def __init__(self, users: UserRepository, gateway: AuthGateway):
        self._users = users
        self._gateway = gateway

    def login(self, email: str, password: str) -> Tuple[AuthSession, SessionUser]:
        email = require_non_empty(email, "Email").lower()
        require_non_empty(password, "Password")

        session = self._gateway.sign_in(email, password)
        profile = self._users.get_profile(session.user.user_id)
        if profile is None:
            self._gateway.sign_out(session.access_token)
            raise AuthenticationError("No employee account exists for this email")
        if not profile.is_active:
            self._gateway.sign_out(session.access_token)
            raise AuthenticationError("Your account is inactive. Please contact your manager.")

        return session, _session_user(session.user, profile)

    def refresh(self, refresh_token: str) -> AuthSession:
        if not refresh_token:
            raise AuthenticationError("Unauthorized")
        return self._gateway.refresh(refresh_token)

    def sign_out(self, access_token: Optional[str]) -> None:
        if access_token:
            self._gateway.sign_out(access_token)

    def resolve(self, access_token: Optional[str]) -> SessionUser:
        """Turn an access token into the calling user, or raise ``AuthenticationError``."""

        if not access_token:
            raise AuthenticationError("Unauthorized")
        auth_user = self._gateway.get_user(access_token)
        if auth_user is None:
            raise AuthenticationError("Unauthorized")
        profile = self._users.get_profile(auth_user.user_id)
        if profile is not None and not profile.is_active:
            raise AuthorizationError("Your account is inactive")
        return _session_user(auth_user, profile)

    def check_user_exists(self, email: Optional[str]) -> bool:
        if not email or not str(email).strip():
            raise ValidationError("Email is required")
        return self._users.find_profile_by_email(str(email).strip().lower()) is not None

    def send_password_reset(self, email: str, *, redirect_to: Optional[str] = None) -> None:
        email = require_non_empty(email, "Email").lower()
        self._gateway.send_password_reset(email, redirect_to=redirect_to)

    def oauth_callback(self, code: Optional[str], *, code_verifier: Optional[str] = None) -> CallbackOutcome:
        """Exchange an OAuth code; only people who already have a profile may sign in."""

        if not code:
            return CallbackOutcome("/login?error=auth_callback_error")

        try:
            session = self._gateway.exchange_code(code, code_verifier=code_verifier)
        except (AuthenticationError, BackendError) as e:
            logger.error("Auth callback error: %s", e)
            return CallbackOutcome("/login?error=auth_failed")

        if not session.user.email:
            logger.error("User session has no email")
            self._gateway.sign_out(session.access_token)
            return CallbackOutcome("/login?error=no_email")

        profile = self._users.find_profile_by_email(session.user.email.lower())
        if profile is None:
            logger.info("Sign-in attempted by non-existing user: %s", session.user.email)
            self._gateway.sign_out(session.access_token)
            try:
                self._gateway.admin_delete_user(session.user.user_id)
            except DomainError:
                logger.exception("Failed to delete non-employee user %s", session.user.user_id)
            return CallbackOutcome("/login?error=not_existing_user")

        path = "/admin" if profile.role == Role.ADMIN else "/employee"
        return CallbackOutcome(path, session=session, user=_session_user(session.user, profile))


def _employee_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name in EMPLOYEE_DETAIL_FIELDS:
        if name in payload:
            fields[name] = optional_str(payload.get(name))
    doc_type = fields.get("id_document_type")
    if doc_type and doc_type not in ID_DOCUMENT_TYPES:
        raise ValidationError("Invalid ID document type")
    return fields


class EmployeeService:
    """Use case: employee administration (admin)."""

    def __init__(
        self,
        users: UserRepository,
        gateway: AuthGateway,
        cache: QueryCache,
        notifications: Optional[NotificationService] = None,
        *,
        clock: Callable = now_utc,
    ):
        self._users = users
        self._gateway = gateway
        self._cache = cache
        self._notifications = notifications
        self._clock = clock

    def list_employees(self, *, include_inactive: bool = False) -> Sequence[Employee]:
        key = f"{keys.EMPLOYEES}:all" if include_inactive else keys.EMPLOYEES
        return self._cache.get(key, lambda: self._users.list_employees(include_inactive=include_inactive))

    def get_employee(self, employee_id: str) -> Employee:
        employee = self._users.get_employee(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def create_employee(self, payload: Mapping[str, Any], *, send_welcome: bool = False) -> AuthUser:
        """Create the auth user, then its profile and employee rows.

        Profile/employee write failures are logged only: a database trigger may
        already have created the rows.
        """

        require_fields(payload, "email", "password", "full_name")
        email = require_non_empty(payload["email"], "Email").lower()
        password = require_min_length(str(payload["password"]), "Password", MIN_PASSWORD_LENGTH)
        full_name = require_non_empty(payload["full_name"], "Full name")
        try:
            role = Role(payload.get("role") or Role.EMPLOYEE.value)
        except ValueError:
            raise ValidationError("Invalid role")

        fields = _employee_fields(payload)
        fields["display_name"] = optional_str(payload.get("display_name")) or full_name
        fields["shift_type"] = fields.get("shift_type") or "full-time"
        fields["country"] = fields.get("country") or "USA"
        fields["is_active"] = True

        try:
            user = self._gateway.admin_create_user(
                email=email,
                password=password,
                user_metadata={"full_name": full_name, "role": role.value},
            )
        except AuthenticationError as e:
            # Duplicate email, weak password, ...: the caller's input, not their session.
            raise ValidationError(str(e)) from e

        try:
            self._users.upsert_profile(
                user_id=user.user_id, email=email, full_name=full_name, role=role, status=ProfileStatus.ACTIVE
            )
        except BackendError:
            logger.exception("Profile upsert failed for %s", user.user_id)
        try:
            self._users.upsert_employee(employee_id=user.user_id, fields=fields)
        except BackendError:
            logger.exception("Employee upsert failed for %s", user.user_id)

        self._cache.invalidate(keys.ADMIN_PREFIX)

        if self._notifications:
            self._notifications.employee_created(
                employee_name=fields["display_name"],
                email=email,
                position=fields.get("position"),
                created_at=format_datetime(self._clock()),
            )
            if send_welcome:
                self._notifications.welcome(employee_name=fields["display_name"], email=email, temp_password=password)

        return AuthUser(user_id=user.user_id, email=email, user_metadata=user.user_metadata)

    def update_employee(self, employee_id: str, payload: Mapping[str, Any]) -> Employee:
        updates = _employee_fields(payload)
        if "display_name" in payload:
            updates["display_name"] = require_non_empty(payload.get("display_name"), "Display name")
        if not updates:
            raise ValidationError("Nothing to update")

        self._users.update_employee(employee_id, updates)
        if "full_name" in payload:
            self._users.update_profile(employee_id, {"full_name": require_non_empty(payload["full_name"], "Full name")})
        self._cache.invalidate(keys.ADMIN_PREFIX)
        self._cache.invalidate_key(keys.employee_dashboard(employee_id))
        return self.get_employee(employee_id)

    def set_active(self, employee_id: str, *, is_active: bool) -> None:
        employee = self.get_employee(employee_id)
        status = ProfileStatus.ACTIVE if is_active else ProfileStatus.INACTIVE
        self._users.update_employee(employee_id, {"is_active": is_active})
        self._users.update_profile(employee_id, {"status": status.value})
        self._cache.invalidate(keys.ADMIN_PREFIX)

        if not is_active and self._notifications:
            self._notifications.employee_deactivated(employee_name=employee.name)

    def deactivate_employee(self, employee_id: str) -> None:
        self.set_active(employee_id, is_active=False)

    def delete_employee(self, *, current_user: SessionUser, employee_id: Optional[str]) -> None:
        """Remove employee row, profile and auth user, in that order.

        Only a failure to delete the auth user is reported to the caller.
        """

        if not employee_id:
            raise ValidationError("Employee ID required")
        if employee_id == current_user.user_id:
            raise ValidationError("You cannot delete your own account")

        try:
            employee = self._users.get_employee(employee_id)
        except BackendError:
            employee = None

        try:
            self._users.delete_employee(employee_id)
        except BackendError:
            logger.exception("Employee delete failed for %s", employee_id)
        try:
            self._users.delete_profile(employee_id)
        except BackendError:
            logger.exception("Profile delete failed for %s", employee_id)
        try:
            self._gateway.admin_delete_user(employee_id)
        except (AuthenticationError, BackendError) as e:
            logger.error("Auth delete failed for %s: %s", employee_id, e)
            raise ValidationError(str(e)) from e

        self._cache.invalidate(keys.ADMIN_PREFIX)
        self._cache.invalidate(keys.EMPLOYEE_PREFIX)

        if employee and self._notifications:
            self._notifications.employee_deleted(
                employee_name=employee.name,
                email=employee.email,
                position=employee.position,
                deleted_at=format_datetime(self._clock()),
            )
