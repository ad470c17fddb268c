from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import g, jsonify, request, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendError,
    DeviceMismatchError,
    DeviceRegistrationRequired,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"

_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (DeviceMismatchError, 403),
    (NotFoundError, 404),
    (DeviceRegistrationRequired, 409),
    (BackendError, 502),
)


def status_for(e: Exception) -> int:
    for exc_type, status in _STATUS:
        if isinstance(e, exc_type):
            return status
    return 500


def error_response(e: Exception, **extra: Any):
    status = status_for(e)
    if status == 500:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = "Internal server error"
    else:
        message = str(e)
    body: Dict[str, Any] = {"error": message}
    body.update(extra)
    return jsonify(body), status


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")
    return data


def request_token() -> Optional[str]:
    """Bearer token from the Authorization header, else the one stored at login."""
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return session.get(ACCESS_TOKEN_KEY)


def store_session_tokens(auth_session) -> None:
    session[ACCESS_TOKEN_KEY] = auth_session.access_token
    session[REFRESH_TOKEN_KEY] = auth_session.refresh_token
    session.permanent = True


def clear_session_tokens() -> None:
    session.pop(ACCESS_TOKEN_KEY, None)
    session.pop(REFRESH_TOKEN_KEY, None)


@dataclass(frozen=True)
class Guards:
    login_required: Callable
    admin_required: Callable


def make_guards(auth_service) -> Guards:
    """Route decorators that resolve the caller and put it on ``flask.g``.

    ``g.current_user`` is the resolved ``SessionUser``; ``g.access_token`` is what the
    per-request backend client authenticates with.
    """

    def _authenticate():
        token = request_token()
        try:
            user = auth_service.resolve(token)
        except AuthenticationError:
            refresh_token = session.get(REFRESH_TOKEN_KEY)
            if not refresh_token or token != session.get(ACCESS_TOKEN_KEY):
                raise
            # Stored access token expired: rotate it once.
            refreshed = auth_service.refresh(refresh_token)
            store_session_tokens(refreshed)
            token = refreshed.access_token
            user = auth_service.resolve(token)

        g.access_token = token
        g.current_user = user
        return user

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                _authenticate()
            except DomainError as e:
                return error_response(e)
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                user = _authenticate()
            except DomainError as e:
                return error_response(e)
            if not user.is_admin:
                return jsonify({"error": "Forbidden - Admin only"}), 403
            return view(*args, **kwargs)

        return wrapper

    return Guards(login_required=login_required, admin_required=admin_required)
