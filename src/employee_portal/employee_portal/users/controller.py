from __future__ import annotations

import logging

from flask import Flask, g, jsonify, redirect, request, session

from ..common.http import (
    clear_session_tokens,
    error_response,
    json_body,
    make_guards,
    request_token,
    store_session_tokens,
)
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    login_required = guards.login_required
    admin_required = guards.admin_required

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        try:
            body = json_body()
            auth_session, user = container.auth_service.login(body.get("email", ""), body.get("password", ""))
            store_session_tokens(auth_session)
            return jsonify(
                {
                    "success": True,
                    "user": user.to_dict(),
                    "redirect": "/admin" if user.is_admin else "/employee",
                }
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/auth/refresh", methods=["POST"], endpoint="auth_refresh")
    def refresh():
        try:
            body = json_body()
            refresh_token = body.get("refreshToken") or session.get("refresh_token")
            auth_session = container.auth_service.refresh(refresh_token)
            store_session_tokens(auth_session)
            return jsonify({"success": True, "expiresAt": auth_session.expires_at})
        except Exception as e:
            return error_response(e)

    @app.route("/api/auth/signout", methods=["POST"], endpoint="auth_signout")
    def signout():
        try:
            container.auth_service.sign_out(request_token())
        except Exception:
            logger.exception("Server signout error")
            return jsonify({"success": False, "error": "signout_failed"}), 500
        finally:
            # Device keys share the session cookie and must survive a sign-out.
            clear_session_tokens()
        return jsonify({"success": True})

    @app.route("/api/auth/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def forgot_password():
        try:
            body = json_body()
            container.auth_service.send_password_reset(
                body.get("email", ""),
                redirect_to=app.config.get("PORTAL_URL", "").rstrip("/") + "/reset-password",
            )
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/auth/check-user", methods=["POST"], endpoint="auth_check_user")
    def check_user():
        try:
            body = json_body()
            exists = container.auth_service.check_user_exists(body.get("email"))
            return jsonify({"exists": exists})
        except Exception as e:
            return error_response(e)

    @app.route("/auth/callback", methods=["GET"], endpoint="auth_callback")
    def auth_callback():
        outcome = container.auth_service.oauth_callback(
            request.args.get("code"),
            code_verifier=request.args.get("code_verifier"),
        )
        if outcome.session is not None:
            store_session_tokens(outcome.session)
        return redirect(outcome.redirect_path)

    @app.route("/api/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        return jsonify({"user": g.current_user.to_dict()})

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_list_employees")
    @admin_required
    def list_employees():
        try:
            include_inactive = request.args.get("includeInactive", "").lower() in ("1", "true", "yes")
            employees = container.employee_service.list_employees(include_inactive=include_inactive)
            return jsonify({"employees": [e.to_dict() for e in employees]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/employees", methods=["POST"], endpoint="admin_create_employee")
    @admin_required
    def create_employee():
        try:
            body = json_body()
            user = container.employee_service.create_employee(body, send_welcome=bool(body.get("send_welcome")))
            return jsonify({"success": True, "user": {"id": user.user_id, "email": user.email}})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/employees", methods=["DELETE"], endpoint="admin_delete_employee")
    @admin_required
    def delete_employee():
        try:
            container.employee_service.delete_employee(
                current_user=g.current_user,
                employee_id=request.args.get("id"),
            )
            return jsonify({"success": True, "message": "Employee permanently deleted"})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/employees/<employee_id>", methods=["PATCH"], endpoint="admin_update_employee")
    @admin_required
    def update_employee(employee_id: str):
        try:
            employee = container.employee_service.update_employee(employee_id, json_body())
            return jsonify({"success": True, "employee": employee.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/employees/<employee_id>/deactivate", methods=["POST"], endpoint="admin_deactivate_employee")
    @admin_required
    def deactivate_employee(employee_id: str):
        try:
            container.employee_service.deactivate_employee(employee_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)
