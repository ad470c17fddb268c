from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..cache.timings import COOKIE_CONSENT_COOKIE, timings_for_consent
from ..common.http import error_response, make_guards
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    login_required = guards.login_required
    admin_required = guards.admin_required
    service = container.dashboard_service

    def _timings():
        return timings_for_consent(request.cookies.get(COOKIE_CONSENT_COOKIE))

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_required
    def admin_stats():
        try:
            return jsonify(service.admin_stats(_timings()).to_dict())
        except Exception as e:
            return error_response(e)

    @app.route("/api/employee/dashboard", methods=["GET"], endpoint="employee_dashboard")
    @login_required
    def employee_dashboard():
        try:
            return jsonify(service.employee_dashboard(g.current_user, _timings()).to_dict())
        except Exception as e:
            return error_response(e)
