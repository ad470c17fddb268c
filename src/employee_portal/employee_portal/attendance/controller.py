from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import error_response, json_body, make_guards
from ..common.validators import require_fields
from ..container import Container
from ..core.exceptions import DeviceMismatchError, DeviceRegistrationRequired
from ..devices.identity import format_device_display
from ..devices.model import DeviceSignals


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    login_required = guards.login_required
    admin_required = guards.admin_required

    def _signals(body: dict) -> DeviceSignals:
        # an id is only ever derived from the browser's real signals
        require_fields(body, "device", message="Missing device information")
        return DeviceSignals.from_payload(
            body["device"],
            user_agent=request.headers.get("User-Agent", ""),
        )

    @app.route("/api/attendance/device", methods=["GET", "POST"], endpoint="attendance_device")
    @login_required
    def device_status():
        try:
            identity = container.device_identity_factory()
            if request.method == "POST":
                check = container.attendance_service.check_device(identity, _signals(json_body()))
            else:
                check = container.attendance_service.stored_device_status(identity)
            data = check.to_dict()
            data["display"] = format_device_display(check.registration.device_name, check.registration.registered_device_id)
            return jsonify(data)
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/open", methods=["GET"], endpoint="attendance_open")
    @login_required
    def open_attendance():
        try:
            record = container.attendance_service.get_open_attendance()
            if record is None:
                return jsonify({"open": None})
            return jsonify({"open": {"id": record.log_id, "clock_in": record.clock_in}})
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    def clock_in():
        try:
            body = json_body()
            result = container.attendance_service.clock_in(
                user=g.current_user,
                identity=container.device_identity_factory(),
                signals=_signals(body),
                register=bool(body.get("register")),
            )
            return jsonify({"success": True, **result.to_dict()})
        except DeviceRegistrationRequired as e:
            return error_response(e, code="device_registration_required")
        except DeviceMismatchError as e:
            return error_response(e, code="device_mismatch")
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    def clock_out():
        try:
            body = json_body()
            result = container.attendance_service.clock_out(
                user=g.current_user,
                identity=container.device_identity_factory(),
                signals=_signals(body),
            )
            return jsonify({"success": True, **result.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_history")
    @login_required
    def history():
        try:
            logs = container.attendance_service.my_history(
                start=request.args.get("start"),
                end=request.args.get("end"),
            )
            return jsonify({"attendance": [log.to_dict() for log in logs]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="admin_attendance")
    @admin_required
    def admin_attendance():
        try:
            day = request.args.get("date")
            employee_id = request.args.get("employeeId")
            if employee_id or request.args.get("start") or request.args.get("end"):
                logs = container.attendance_service.list_all(
                    employee_id=employee_id,
                    start=request.args.get("start"),
                    end=request.args.get("end"),
                )
            else:
                logs = container.attendance_service.day_report(day)
            return jsonify({"attendance": [log.to_dict() for log in logs]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/attendance/<log_id>", methods=["PATCH"], endpoint="admin_update_attendance")
    @admin_required
    def update_attendance(log_id: str):
        try:
            container.attendance_service.update_log(log_id, json_body())
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/attendance/<log_id>", methods=["DELETE"], endpoint="admin_delete_attendance")
    @admin_required
    def delete_attendance(log_id: str):
        try:
            container.attendance_service.delete_log(log_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/employees/<employee_id>/device", methods=["DELETE"], endpoint="admin_clear_device")
    @admin_required
    def clear_device(employee_id: str):
        try:
            container.attendance_service.clear_device(employee_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)
