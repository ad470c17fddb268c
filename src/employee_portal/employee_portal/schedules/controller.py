from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import error_response, json_body, make_guards
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    login_required = guards.login_required
    admin_required = guards.admin_required
    service = container.schedule_service

    @app.route("/api/schedules", methods=["GET"], endpoint="my_schedules")
    @login_required
    def my_schedules():
        try:
            schedules = service.my_schedules(
                g.current_user, start=request.args.get("start"), end=request.args.get("end")
            )
            return jsonify({"schedules": [s.to_dict() for s in schedules]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/schedules/upcoming", methods=["GET"], endpoint="upcoming_schedules")
    @login_required
    def upcoming():
        try:
            schedules = service.upcoming(g.current_user.user_id)
            return jsonify({"schedules": [s.to_dict() for s in schedules]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/schedules/<schedule_id>/confirm", methods=["POST"], endpoint="confirm_schedule")
    @login_required
    def confirm(schedule_id: str):
        try:
            service.confirm(current_user=g.current_user, schedule_id=schedule_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/schedules/<schedule_id>/cancel-request", methods=["POST"], endpoint="request_cancellation")
    @login_required
    def request_cancellation(schedule_id: str):
        try:
            service.request_cancellation(
                current_user=g.current_user, schedule_id=schedule_id, reason=json_body().get("reason")
            )
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/schedules/notify", methods=["POST"], endpoint="schedule_notify")
    @login_required
    def notify():
        try:
            body = json_body()
            result = service.notify(
                schedule_id=body.get("scheduleId"),
                notification_type=body.get("type"),
                reason=body.get("reason"),
            )
            return jsonify({"success": True, "emailSent": result.success})
        except Exception as e:
            return error_response(e)

    @app.route("/api/schedules/bulk-notify", methods=["POST"], endpoint="schedule_bulk_notify")
    @admin_required
    def bulk_notify():
        try:
            result = service.bulk_notify(json_body())
            return jsonify({"success": True, "emailSent": result.success})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules", methods=["GET"], endpoint="admin_list_schedules")
    @admin_required
    def list_schedules():
        try:
            schedules = service.list_schedules(
                start=request.args.get("start"),
                end=request.args.get("end"),
                status=request.args.get("status"),
                employee_id=request.args.get("employeeId"),
            )
            return jsonify({"schedules": [s.to_dict() for s in schedules]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules", methods=["POST"], endpoint="admin_create_schedule")
    @admin_required
    def create_schedule():
        try:
            schedule = service.create_schedule(current_user=g.current_user, payload=json_body())
            return jsonify({"success": True, "schedule": schedule.to_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/bulk", methods=["POST"], endpoint="admin_bulk_schedules")
    @admin_required
    def create_bulk():
        try:
            created = service.create_bulk(current_user=g.current_user, payload=json_body())
            return jsonify({"success": True, "count": len(created), "schedules": [s.to_dict() for s in created]}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/stats", methods=["GET"], endpoint="admin_schedule_stats")
    @admin_required
    def stats():
        try:
            return jsonify(service.stats().to_dict())
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/pending", methods=["GET"], endpoint="admin_pending_schedules")
    @admin_required
    def pending():
        try:
            return jsonify(
                {
                    "confirmations": [s.to_dict() for s in service.pending_confirmations()],
                    "cancellations": [s.to_dict() for s in service.pending_cancellations()],
                }
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/<schedule_id>", methods=["PATCH"], endpoint="admin_update_schedule")
    @admin_required
    def update_schedule(schedule_id: str):
        try:
            schedule = service.update_schedule(current_user=g.current_user, schedule_id=schedule_id, payload=json_body())
            return jsonify({"success": True, "schedule": schedule.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/<schedule_id>", methods=["DELETE"], endpoint="admin_delete_schedule")
    @admin_required
    def delete_schedule(schedule_id: str):
        try:
            service.delete_schedule(current_user=g.current_user, schedule_id=schedule_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/<schedule_id>/approve-cancellation", methods=["POST"], endpoint="admin_approve_cancellation")
    @admin_required
    def approve_cancellation(schedule_id: str):
        try:
            schedule = service.approve_cancellation(current_user=g.current_user, schedule_id=schedule_id)
            return jsonify({"success": True, "schedule": schedule.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/<schedule_id>/cancel", methods=["POST"], endpoint="admin_cancel_schedule")
    @admin_required
    def admin_cancel(schedule_id: str):
        try:
            schedule = service.admin_cancel(
                current_user=g.current_user, schedule_id=schedule_id, reason=json_body().get("reason")
            )
            return jsonify({"success": True, "schedule": schedule.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/schedules/<schedule_id>/email-logs", methods=["GET"], endpoint="admin_schedule_email_logs")
    @admin_required
    def email_logs(schedule_id: str):
        try:
            logs = service.email_logs(schedule_id)
            return jsonify({"logs": [vars(log) for log in logs]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/notification-recipients", methods=["GET"], endpoint="admin_list_recipients")
    @admin_required
    def list_recipients():
        try:
            recipients = container.notification_service.list_recipients()
            return jsonify({"recipients": [r.to_dict() for r in recipients]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/notification-recipients", methods=["POST"], endpoint="admin_add_recipient")
    @admin_required
    def add_recipient():
        try:
            body = json_body()
            recipient = container.notification_service.add_recipient(
                email=body.get("email", ""),
                name=body.get("name"),
                recipient_type=body.get("recipient_type") or "manager",
            )
            return jsonify({"success": True, "recipient": recipient.to_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/notification-recipients/<recipient_id>", methods=["PATCH"], endpoint="admin_toggle_recipient")
    @admin_required
    def toggle_recipient(recipient_id: str):
        try:
            is_active = bool(json_body().get("is_active"))
            container.notification_service.toggle_recipient(recipient_id, is_active=is_active)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/notification-recipients/<recipient_id>", methods=["DELETE"], endpoint="admin_remove_recipient")
    @admin_required
    def remove_recipient(recipient_id: str):
        try:
            container.notification_service.remove_recipient(recipient_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)
