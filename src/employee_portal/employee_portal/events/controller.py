from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import error_response, json_body, make_guards
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    login_required = guards.login_required
    admin_required = guards.admin_required
    service = container.event_service

    @app.route("/api/events/upcoming", methods=["GET"], endpoint="my_upcoming_events")
    @login_required
    def my_upcoming():
        try:
            return jsonify({"events": list(service.my_upcoming(g.current_user))})
        except Exception as e:
            return error_response(e)

    @app.route("/api/events/today", methods=["GET"], endpoint="today_events")
    @login_required
    def today():
        try:
            return jsonify({"events": [e.to_dict() for e in service.today()]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/events/checklist/<item_id>/complete", methods=["POST"], endpoint="complete_checklist_item")
    @login_required
    def complete_checklist_item(item_id: str):
        try:
            service.complete_checklist_item(user=g.current_user, item_id=item_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/events/notify", methods=["POST"], endpoint="event_notify")
    @login_required
    def notify():
        try:
            result = service.notify(json_body())
            return jsonify({"success": True, "emailSent": result.success})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events", methods=["GET"], endpoint="admin_list_events")
    @admin_required
    def list_events():
        try:
            events = service.list_events(
                start=request.args.get("start"),
                end=request.args.get("end"),
                room=request.args.get("room"),
            )
            return jsonify({"events": [e.to_dict() for e in events]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events", methods=["POST"], endpoint="admin_create_event")
    @admin_required
    def create_event():
        try:
            event = service.create(current_user=g.current_user, payload=json_body())
            return jsonify({"success": True, "event": event.to_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events/<event_id>", methods=["GET"], endpoint="admin_get_event")
    @admin_required
    def get_event(event_id: str):
        try:
            return jsonify({"event": service.get(event_id).to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events/<event_id>", methods=["PATCH"], endpoint="admin_update_event")
    @admin_required
    def update_event(event_id: str):
        try:
            event = service.update(event_id, json_body())
            return jsonify({"success": True, "event": event.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events/<event_id>", methods=["DELETE"], endpoint="admin_delete_event")
    @admin_required
    def delete_event(event_id: str):
        try:
            service.delete(event_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events/<event_id>/staff", methods=["POST"], endpoint="admin_assign_staff")
    @admin_required
    def assign_staff(event_id: str):
        try:
            assignment = service.assign_staff(event_id, json_body())
            return jsonify({"success": True, "assignment": vars(assignment)}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events/staff/<assignment_id>", methods=["DELETE"], endpoint="admin_remove_staff")
    @admin_required
    def remove_staff(assignment_id: str):
        try:
            service.remove_staff(assignment_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events/<event_id>/checklist", methods=["POST"], endpoint="admin_add_checklist_item")
    @admin_required
    def add_checklist_item(event_id: str):
        try:
            item = service.add_checklist_item(event_id, json_body().get("task_title"))
            return jsonify({"success": True, "item": {"id": item.item_id, "task_title": item.task_title}}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/events/checklist/<item_id>", methods=["DELETE"], endpoint="admin_delete_checklist_item")
    @admin_required
    def delete_checklist_item(item_id: str):
        try:
            service.delete_checklist_item(item_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)
