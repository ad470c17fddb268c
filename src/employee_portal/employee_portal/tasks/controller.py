from __future__ import annotations

from flask import Flask, g, jsonify, request
from werkzeug.utils import secure_filename

from ..common.http import error_response, json_body, make_guards
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    login_required = guards.login_required
    admin_required = guards.admin_required
    service = container.task_service

    @app.route("/api/tasks/today", methods=["GET"], endpoint="today_tasks")
    @login_required
    def today_tasks():
        try:
            return jsonify({"tasks": list(service.today_tasks(g.current_user))})
        except Exception as e:
            return error_response(e)

    @app.route("/api/tasks/<instance_id>/complete", methods=["POST"], endpoint="complete_task")
    @login_required
    def complete(instance_id: str):
        try:
            service.complete(user=g.current_user, instance_id=instance_id, payload=json_body())
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/tasks/<instance_id>/media", methods=["POST"], endpoint="upload_task_media")
    @login_required
    def upload_media(instance_id: str):
        try:
            upload = request.files.get("file")
            if upload is None:
                raise ValidationError("File is required")
            path = service.upload_media(
                user=g.current_user,
                instance_id=instance_id,
                filename=secure_filename(upload.filename or ""),
                content=upload.read(),
                content_type=upload.mimetype,
            )
            return jsonify({"success": True, "path": path}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/tasks/media-url", methods=["GET"], endpoint="task_media_url")
    @login_required
    def media_url():
        try:
            return jsonify({"url": service.signed_media_url(request.args.get("path"))})
        except Exception as e:
            return error_response(e)

    @app.route("/api/tasks/notify", methods=["POST"], endpoint="task_notify")
    @login_required
    def notify():
        try:
            result = service.notify(json_body())
            return jsonify({"success": True, "emailSent": result.success})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/tasks", methods=["GET"], endpoint="admin_list_tasks")
    @admin_required
    def list_tasks():
        try:
            return jsonify({"tasks": [t.to_dict() for t in service.list_tasks()]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/tasks", methods=["POST"], endpoint="admin_create_task")
    @admin_required
    def create_task():
        try:
            task = service.create_task(current_user=g.current_user, payload=json_body())
            return jsonify({"success": True, "task": task.to_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/tasks/<task_id>", methods=["PATCH"], endpoint="admin_update_task")
    @admin_required
    def update_task(task_id: str):
        try:
            task = service.update_task(task_id, json_body())
            return jsonify({"success": True, "task": task.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/tasks/<task_id>", methods=["DELETE"], endpoint="admin_delete_task")
    @admin_required
    def delete_task(task_id: str):
        try:
            service.delete_task(task_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/task-instances", methods=["GET"], endpoint="admin_list_task_instances")
    @admin_required
    def list_instances():
        try:
            instances = service.list_instances(
                employee_id=request.args.get("employeeId"),
                start=request.args.get("start"),
                end=request.args.get("end"),
                status=request.args.get("status"),
            )
            return jsonify({"instances": [i.to_dict() for i in instances]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/task-instances", methods=["POST"], endpoint="admin_assign_task")
    @admin_required
    def assign():
        try:
            instance = service.assign(json_body())
            return jsonify({"success": True, "instance": instance.to_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/task-instances/<instance_id>", methods=["PATCH"], endpoint="admin_update_task_instance")
    @admin_required
    def update_instance(instance_id: str):
        try:
            service.update_instance(instance_id, json_body())
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/task-instances/<instance_id>", methods=["DELETE"], endpoint="admin_delete_task_instance")
    @admin_required
    def delete_instance(instance_id: str):
        try:
            service.delete_instance(instance_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/tasks/stats", methods=["GET"], endpoint="admin_task_stats")
    @admin_required
    def stats():
        try:
            return jsonify(service.stats(request.args.get("date")).to_dict())
        except Exception as e:
            return error_response(e)
