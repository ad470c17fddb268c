from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.utils import secure_filename

from ..common.http import error_response, json_body, make_guards
from ..container import Container
from ..core.enums import MediaType
from ..core.exceptions import ValidationError
from .model import MediaUpload

_TRUE = ("1", "true", "yes", "on")


def _payload() -> Dict[str, Any]:
    """JSON body, or form fields when the request carries a file."""
    if request.files or request.form:
        data: Dict[str, Any] = dict(request.form)
        if "is_active" in data:
            data["is_active"] = str(data["is_active"]).lower() in _TRUE
        return data
    return json_body()


def _media() -> Optional[MediaUpload]:
    upload = request.files.get("file")
    if upload is None:
        return None
    try:
        media_type = MediaType(request.form.get("media_type", ""))
    except ValueError:
        raise ValidationError("Media type must be image or video")
    return MediaUpload(
        filename=secure_filename(upload.filename or ""),
        content=upload.read(),
        media_type=media_type,
        content_type=upload.mimetype,
    )


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    login_required = guards.login_required
    admin_required = guards.admin_required
    service = container.policy_service

    @app.route("/api/policies", methods=["GET"], endpoint="active_policies")
    @login_required
    def active_policies():
        try:
            return jsonify({"policies": [p.to_dict() for p in service.active_policies()]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/policies", methods=["GET"], endpoint="admin_list_policies")
    @admin_required
    def list_policies():
        try:
            return jsonify({"policies": [p.to_dict() for p in service.all_policies()]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/policies/categories", methods=["GET"], endpoint="admin_policy_categories")
    @admin_required
    def categories():
        try:
            return jsonify({"categories": service.categories()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/policies", methods=["POST"], endpoint="admin_create_policy")
    @admin_required
    def create_policy():
        try:
            policy = service.create(_payload(), _media())
            return jsonify({"success": True, "policy": policy.to_dict()}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/policies/<policy_id>", methods=["PATCH"], endpoint="admin_update_policy")
    @admin_required
    def update_policy(policy_id: str):
        try:
            payload = _payload()
            remove_media = str(payload.pop("remove_media", "")).lower() in _TRUE
            policy = service.update(policy_id, payload, _media(), remove_media=remove_media)
            return jsonify({"success": True, "policy": policy.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/policies/<policy_id>/toggle", methods=["POST"], endpoint="admin_toggle_policy")
    @admin_required
    def toggle_policy(policy_id: str):
        try:
            policy = service.set_active(policy_id, is_active=bool(json_body().get("is_active")))
            return jsonify({"success": True, "policy": policy.to_dict()})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/policies/<policy_id>", methods=["DELETE"], endpoint="admin_delete_policy")
    @admin_required
    def delete_policy(policy_id: str):
        try:
            service.delete(policy_id)
            return jsonify({"success": True})
        except Exception as e:
            return error_response(e)
