from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.http import error_response, make_guards
from ..container import Container
from .export import XLSX_MIMETYPE, rows_to_xlsx


def register(app: Flask, container: Container) -> None:
    guards = make_guards(container.auth_service)
    admin_required = guards.admin_required
    service = container.report_service

    def _build(report_type: str):
        return service.build(report_type, start=request.args.get("start", ""), end=request.args.get("end", ""))

    @app.route("/api/admin/reports/<report_type>", methods=["GET"], endpoint="admin_report")
    @admin_required
    def report(report_type: str):
        try:
            data = _build(report_type)
            return jsonify({"rows": data.rows, "summary": data.summary})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/reports/<report_type>/export", methods=["GET"], endpoint="admin_report_export")
    @admin_required
    def export(report_type: str):
        try:
            data = _build(report_type)
            output = rows_to_xlsx(data.rows, sheet_name=report_type.title())
            filename = f"{report_type}_report_{request.args.get('start')}_{request.args.get('end')}.xlsx"
            return send_file(output, download_name=filename, as_attachment=True, mimetype=XLSX_MIMETYPE)
        except Exception as e:
            return error_response(e)
