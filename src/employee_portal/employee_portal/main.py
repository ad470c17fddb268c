from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module, load_settings

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .dashboard.controller import register as register_dashboard
from .events.controller import register as register_events
from .policies.controller import register as register_policies
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger(__name__.rsplit(".", 1)[0]).setLevel(level)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = load_settings()
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PORTAL_URL"] = getattr(settings, "PORTAL_URL", "http://localhost:5000")
    # Device binding lives in the session cookie; keep it well past a single visit.
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=int(getattr(settings, "SESSION_LIFETIME_DAYS", 365)))

    if container is None:
        container = build_container(settings)
    app.extensions["employee_portal"] = container
    logger.info("Employee portal starting (settings=%s)", settings_module)

    register_users(app, container)
    register_attendance(app, container)
    register_schedules(app, container)
    register_tasks(app, container)
    register_events(app, container)
    register_policies(app, container)
    register_dashboard(app, container)
    register_reports(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    return app
