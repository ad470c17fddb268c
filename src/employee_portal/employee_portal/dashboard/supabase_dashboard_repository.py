from __future__ import annotations

from typing import Any, Dict, Optional

from ..backend.base import backend_call, first
from ..backend.connection import BackendConnection
from .repository import DashboardRepository


class SupabaseDashboardRepository(DashboardRepository):
    """Aggregates computed by database functions in one round trip each."""

    def __init__(self, conn: BackendConnection):
        self._conn = conn

    def admin_stats(self) -> Optional[Dict[str, Any]]:
        with backend_call("load dashboard stats"):
            resp = self._conn.user().rpc("get_admin_dashboard_stats").execute()
        return first(resp)

    def employee_dashboard(self, user_id: str) -> Optional[Dict[str, Any]]:
        with backend_call("load employee dashboard"):
            resp = self._conn.user().rpc("get_employee_dashboard_data", {"p_user_id": user_id}).execute()
        data = resp.data
        if isinstance(data, list):
            return data[0] if data else None
        return data
