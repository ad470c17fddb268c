from __future__ import annotations

from typing import Optional

from ..cache import keys
from ..cache.query_cache import QueryCache
from ..cache.timings import STANDARD_TIMINGS, CacheTimings
from ..users.model import SessionUser
from .model import AdminStats, EmployeeDashboard
from .repository import DashboardRepository


class DashboardService:
    """Cached landing-page data for admins and employees."""

    def __init__(self, dashboard: DashboardRepository, cache: QueryCache):
        self._dashboard = dashboard
        self._cache = cache

    def admin_stats(self, timings: Optional[CacheTimings] = None) -> AdminStats:
        timings = timings or STANDARD_TIMINGS
        return self._cache.get(
            keys.ADMIN_STATS,
            lambda: AdminStats.from_row(self._dashboard.admin_stats()),
            fresh_ttl=timings.fresh_ttl,
            stale_ttl=timings.stale_ttl,
        )

    def employee_dashboard(self, user: SessionUser, timings: Optional[CacheTimings] = None) -> EmployeeDashboard:
        timings = timings or STANDARD_TIMINGS
        return self._cache.get(
            keys.employee_dashboard(user.user_id),
            lambda: EmployeeDashboard.from_payload(self._dashboard.employee_dashboard(user.user_id)),
            fresh_ttl=timings.fresh_ttl,
            stale_ttl=timings.stale_ttl,
        )
