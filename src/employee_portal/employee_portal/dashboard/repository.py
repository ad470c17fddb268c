from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class DashboardRepository(Protocol):
    def admin_stats(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def employee_dashboard(self, user_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError
