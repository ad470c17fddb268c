from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from .model import Policy


class PolicyRepository(Protocol):
    def list_policies(self, *, active_only: bool = False) -> Sequence[Policy]:
        """Newest first."""

        raise NotImplementedError

    def get(self, policy_id: str) -> Optional[Policy]:
        raise NotImplementedError

    def create(self, fields: Dict[str, Any]) -> Policy:
        raise NotImplementedError

    def update(self, policy_id: str, updates: Dict[str, Any]) -> Optional[Policy]:
        raise NotImplementedError

    def delete(self, policy_id: str) -> None:
        raise NotImplementedError

    def categories(self) -> List[str]:
        """Non-null category of every policy (duplicates included)."""

        raise NotImplementedError
