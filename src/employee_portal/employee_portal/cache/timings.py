from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CacheTimings:
    """Freshness windows in seconds."""

    fresh_ttl: float
    stale_ttl: float


STANDARD_TIMINGS = CacheTimings(fresh_ttl=30.0, stale_ttl=5 * 60.0)

# Used when the visitor accepted cookies: longer windows, fewer refetches.
FAST_TIMINGS = CacheTimings(fresh_ttl=2 * 60.0, stale_ttl=15 * 60.0)

COOKIE_CONSENT_COOKIE = "cookie_consent"


def timings_for_consent(consent: Optional[str]) -> CacheTimings:
    return FAST_TIMINGS if consent == "accepted" else STANDARD_TIMINGS
