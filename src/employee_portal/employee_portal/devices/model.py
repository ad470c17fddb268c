from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class DeviceSignals:
    """Browser/device characteristics reported by the client at clock-in time."""

    screen_width: int = 0
    screen_height: int = 0
    color_depth: int = 0
    timezone: str = ""
    language: str = ""
    platform: str = ""
    hardware_concurrency: Optional[int] = None
    device_memory: Optional[float] = None
    max_touch_points: int = 0
    user_agent: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, user_agent: str = "") -> "DeviceSignals":
        screen = payload.get("screen") or {}

        def _int(value, default=0):
            try:
                return int(value)
            except (TypeError, ValueError):
                return default

        cores = payload.get("hardwareConcurrency")
        memory = payload.get("deviceMemory")
        return cls(
            screen_width=_int(screen.get("width")),
            screen_height=_int(screen.get("height")),
            color_depth=_int(screen.get("colorDepth")),
            timezone=str(payload.get("timezone") or ""),
            language=str(payload.get("language") or ""),
            platform=str(payload.get("platform") or ""),
            hardware_concurrency=_int(cores, None) or None,
            device_memory=memory if isinstance(memory, (int, float)) and not isinstance(memory, bool) else None,
            max_touch_points=_int(payload.get("maxTouchPoints")),
            user_agent=str(payload.get("userAgent") or user_agent or ""),
        )


@dataclass(frozen=True)
class DeviceInfo:
    device_id: str
    device_name: str
    is_new: bool = False


@dataclass(frozen=True)
class DeviceRegistration:
    """Server-side view of the employee's registered device."""

    registered_device_id: Optional[str]
    device_name: Optional[str] = None
    registered_at: Optional[datetime] = None
