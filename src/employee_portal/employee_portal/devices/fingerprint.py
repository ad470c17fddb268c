"""Heuristic browser fingerprint.

The id is a 32-bit djb2-xor hash of a handful of browser signals plus a random
suffix. Two devices with the same screen/timezone/locale/platform/core count
produce the same hash part; only the suffix tells them apart. It is an advisory
signal, not an identity.
"""
from __future__ import annotations

import re
import secrets
import string
from typing import List

from ..core.constants import DEVICE_SUFFIX_LENGTH, UNKNOWN_DEVICE_NAME
from .model import DeviceSignals

_BROWSER_RE = re.compile(r"(Chrome|Firefox|Safari|Edge|Opera)/[\d.]+")
_ANDROID_MODEL_RE = re.compile(r"Android.*?;\s*([^;)]+)")
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def _format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def fingerprint_components(signals: DeviceSignals) -> List[str]:
    components = [
        f"screen:{signals.screen_width}x{signals.screen_height}x{signals.color_depth}",
        f"tz:{signals.timezone}",
        f"lang:{signals.language}",
        f"platform:{signals.platform}",
    ]
    if signals.hardware_concurrency:
        components.append(f"cores:{signals.hardware_concurrency}")
    if signals.device_memory is not None:
        components.append(f"mem:{_format_number(signals.device_memory)}")
    components.append(f"touch:{signals.max_touch_points or 0}")

    match = _BROWSER_RE.search(signals.user_agent or "")
    if match:
        components.append(f"browser:{match.group(0)}")
    return components


def djb2_hash(text: str) -> int:
    """djb2 with xor, over UTF-16 code units, truncated to 32 bits."""
    h = 5381
    encoded = text.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (((h << 5) + h) ^ unit) & 0xFFFFFFFF
    return h


def hash_fingerprint(text: str) -> str:
    return f"DEV-{djb2_hash(text):08X}"


def fingerprint(signals: DeviceSignals) -> str:
    return hash_fingerprint("|".join(fingerprint_components(signals)))


def random_suffix(length: int = DEVICE_SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


def detect_device_name(user_agent: str) -> str:
    ua = user_agent or ""
    if not ua:
        return UNKNOWN_DEVICE_NAME

    # mobile first
    if "iPhone" in ua:
        return "iPhone"
    if "iPad" in ua:
        return "iPad"
    if "Android" in ua:
        match = _ANDROID_MODEL_RE.search(ua)
        if match and match.group(1):
            model = re.sub(r"Build/.*", "", match.group(1).strip()).strip()
            return model or "Android Device"
        return "Android Device"

    if "Windows" in ua:
        return "Windows PC"
    if "Macintosh" in ua:
        return "Mac"
    if "Linux" in ua:
        return "Linux PC"
    if "CrOS" in ua:
        return "Chromebook"
    return UNKNOWN_DEVICE_NAME
