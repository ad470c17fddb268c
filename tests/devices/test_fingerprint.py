from src.employee_portal.employee_portal.devices.fingerprint import (
    detect_device_name,
    djb2_hash,
    fingerprint,
    fingerprint_components,
    hash_fingerprint,
    random_suffix,
)
from src.employee_portal.employee_portal.devices.model import DeviceSignals

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _signals(**overrides):
    values = dict(
        screen_width=1920,
        screen_height=1080,
        color_depth=24,
        timezone="America/New_York",
        language="en-US",
        platform="Win32",
        hardware_concurrency=8,
        device_memory=8.0,
        max_touch_points=0,
        user_agent=CHROME_UA,
    )
    values.update(overrides)
    return DeviceSignals(**values)


def test_djb2_known_values():
    assert djb2_hash("") == 5381
    assert djb2_hash("a") == ((5381 * 33) ^ ord("a"))
    assert hash_fingerprint("") == "DEV-00001505"


def test_hash_stays_within_32_bits():
    assert djb2_hash("x" * 10_000) <= 0xFFFFFFFF


def test_components_in_fixed_order():
    assert fingerprint_components(_signals()) == [
        "screen:1920x1080x24",
        "tz:America/New_York",
        "lang:en-US",
        "platform:Win32",
        "cores:8",
        "mem:8",
        "touch:0",
        "browser:Chrome/120.0.0.0",
    ]


def test_optional_signals_are_left_out():
    components = fingerprint_components(_signals(hardware_concurrency=None, device_memory=None, user_agent=""))
    assert not any(c.startswith(("cores:", "mem:", "browser:")) for c in components)


def test_same_signals_same_hash():
    assert fingerprint(_signals()) == fingerprint(_signals())
    assert fingerprint(_signals()) != fingerprint(_signals(timezone="Europe/Paris"))
    assert fingerprint(_signals()).startswith("DEV-")


def test_random_suffix_alphabet():
    suffix = random_suffix()
    assert len(suffix) == 6
    assert suffix.isalnum() and suffix.upper() == suffix


def test_detect_device_name():
    assert detect_device_name("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)") == "iPhone"
    assert detect_device_name("Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X)") == "iPad"
    assert detect_device_name("Mozilla/5.0 (Linux; Android 13; Pixel 7 Build/TQ3A.230805.001)") == "Pixel 7"
    assert detect_device_name(CHROME_UA) == "Windows PC"
    assert detect_device_name("Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0)") == "Mac"
    assert detect_device_name("Mozilla/5.0 (X11; Linux x86_64)") == "Linux PC"
    assert detect_device_name("") == "Unknown Device"
    assert detect_device_name("curl/8.0") == "Unknown Device"


def test_signals_from_client_payload():
    signals = DeviceSignals.from_payload(
        {
            "screen": {"width": 390, "height": 844, "colorDepth": 24},
            "timezone": "UTC",
            "language": "en",
            "platform": "iPhone",
            "hardwareConcurrency": "6",
            "deviceMemory": True,
            "maxTouchPoints": 5,
        },
        user_agent="header-ua",
    )
    assert signals.screen_width == 390
    assert signals.hardware_concurrency == 6
    assert signals.device_memory is None
    assert signals.max_touch_points == 5
    assert signals.user_agent == "header-ua"
