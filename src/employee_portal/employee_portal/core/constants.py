"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_CACHE_SIZE = 100
CACHE_CLEANUP_INTERVAL_SECONDS = 60.0

DEVICE_ID_KEY = "portal_device_id"
DEVICE_NAME_KEY = "portal_device_name"
DEVICE_SUFFIX_LENGTH = 6
UNKNOWN_DEVICE_NAME = "Unknown Device"

DEFAULT_UPCOMING_EVENTS_LIMIT = 5
DEFAULT_UPCOMING_SCHEDULE_DAYS = 7
SIGNED_URL_EXPIRY_SECONDS = 60 * 60
MIN_PASSWORD_LENGTH = 6
