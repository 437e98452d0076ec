"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

QR_CODE_PREFIX = "CK_"
QR_CODE_DIGITS = 10
QR_UNIQUE_ATTEMPTS = 10

DEFAULT_CACHE_TTL_SECONDS = 10
STATS_CACHE_TTL_SECONDS = 5
CACHE_CLEANUP_INTERVAL_SECONDS = 60

DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 100
USER_SEARCH_LIMIT = 10
USER_SEARCH_MIN_LENGTH = 2

MIN_PASSWORD_LENGTH = 6
USER_AGENT_MAX_LENGTH = 255
SESSION_LIFETIME_DAYS = 7
