import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "event_checkin_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

STATS_CACHE_TTL = 5.0
CACHE_CLEANUP_INTERVAL = 60.0

CORS_ALLOWED_ORIGINS = "*"

OIDC_CLIENT_ID = None
OIDC_CLIENT_SECRET = None
OIDC_DISCOVERY_URL = None

MAX_CONTENT_LENGTH = 10 * 1024 * 1024
