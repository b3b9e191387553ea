import os

REDIS_HOST = os.getenv("REDIS_HOST", None)
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", None)
REDIS_DB = int(os.getenv("REDIS_DB", 0))

# Room TTL in seconds, refreshed on every write
DEFAULT_ROOM_TTL_SECONDS = 60 * 60 * 2
MIN_ROOM_TTL_SECONDS = 60 * 5
MAX_ROOM_TTL_SECONDS = 60 * 60 * 24 * 30
ROOM_TTL_SECONDS = os.getenv("PP_ROOM_TTL_SECONDS", None)

ROOM_ID_ATTEMPTS = 30
DEFAULT_CARD_PACK = "goat"

SESSION_COOKIE = "pp_session"
ADMIN_COOKIE_PREFIX = "pp_admin_"
COOKIE_MAX_AGE = 60 * 60 * 24 * 365
SECURE_COOKIES = os.getenv("ENV", "development") == "production"

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
