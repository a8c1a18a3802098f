import os
import secrets
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

APP_VERSION = "1.0.0"


def _parse_bool(value: str | None, fallback: bool) -> bool:
    if value is None:
        return fallback
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return fallback


def _parse_csv(value: str | None, fallback: list[str]) -> list[str]:
    if not value:
        return fallback
    parsed = [item.strip() for item in value.split(",") if item.strip()]
    return parsed or fallback


def _parse_env(value: str | None) -> str:
    normalized = (value or "").strip().lower()
    if normalized in {"prod", "production"}:
        return "production"
    return "development"


def _default_db_path(environment: str) -> Path:
    # Production hosts only give us an ephemeral filesystem.
    if environment == "production":
        return Path("/tmp") / "perpus.db"
    return BASE_DIR / "database" / "perpus.db"


ENVIRONMENT = _parse_env(os.getenv("PERPUS_ENV"))
IS_DEVELOPMENT = ENVIRONMENT == "development"

DB_PATH = Path(os.getenv("PERPUS_DB_PATH") or _default_db_path(ENVIRONMENT))
FLUSH_DEBOUNCE_SECONDS = max(
    0.0,
    float(os.getenv("PERPUS_FLUSH_DEBOUNCE_SECONDS", "5")),
)

ADMIN_USERNAME = os.getenv("PERPUS_ADMIN_USERNAME", "admin").strip() or "admin"
ADMIN_PASSWORD = os.getenv("PERPUS_ADMIN_PASSWORD", "admin123").strip() or "admin123"
ADMIN_DISPLAY_NAME = os.getenv("PERPUS_ADMIN_DISPLAY_NAME", "Administrator").strip() or "Administrator"
SIGNING_KEY = os.getenv("PERPUS_SIGNING_KEY", "").strip() or secrets.token_urlsafe(32)
AUTH_TOKEN_TTL_SECONDS = int(os.getenv("PERPUS_AUTH_TOKEN_TTL_SECONDS", "28800"))
INIT_SECRET = os.getenv("PERPUS_INIT_SECRET", "").strip()
MIN_PASSWORD_LENGTH = 6

CORS_ALLOW_ORIGINS = _parse_csv(
    os.getenv("PERPUS_CORS_ALLOW_ORIGINS"),
    ["http://localhost:3000", "http://127.0.0.1:3000"],
)
CORS_ALLOW_METHODS = _parse_csv(
    os.getenv("PERPUS_CORS_ALLOW_METHODS"),
    ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
)
CORS_ALLOW_HEADERS = _parse_csv(
    os.getenv("PERPUS_CORS_ALLOW_HEADERS"),
    ["Authorization", "Content-Type", "Accept", "X-Init-Secret"],
)
CORS_ALLOW_CREDENTIALS = _parse_bool(os.getenv("PERPUS_CORS_ALLOW_CREDENTIALS"), True)

# Diagnostic endpoints never exist outside development.
ENABLE_DEBUG_ENDPOINTS = IS_DEVELOPMENT and _parse_bool(
    os.getenv("PERPUS_ENABLE_DEBUG_ENDPOINTS"),
    False,
)

LOG_LEVEL = os.getenv("PERPUS_LOG_LEVEL", "INFO").strip().upper() or "INFO"
HOST = os.getenv("PERPUS_HOST", "127.0.0.1").strip() or "127.0.0.1"
PORT = int(os.getenv("PERPUS_PORT", "3001"))

# Visit query/statistics bounds
VISITS_DEFAULT_LIMIT = 1000
VISITS_MAX_LIMIT = 5000
STATS_DEFAULT_DAYS = 30
STATS_MAX_DAYS = 3650
STATS_TREND_DAYS = 7
STATS_PEAK_HOURS = 5
