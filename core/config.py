"""Application configuration loaded from environment variables.

Values are read once at import time. Database URLs follow the read/write
partitioning used by `database.database`; in production set the two URLs to
different instances.
"""

import os


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to `default`."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


WRITE_DATABASE_URL = os.getenv("WRITE_DATABASE_URL", "sqlite:///recipes.db")
READ_DATABASE_URL = os.getenv("READ_DATABASE_URL", WRITE_DATABASE_URL)

JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = _int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 7 * 24 * 60)
PASSWORD_RESET_EXPIRE_MINUTES = _int_env("PASSWORD_RESET_EXPIRE_MINUTES", 10)

NOTIFICATION_DEDUPE_WINDOW_SECONDS = _int_env("NOTIFICATION_DEDUPE_WINDOW_SECONDS", 5 * 60)
NOTIFICATION_MAX_ATTEMPTS = _int_env("NOTIFICATION_MAX_ATTEMPTS", 2)

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_BYTES = _int_env("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:4200")

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = _int_env("SMTP_PORT", 587)
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "no-reply@recipes.local")

LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DEFAULT_PROFILE_PICTURE = "/uploads/profile/default-avatar.jpg"
DEFAULT_COVER_PICTURE = "/uploads/profile/default-cover.jpg"
