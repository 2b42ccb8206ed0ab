# backend/ims/config.py
from __future__ import annotations
import os


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/ims.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///ims.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bounded waits on the store so a stuck lock fails the request instead of hanging it
    DB_LOCK_TIMEOUT_SECONDS = _env_float("DB_LOCK_TIMEOUT_SECONDS", 10.0)
    SQLALCHEMY_ENGINE_OPTIONS = (
        {"connect_args": {"timeout": DB_LOCK_TIMEOUT_SECONDS}}
        if SQLALCHEMY_DATABASE_URI.startswith("sqlite")
        else {"pool_timeout": DB_LOCK_TIMEOUT_SECONDS, "pool_pre_ping": True}
    )

    SESSION_TIMEOUT_HOURS = _env_float("SESSION_TIMEOUT_HOURS", 24.0)

    # bcrypt cost factor for stored credentials
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Server-sent events keepalive interval for the notification stream
    NOTIFICATION_KEEPALIVE_SECONDS = _env_float("NOTIFICATION_KEEPALIVE_SECONDS", 15.0)
    # Past notifications kept per open stream for read/unread tracking
    NOTIFICATION_HISTORY_LIMIT = int(os.environ.get("NOTIFICATION_HISTORY_LIMIT", "50"))

    # Used by `flask system init` when no admin exists yet
    BOOTSTRAP_ADMIN_USERNAME = os.environ.get("BOOTSTRAP_ADMIN_USERNAME", "admin")
    BOOTSTRAP_ADMIN_PASSWORD = os.environ.get("BOOTSTRAP_ADMIN_PASSWORD", "admin123")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    }


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    NOTIFICATION_KEEPALIVE_SECONDS = 0.05
    BCRYPT_ROUNDS = 4
    NOTIFICATION_HISTORY_LIMIT = 5
