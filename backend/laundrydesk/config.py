# backend/laundrydesk/config.py
from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///laundrydesk.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Connection pool (ignored for SQLite)
    DB_MAX_CONNECTIONS = _env_int("DB_MAX_CONNECTIONS", 20)
    DB_IDLE_TIMEOUT = _env_int("DB_IDLE_TIMEOUT", 30)              # seconds
    DB_CONNECTION_TIMEOUT = _env_int("DB_CONNECTION_TIMEOUT", 10)  # seconds
    DB_STATEMENT_TIMEOUT_MS = _env_int("DB_STATEMENT_TIMEOUT_MS", 60000)

    # Server-side sessions
    SESSION_COOKIE_NAME = os.environ.get("SESSION_NAME", "laundry_session")
    SESSION_ABSOLUTE_TIMEOUT_HOURS = _env_int("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24)
    SESSION_IDLE_TIMEOUT_HOURS = _env_int("SESSION_IDLE_TIMEOUT_HOURS", 2)
    SESSION_COOKIE_SECURE = os.environ.get("FLASK_ENV") == "production"

    # bcrypt cost factor; anything below 10 is raised to 10
    BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 10)

    UPLOAD_FOLDER = os.environ.get(
        "UPLOAD_FOLDER",
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "uploads"),
    )
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    DEFAULT_BUSINESS_NAME = os.environ.get("DEFAULT_BUSINESS_NAME", "Laundry Management System")

    # Include stack traces in error bodies (development only)
    EXPOSE_ERROR_DETAILS = os.environ.get("FLASK_ENV") == "development"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Browser origins allowed to call the API with credentials
    CORS_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
        if origin.strip()
    )


def engine_options(config) -> dict:
    """Pool settings for server databases; SQLite keeps Flask-SQLAlchemy's defaults."""
    uri = config["SQLALCHEMY_DATABASE_URI"]
    if uri.startswith("sqlite"):
        return {}

    options = {
        "pool_size": config["DB_MAX_CONNECTIONS"],
        "max_overflow": 0,
        "pool_timeout": config["DB_CONNECTION_TIMEOUT"],
        "pool_recycle": config["DB_IDLE_TIMEOUT"],
        "pool_pre_ping": True,
    }
    if uri.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": config["DB_CONNECTION_TIMEOUT"],
            "options": f"-c statement_timeout={config['DB_STATEMENT_TIMEOUT_MS']}",
        }
    return options
