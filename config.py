"""
Application configuration: environment-aware settings.

All environment variables are documented here. A local .env file is loaded
on import so development setups need no exported variables.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent


class BaseConfig:
    # Core Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-production")
    # Single SQLite store for users, questions, resources and planner data
    DATABASE = os.environ.get("DATABASE_URL", str(BASE_DIR / "edulink.db"))
    PORT = int(os.environ.get("PORT", "5000"))

    # Mobile client origin; "*" while the client ships from Expo
    CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "*")

    # Session security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = 86400

    # Upload metadata only; files live on the client or a CDN
    MAX_CONTENT_LENGTH = 2 * 1024 * 1024

    # Logging
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Redis (cache, task queue, rate limit storage)
    REDIS_URL = os.environ.get("REDIS_URL", "")

    # Parent dashboard class averages are a full scan; cache them
    CLASS_AVERAGE_TTL = int(os.environ.get("CLASS_AVERAGE_TTL", "300"))

    # Rate limiting (defaults to in-memory; set REDIS_URL for Redis-backed)
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "") or "memory://"


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")
    SESSION_COOKIE_SECURE = True

    @classmethod
    def validate(cls):
        """Fail fast on missing or insecure configuration in production."""
        errors: list[str] = []

        if cls.SECRET_KEY in ("dev-key-change-in-production", ""):
            errors.append("SECRET_KEY must be set to a secure value in production.")

        if cls.CORS_ORIGIN == "*":
            import warnings
            warnings.warn("CORS_ORIGIN is '*' in production; restrict it to the client origin.")

        if errors:
            raise RuntimeError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )


class TestingConfig(BaseConfig):
    TESTING = True
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
