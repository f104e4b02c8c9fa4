"""
Environment-aware configuration.
Config classes hold raw values read from the environment (.env via python-dotenv).
AuthSettings is the frozen view of the token/auth keys, built once per app.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

from dotenv import load_dotenv

load_dotenv()  # Read .env if present


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or unsafe."""


def _as_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _env_flag(name: str, default: str = "false") -> bool:
    return _as_flag(os.getenv(name, default))


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///budget-app.db")
    SQL_ECHO = _env_flag("SQL_ECHO")

    # No defaults for secrets: a missing secret must stop the app from starting
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET")
    JWT_RESET_SECRET = os.getenv("JWT_RESET_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "budget-api")
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.getenv("ACCESS_TOKEN_EXPIRES_IN", "15")))
    REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.getenv("REFRESH_TOKEN_EXPIRES_IN", "7")))
    RESET_TOKEN_EXPIRES = timedelta(hours=1)

    EMAIL_CASE_INSENSITIVE = _env_flag("EMAIL_CASE_INSENSITIVE")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    JWT_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
    JWT_RESET_SECRET = "test-reset-secret-0123456789abcdef"
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


@dataclass(frozen=True)
class AuthSettings:
    access_secret: str
    refresh_secret: str
    reset_secret: str
    algorithm: str = "HS256"
    issuer: str = "budget-api"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    reset_ttl: timedelta = timedelta(hours=1)
    email_case_insensitive: bool = False

    def __post_init__(self):
        missing = [
            name for name in ("access_secret", "refresh_secret", "reset_secret")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(f"Missing token secrets: {', '.join(missing)}")
        if len({self.access_secret, self.refresh_secret, self.reset_secret}) != 3:
            raise ConfigurationError("Access, refresh and reset secrets must all differ")

    @classmethod
    def from_config(cls, config: Mapping) -> "AuthSettings":
        return cls(
            access_secret=config.get("JWT_ACCESS_SECRET"),
            refresh_secret=config.get("JWT_REFRESH_SECRET"),
            reset_secret=config.get("JWT_RESET_SECRET"),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "budget-api"),
            access_ttl=config.get("ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", timedelta(days=7)),
            reset_ttl=config.get("RESET_TOKEN_EXPIRES", timedelta(hours=1)),
            email_case_insensitive=_as_flag(config.get("EMAIL_CASE_INSENSITIVE", False)),
        )
