"""
Application configuration module.

Defines configuration classes for the development, testing and production
environments.  Values are loaded from environment variables with sensible
defaults, and ``get_config`` resolves the class to use at runtime.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


def _optional_int(env_var: str) -> int | None:
    """Read an optional integer setting; blank or unset means ``None``."""
    raw_value = os.environ.get(env_var, "").strip()
    if not raw_value:
        return None
    return int(raw_value)


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Default database location
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tasks.db'}",
    )

    # Bearer tokens are signed with this key; the binding itself lives in
    # the access_tokens table, so rotating the key invalidates every session.
    JWT_SECRET_KEY: str = os.environ.get(
        "JWT_SECRET_KEY", "dev-jwt-secret-key-change-in-production-0123456789"
    )
    JWT_ALGORITHM: str = "HS256"
    # Tokens stay valid until logout or user deletion unless this is set
    TOKEN_EXPIRY_HOURS: int | None = _optional_int("TOKEN_EXPIRY_HOURS")
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    DEFAULT_PER_PAGE: int = 15
    MAX_PER_PAGE: int = 100
    # Keeps the OFFSET inside a 64-bit SQL integer
    MAX_PAGE: int = 1_000_000

    API_VERSION: str = "1.0.0"


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    # In-memory SQLite by default; Flask-SQLAlchemy shares one connection
    # across threads for ``sqlite://`` so the test client sees every write.
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")

    JWT_SECRET_KEY: str = os.environ.get(
        "TEST_JWT_SECRET_KEY", "test-jwt-secret-key-for-local-tests-123456"
    )


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
