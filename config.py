"""Application configuration classes."""

from __future__ import annotations

import os


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "corsguard"
    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")
    CORS_ALLOWED_ORIGINS = _get_env("CORS_ALLOWED_ORIGINS", "http://localhost:5173")
    CORS_ALLOWED_METHODS = _get_env("CORS_ALLOWED_METHODS", "GET,POST,PUT,PATCH,DELETE,OPTIONS")
    CORS_ALLOWED_HEADERS = _get_env("CORS_ALLOWED_HEADERS", "Content-Type,Authorization")
    CORS_EXPOSED_HEADERS = _get_env("CORS_EXPOSED_HEADERS", "")
    CORS_MAX_AGE = _get_env("CORS_MAX_AGE", "600")
    CORS_ALLOWED_CREDENTIALS = _get_env("CORS_ALLOWED_CREDENTIALS", "false").lower() == "true"


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


class TestingConfig(BaseConfig):
    """Deterministic configuration for the test suite."""

    DEBUG = False
    TESTING = True
    LOG_LEVEL = "WARNING"
    CORS_ALLOWED_ORIGINS = "http://localhost:5173,https://*.example.com"
    CORS_ALLOWED_METHODS = "GET,POST,DELETE,OPTIONS"
    CORS_ALLOWED_HEADERS = "Content-Type,Accept"
    CORS_EXPOSED_HEADERS = "Location"
    CORS_MAX_AGE = "10"
    CORS_ALLOWED_CREDENTIALS = True


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If the CORS settings cannot be parsed.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_cors(config_cls)
    return config_cls


def _validate_cors(config_cls: type[BaseConfig]) -> None:
    from corsguard.options import CorsOptions

    settings = {name: getattr(config_cls, name) for name in dir(config_cls) if name.startswith("CORS_")}
    CorsOptions.from_config(settings)
