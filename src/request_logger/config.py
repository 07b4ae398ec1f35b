"""Environment-driven configuration for the request logger."""

import logging
from enum import StrEnum
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from request_logger.levels import (
    Option,
    with_client_error_level,
    with_redirection_level,
    with_server_error_level,
    with_success_level,
)


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Settings loaded from ``REQUEST_LOGGER_*`` environment variables.

    Per-class levels accept names (``"info"``, ``"WARNING"``) or ints.
    """

    model_config = SettingsConfigDict(
        env_prefix="REQUEST_LOGGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Logging setup (see logging_config.configure_logging) ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"
    redact_keys: list[str] = ["authorization", "cookie", "password", "token"]

    # --- Summary levels per status class ---
    success_level: int = logging.DEBUG
    redirection_level: int = logging.DEBUG
    client_error_level: int = logging.DEBUG
    server_error_level: int = logging.ERROR

    @field_validator(
        "success_level",
        "redirection_level",
        "client_error_level",
        "server_error_level",
        mode="before",
    )
    @classmethod
    def _parse_level(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip().isdigit():
            name = value.strip().upper()
            levels = logging.getLevelNamesMapping()
            if name not in levels:
                raise ValueError(f"unknown log level: {value!r}")
            return levels[name]
        return value

    def level_options(self) -> list[Option]:
        """Options reproducing the configured levels, in status-class order."""
        return [
            with_success_level(self.success_level),
            with_redirection_level(self.redirection_level),
            with_client_error_level(self.client_error_level),
            with_server_error_level(self.server_error_level),
        ]

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        settings = get_settings()
        app.add_middleware(
            RequestLoggerMiddleware, options=settings.level_options()
        )
    """
    return Settings()
