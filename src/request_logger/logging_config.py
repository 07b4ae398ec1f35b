"""Structured logging setup for services using the request logger.

``configure_logging()`` reads ``request_logger.config.Settings``: JSON lines
when the environment is production, colored console output otherwise, root
level from ``log_level``. Request summary records gain a ``status_class``
field, and values under ``redact_keys`` are masked in every record.
"""

import logging
import sys
from collections.abc import Iterable

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from request_logger.config import Settings, get_settings
from request_logger.levels import status_class

REDACTED = "***REDACTED***"


def add_status_class(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag request summaries with their status class (success, ...)."""
    status = event_dict.get("status")
    if isinstance(status, int) and "bytes_written" in event_dict:
        event_dict["status_class"] = status_class(status).value
    return event_dict


def redactor(keys: Iterable[str]) -> Processor:
    """Build a processor masking the values of ``keys`` (case-insensitive)."""
    masked = frozenset(key.lower() for key in keys)

    def redact(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        for key in event_dict:
            if key.lower() in masked:
                event_dict[key] = REDACTED
        return event_dict

    return redact


def build_processors(settings: Settings) -> list[Processor]:
    """Processors shared by structlog records and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_status_class,
        redactor(settings.redact_keys),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Point structlog and the stdlib root logger at one stdout handler.

    Args:
        settings: Defaults to ``get_settings()``.
    """
    if settings is None:
        settings = get_settings()
    shared = build_processors(settings)

    renderer: Processor
    if settings.is_prod:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level.upper())

    # The request summary replaces the server's own access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
