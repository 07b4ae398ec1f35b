"""Structured per-request logging middleware for ASGI apps."""

from request_logger.context import extract, nop_logger
from request_logger.levels import (
    Levels,
    Option,
    StatusClass,
    build_levels,
    status_class,
    with_client_error_level,
    with_redirection_level,
    with_server_error_level,
    with_success_level,
)
from request_logger.middleware import RequestLoggerMiddleware, new

__all__ = [
    "Levels",
    "Option",
    "RequestLoggerMiddleware",
    "StatusClass",
    "build_levels",
    "extract",
    "new",
    "nop_logger",
    "status_class",
    "with_client_error_level",
    "with_redirection_level",
    "with_server_error_level",
    "with_success_level",
]
