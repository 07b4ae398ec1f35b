"""Status-class to log-level mapping.

Levels are stdlib ``logging`` integers, the same values structlog uses.
Build a ``Levels`` record with ``build_levels()`` and any number of
``with_*_level()`` options; later options override earlier ones.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum
from functools import reduce


class StatusClass(StrEnum):
    SUCCESS = "success"
    REDIRECTION = "redirection"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"


def status_class(status: int) -> StatusClass:
    """Bucket an HTTP status code by comparison, not by leading digit."""
    if status >= 500:
        return StatusClass.SERVER_ERROR
    if status >= 400:
        return StatusClass.CLIENT_ERROR
    if status >= 300:
        return StatusClass.REDIRECTION
    return StatusClass.SUCCESS


@dataclass(frozen=True)
class Levels:
    """Log level per response status class."""

    success: int = logging.DEBUG
    redirection: int = logging.DEBUG
    client_error: int = logging.DEBUG
    server_error: int = logging.ERROR

    def for_class(self, cls: StatusClass) -> int:
        return getattr(self, cls.value)

    def for_status(self, status: int) -> int:
        return self.for_class(status_class(status))


Option = Callable[[Levels], Levels]


def with_success_level(level: int) -> Option:
    """Set the level for 2xx responses. Default is DEBUG."""
    return lambda levels: replace(levels, success=level)


def with_redirection_level(level: int) -> Option:
    """Set the level for 3xx responses. Default is DEBUG."""
    return lambda levels: replace(levels, redirection=level)


def with_client_error_level(level: int) -> Option:
    """Set the level for 4xx responses. Default is DEBUG."""
    return lambda levels: replace(levels, client_error=level)


def with_server_error_level(level: int) -> Option:
    """Set the level for 5xx responses. Default is ERROR."""
    return lambda levels: replace(levels, server_error=level)


def build_levels(*options: Option) -> Levels:
    """Apply options in order on top of the defaults."""
    return reduce(lambda levels, option: option(levels), options, Levels())
