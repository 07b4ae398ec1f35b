"""Request-scoped logger storage and lookup.

The middleware stores the enriched logger in two places:

* the ASGI scope handed to the downstream app, under a private key object,
  so anything holding the ``Request`` (or raw scope) can reach it;
* a context variable, so code deeper in the call stack can use
  ``extract()`` without threading the request through.

``extract()`` never fails: outside a request it returns a silent logger.
"""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog
from starlette.types import Scope
from structlog.typing import BindableLogger


class _LoggerKey:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<request_logger key>"


_KEY = _LoggerKey()

_current: ContextVar[BindableLogger | None] = ContextVar(
    "request_logger_current", default=None
)

# Only CRITICAL reaches the wrapped ReturnLogger, which returns instead of writing.
_NopBoundLogger = structlog.make_filtering_bound_logger(logging.CRITICAL)


def nop_logger() -> BindableLogger:
    """Return a logger that silently discards every call."""
    return _NopBoundLogger(structlog.ReturnLogger(), processors=[], context={})


@contextmanager
def bind_request_logger(scope: Scope, logger: BindableLogger) -> Iterator[Scope]:
    """Yield a copy of ``scope`` carrying ``logger``.

    The context variable points at ``logger`` until the block exits.
    """
    token = _current.set(logger)
    try:
        yield {**scope, _KEY: logger}
    finally:
        _current.reset(token)


def extract(ctx: Any = None) -> BindableLogger:
    """Return the logger set by the middleware for this request.

    Args:
        ctx: A Starlette ``Request`` (anything with a ``scope``), a raw ASGI
            scope, or None to use the current task's context.

    Returns:
        The request-scoped logger, or ``nop_logger()`` if none is found.
    """
    if ctx is None:
        logger = _current.get()
    else:
        scope = getattr(ctx, "scope", ctx)
        logger = scope.get(_KEY) if isinstance(scope, Mapping) else None

    # Same contract the middleware places on its base logger.
    if callable(getattr(logger, "bind", None)):
        return logger
    return nop_logger()
