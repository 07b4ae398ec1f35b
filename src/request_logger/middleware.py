"""HTTP request logging middleware.

Binds request metadata to a structlog logger, makes it available to the
downstream app through ``request_logger.context.extract()``, and emits one
summary record per request at a level chosen by the response status class.

Usage::

    app = FastAPI()
    app.add_middleware(
        RequestLoggerMiddleware,
        logger=structlog.get_logger(),
        options=[with_success_level(logging.INFO)],
    )

or, wrapping a bare ASGI app::

    wrap = new(structlog.get_logger(), with_client_error_level(logging.WARNING))
    app = wrap(app)
"""

import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from http import HTTPStatus

import structlog
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from structlog.typing import BindableLogger

from request_logger.context import bind_request_logger
from request_logger.levels import Levels, Option, build_levels


def status_text(status: int) -> str:
    """Return the reason phrase for ``status``, or a fallback naming the code."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"unknown status {status}"


def _is_enabled_for(logger: BindableLogger, level: int) -> bool:
    # FilteringBoundLogger and stdlib BoundLogger spell this differently.
    check = getattr(logger, "is_enabled_for", None) or getattr(
        logger, "isEnabledFor", None
    )
    if check is None:
        return True
    return bool(check(level))


def log_http_status(logger: BindableLogger, levels: Levels, status: int) -> None:
    """Emit the summary record for ``status`` at its configured level."""
    level = levels.for_status(status)
    if not _is_enabled_for(logger, level):
        return
    logger.log(level, status_text(status))


def _remote_addr(scope: Scope) -> str:
    client = scope.get("client")
    if not client:
        return ""
    host, port = client
    if ":" in host:
        host = f"[{host}]"
    return f"{host}:{port}"


class ResponseObserver:
    """``send`` wrapper recording the response status and body size."""

    def __init__(self, send: Send) -> None:
        self._send = send
        self.status = 200
        self.bytes_written = 0
        self.started = False

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start" and not self.started:
            self.started = True
            self.status = message["status"]
        elif message["type"] == "http.response.body":
            self.bytes_written += len(message.get("body", b""))
        await self._send(message)


class RequestLoggerMiddleware:
    """Log each HTTP request once, at a level picked by its status class.

    Args:
        app: Downstream ASGI app.
        logger: Base logger, anything with ``bind()`` and ``log()``.
            Defaults to ``structlog.get_logger()``.
        levels: Prebuilt level mapping. Built from ``options`` when omitted.
        options: Level options applied in order over the defaults.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: BindableLogger | None = None,
        levels: Levels | None = None,
        options: Sequence[Option] = (),
    ) -> None:
        self.app = app
        self.logger = logger if logger is not None else structlog.get_logger()
        self.levels = levels if levels is not None else build_levels(*options)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        headers = Headers(scope=scope)
        log = self.logger.bind(
            method=scope["method"],
            path=scope["path"],
            remote_addr=_remote_addr(scope),
            user_agent=headers.get("user-agent", ""),
            referrer=headers.get("referer", ""),
            start_time=datetime.now(UTC).isoformat(),
        )
        observer = ResponseObserver(send)

        try:
            with bind_request_logger(scope, log) as child_scope:
                await self.app(child_scope, receive, observer)
        except BaseException as exc:
            # Failed or cancelled before any response started.
            if not observer.started:
                observer.status = 500
            try:
                self._log_summary(log, start, observer)
            except Exception as log_exc:
                exc.add_note(f"request summary logging failed: {log_exc!r}")
            raise
        self._log_summary(log, start, observer)

    def _log_summary(
        self, log: BindableLogger, start: float, observer: ResponseObserver
    ) -> None:
        log = log.bind(
            duration=time.perf_counter() - start,
            status=observer.status,
            bytes_written=observer.bytes_written,
        )
        log_http_status(log, self.levels, observer.status)


def new(
    logger: BindableLogger | None = None, *options: Option
) -> Callable[[ASGIApp], ASGIApp]:
    """Return a function wrapping ASGI apps in ``RequestLoggerMiddleware``.

    The level mapping is built once and shared by every wrapped app.
    """
    levels = build_levels(*options)

    def wrap(app: ASGIApp) -> ASGIApp:
        return RequestLoggerMiddleware(app, logger=logger, levels=levels)

    return wrap
