"""Shared pytest fixtures."""

import logging

import pytest
import structlog
from structlog.testing import LogCapture


@pytest.fixture()
def log_capture() -> LogCapture:
    return LogCapture()


@pytest.fixture()
def base_logger(log_capture: LogCapture):
    """DEBUG-level structlog logger whose records land in ``log_capture``."""
    return structlog.wrap_logger(
        structlog.ReturnLogger(),
        processors=[log_capture],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
    )
