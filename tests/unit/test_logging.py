"""Logging setup and context binding."""

import logging

import pytest
import structlog

from vml_designer.core import LogContext, configure_logging, get_logger


@pytest.mark.unit
def test_log_context_nesting_restores_outer_values():
    with LogContext(interpreter="python", session="outer"):
        with LogContext(session="inner"):
            assert structlog.contextvars.get_contextvars() == {"interpreter": "python", "session": "inner"}
        assert structlog.contextvars.get_contextvars() == {"interpreter": "python", "session": "outer"}
    assert "session" not in structlog.contextvars.get_contextvars()


@pytest.mark.unit
def test_configure_logging_quiets_library_loggers():
    configure_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    get_logger(__name__).debug("logging_configured", check=True)


@pytest.mark.unit
def test_unknown_level_falls_back_to_info():
    configure_logging("chatty", json_logs=True)
    assert logging.getLogger().level == logging.INFO
