import logging

import structlog

from sweeper.logging_config import bind_sweep_context, clear_sweep_context, setup_logging


def test_setup_logging_installs_single_handler():
    setup_logging("WARNING")
    setup_logging("WARNING")

    root = logging.getLogger()

    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert root.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    setup_logging("chatty")

    assert logging.getLogger().level == logging.INFO


def test_sweep_context_binding():
    clear_sweep_context()
    bind_sweep_context(sweep_version="2.1.0", sweep_id="abc")
    assert structlog.contextvars.get_contextvars() == {"sweep_version": "2.1.0", "sweep_id": "abc"}

    clear_sweep_context("sweep_id")
    assert structlog.contextvars.get_contextvars() == {"sweep_version": "2.1.0"}

    clear_sweep_context()
    assert structlog.contextvars.get_contextvars() == {}
