import logging

import structlog

from petpal.utils.logging import SERVICE_NAME, get_logger, setup_logging


def test_setup_logging_binds_service_context():
    structlog.contextvars.clear_contextvars()

    setup_logging(level="debug", json_logs=True)

    context = structlog.contextvars.get_contextvars()
    assert context["service"] == SERVICE_NAME
    assert "environment" in context
    structlog.contextvars.clear_contextvars()


def test_setup_logging_quiets_http_client_loggers():
    setup_logging(level="debug", json_logs=False)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


def test_setup_logging_keeps_stricter_level_for_http_client():
    setup_logging(level="error", json_logs=False)

    assert logging.getLogger("httpx").level == logging.ERROR


def test_get_logger_returns_usable_logger():
    logger = get_logger("petpal.tests")
    logger.info("logging_smoke_test", value=1)
