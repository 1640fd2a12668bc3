import logging

import structlog

from petpal.config import settings

SERVICE_NAME = "petpal-backend"

# Third-party loggers that log every outbound request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler.executors.default")

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Route structlog through stdlib logging.

    JSON lines in production, coloured console output elsewhere. Every event
    carries ``service=petpal-backend`` so forum logs can be told apart once
    shipped alongside the rest of the PetPal backend.
    """
    if json_logs is None:
        json_logs = settings.is_production
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=log_level)
    logging.getLogger().setLevel(log_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.contextvars.bind_contextvars(service=SERVICE_NAME, environment=settings.app_env)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
