"""Structured logging configuration."""

import logging
import sys

import structlog

# Chatty third-party loggers; they stay at WARNING unless SQL echo is requested
_NOISY_LOGGERS = ("aiosqlite", "httpcore", "httpx", "sqlalchemy.engine")


def configure_logging(debug: bool = False, *, app_name: str = "learnboard", sql_echo: bool = False) -> None:
    """Route structlog through stdlib logging.

    Debug mode renders colored console lines, otherwise one JSON object per
    event tagged with the application name.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in _NOISY_LOGGERS:
        quiet = not (sql_echo and name.startswith("sqlalchemy"))
        logging.getLogger(name).setLevel(logging.WARNING if quiet else logging.INFO)

    if debug:
        renderer: structlog.typing.Processor = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(app=app_name)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)  # type: ignore[no-any-return]
