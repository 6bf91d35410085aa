"""structlog setup for the API process.

stagegate code logs through structlog with event-style keys
(``transition_validated``, ``stage_history_write_failed``). Library loggers
(uvicorn, SQLAlchemy) go through the stdlib bridge, so both end up in the
same renderer: JSON lines in production, ConsoleRenderer when debugging.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

# Library loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def add_correlation_id(logger, method, event_dict):
    """Attach the request's X-Request-ID so a verdict can be traced to its log lines."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def drop_color_message_key(logger, method, event_dict):
    # uvicorn duplicates every access message with ANSI codes under this key
    event_dict.pop("color_message", None)
    return event_dict


def _pre_chain() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        drop_color_message_key,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def configure_structlog(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog and route stdlib logging through the same renderer.

    Must run before any module calls ``structlog.get_logger`` and logs,
    because loggers are cached on first use.

    Args:
        log_level: Level for the root logger ("DEBUG", "INFO", ...)
        json_logs: JSON lines when True, ConsoleRenderer otherwise
    """
    pre_chain = _pre_chain()

    if json_logs:
        final = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        final = [structlog.dev.ConsoleRenderer()]

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
                "foreign_pre_chain": pre_chain,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level.upper()},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    })

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
