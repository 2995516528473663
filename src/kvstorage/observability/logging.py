"""Structured logging configuration with correlation ID support.

Logs are emitted through structlog on top of the standard library. Production
renders JSON lines; development uses the console renderer. Every event logged
while a request is being served carries that request's correlation ID.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any, Optional

import structlog

# Correlation ID of the request being served by the current task or thread
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_REDACTED_FIELDS = frozenset({"password", "credentials"})


def add_correlation_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Attach the current correlation ID unless the event already names one.

    Args:
        logger: Wrapped stdlib logger
        method_name: Name of the log method that was called
        event_dict: Event being processed

    Returns:
        The event, with ``correlation_id`` set when a request is in progress
    """
    correlation_id = correlation_id_var.get()
    if correlation_id is not None:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict


def redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask engine credentials that end up in log context."""
    for field in _REDACTED_FIELDS.intersection(event_dict):
        event_dict[field] = "***"
    return event_dict


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _renderers(json_logs: bool) -> list[Any]:
    if json_logs:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer()]


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Route stdlib logging to stdout and configure structlog on top of it.

    Safe to call more than once; the last call wins. Unknown level names fall
    back to INFO.

    Args:
        log_level: Level name such as DEBUG or WARNING
        json_logs: Render JSON lines when True, console output otherwise

    Example:
        >>> setup_logging(log_level="DEBUG", json_logs=False)
        >>> logger = get_logger(__name__)
        >>> logger.info("storage_connected", address="localhost:3301")
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=_resolve_level(log_level),
        force=True,
    )

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_correlation_id,
        redact_secrets,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    processors.extend(_renderers(json_logs))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def clear_correlation_id() -> None:
    correlation_id_var.set(None)
