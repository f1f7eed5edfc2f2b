"""
Structured logging configuration.
Uses structlog for consistent, parseable log output.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from studio.config import settings


def add_app_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Stamp every entry with the application name."""
    event_dict["app"] = settings.app_name
    return event_dict


def configure_logging() -> None:
    """
    Configure structlog.

    Call this once during application startup.
    Colored console output in debug, JSON lines otherwise.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.debug:
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    level = logging.DEBUG if settings.debug else logging.INFO

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Third-party libraries (httpx, sqlalchemy, apscheduler) log via stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a configured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("Video job submitted", shot_id=shot_id, provider="MINIMAX")
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(name=name)
    return logger


def bind_context(**kwargs: Any) -> None:
    """Bind request-scoped context (request_id, project_id) to subsequent entries."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
