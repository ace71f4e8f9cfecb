"""
Structured logging for spine-variants.

This module configures structlog with the same processor chain for every
consumer of the engine, so model-definition events (struct declared, entity
synthesized, extraction cached) and decode diagnostics render consistently.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="orders-api")
            │
            ▼
        structlog processor chain:
          1. TimeStamper (iso)
          2. add_log_level / add_logger_name
          3. add_service_metadata
          4. JSONRenderer (or ConsoleRenderer for terminals)

Examples:
    >>> from spine_variants.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.debug("struct_defined", struct="User", fields=5)

Guardrails:
    - The engine only logs at DEBUG; nothing is emitted on the decode success path
    - Loggers wrap stdlib loggers; an unconfigured host sees nothing below WARNING
    - Service name stored globally (set once at startup)

Tags:
    logging, structlog, observability, spine-variants

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


# Store service name for metadata
_SERVICE_NAME = "spine-variants"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")

    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")

    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "spine-variants",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def configure_from_settings() -> None:
    """Configure logging from :class:`~spine_variants.core.settings.VariantSettings`."""
    from spine_variants.core.settings import get_settings

    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger backed by the stdlib logger ``name``.

    Until :func:`configure_logging` runs, events are filtered by stdlib
    logging (WARNING by default), so importing a model module prints nothing.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.wrap_logger(logging.getLogger(name))


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(model="User", variant="insert")
        logger.debug("decode_failed")  # Includes model and variant
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(model="User"):
            User.insert.decode(payload)
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "LogContext",
    "bind_context",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
