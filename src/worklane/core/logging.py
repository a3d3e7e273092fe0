"""
Worklane Logging - structured logging for the orchestrator and the queue.

Every module obtains its logger through :func:`get_logger` and logs dotted
event names with key/value fields::

    logger = get_logger(__name__)
    logger.debug("work.step.call", run_id=3, position=0, handler="fetch")

Configuration Flow:
    ::

        configure_logging(level="DEBUG", json_format=False)
            ↓
        structlog configured with processor chain:
          1. filter_by_level
          2. TimeStamper (iso)
          3. merge_contextvars   (run_id bound by LogContext)
          4. add_log_level / add_logger_name
          5. service metadata
          6. JSONRenderer (or ConsoleRenderer)

When ``level`` / ``json_format`` are omitted they are read from
:class:`~worklane.core.settings.WorklaneSettings` (``WORKLANE_LOG_LEVEL``,
``WORKLANE_LOG_FORMAT``).

Tags:
    logging, structlog, observability, worklane
"""

from __future__ import annotations

import contextvars
import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from worklane.core.errors import ConfigError

# Store service name for metadata
_SERVICE_NAME = "worklane"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str = "worklane",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to settings
        json_format: True for JSON, False for console, None for settings/auto
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs

    Example:
        configure_logging(level="DEBUG")
    """
    from worklane.core.settings import get_settings

    global _SERVICE_NAME
    _SERVICE_NAME = service

    settings = get_settings()
    level = (level or settings.log_level).upper()
    if level not in _LEVELS:
        raise ConfigError(f"Unknown log level {level!r}, expected one of {', '.join(_LEVELS)}")

    if json_format is None:
        if settings.log_format is not None:
            json_format = settings.log_format == "json"
        else:
            json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level),
        force=True,
    )
    logging.getLogger("worklane").setLevel(getattr(logging, level))


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    On exit each key is restored to the value it had on entry, so nested
    scopes binding the same key leave the outer value in place.

    Example:
        async with LogContext(run_id=3):
            logger.info("work.start")
        # run_id back to its previous value here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._tokens: list[Mapping[str, contextvars.Token[Any]]] = []

    def _enter(self) -> LogContext:
        self._tokens.append(structlog.contextvars.bind_contextvars(**self._context))
        return self

    def _exit(self) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens.pop())

    def __enter__(self) -> LogContext:
        return self._enter()

    def __exit__(self, *args) -> None:
        self._exit()

    async def __aenter__(self) -> LogContext:
        return self._enter()

    async def __aexit__(self, *args) -> None:
        self._exit()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
