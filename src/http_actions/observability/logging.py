"""Structured logging for http-actions.

Every action call runs inside :func:`call_context`, which binds the action
name, request id, method and path to structlog's context variables. Events
logged anywhere during the call (callbacks, recovery, cookie parsing)
carry those keys without passing them around.

Events emitted by the framework:

- ``action.halted`` (debug): a halt cut the pipeline short
- ``action.recovered`` (warning): the exception policy matched
- ``action.unhandled_exception`` (error): an exception escaped the call
- ``request.malformed_json`` (debug): a JSON body could not be parsed
- ``session.*`` (debug): the ASGI adapter loaded, saved or deleted a session
- ``cleanup.*``: the background session cleanup task

Examples:
    Configure logging once at startup::

        from http_actions.observability.logging import configure_logging

        configure_logging(level="INFO", json_output=True)

    Output (JSON)::

        {
            "event": "action.recovered",
            "action": "ShowBook",
            "request_id": "9f2c61d0a4b7e8f3",
            "method": "GET",
            "path": "/books/23",
            "exception": "RecordNotFound",
            "target": 404,
            "timestamp": "2024-01-01T00:00:00.000000Z",
            "level": "warning"
        }
"""

import contextlib
import logging
import sys
from collections.abc import Iterator
from typing import Any, TextIO

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, emit JSON logs; if False, use console format
        stream: Where to write; defaults to stdout

    Raises:
        ValueError: If the level is not a known log level.

    Examples:
        >>> configure_logging(level="DEBUG", json_output=True)
        >>> configure_logging(level="INFO", json_output=False)
    """
    name = level.upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    numeric_level = getattr(logging, name)
    output = stream or sys.stdout

    logging.basicConfig(format="%(message)s", stream=output, level=numeric_level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=True),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )


@contextlib.contextmanager
def call_context(action: str, request_id: str, method: str, path: str) -> Iterator[None]:
    """Bind one action call's identity to every event logged inside the block.

    Example:
        >>> with call_context("Show", "9f2c61d0", "GET", "/books/23"):
        ...     get_logger(__name__).info("book.loaded")
    """
    with structlog.contextvars.bound_contextvars(
        action=action,
        request_id=request_id,
        method=method,
        path=path,
    ):
        yield


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)
    """
    return structlog.get_logger(name)
