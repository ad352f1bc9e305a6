"""Observability utilities for http-actions.

This package provides monitoring and debugging capabilities:
- Prometheus metrics for call outcomes, durations and sessions
- Structured logging with contextual information
"""

from http_actions.observability.logging import configure_logging, get_logger
from http_actions.observability.metrics import (
    record_call,
    record_cleanup,
    record_duration,
    set_active_sessions,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "record_call",
    "record_duration",
    "record_cleanup",
    "set_active_sessions",
]
