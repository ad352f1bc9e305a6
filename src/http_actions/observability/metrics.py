"""Prometheus metrics for http-actions.

Metrics exported:

- Action calls by outcome (completed, halted, recovered, error) and status
- Call duration histogram per action
- Active sessions gauge (in-memory session store)
- Session cleanup tracking

Examples:
    Recording a finished call::

        from http_actions.observability.metrics import record_call

        record_call(action="Show", outcome="halted", status=401)

    Recording call duration::

        from http_actions.observability.metrics import record_duration

        record_duration(action="Show", seconds=0.012)
"""

from prometheus_client import Counter, Gauge, Histogram

# Labels: action, outcome (completed, halted, recovered, error), status
requests_total = Counter(
    "http_actions_requests_total",
    "Total number of action calls",
    ["action", "outcome", "status"],
)

duration_seconds = Histogram(
    "http_actions_duration_seconds",
    "Time spent inside an action call, finalization included",
    ["action"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

active_sessions = Gauge(
    "http_actions_active_sessions",
    "Number of sessions held by the in-memory session store",
)

cleanup_operations = Counter(
    "http_actions_cleanup_operations_total",
    "Total number of session cleanup operations performed",
)

cleanup_sessions_removed = Counter(
    "http_actions_cleanup_sessions_removed_total",
    "Total number of expired sessions removed by cleanup",
)


def record_call(action: str, outcome: str, status: int | str) -> None:
    """Record a finished action call.

    Args:
        action: Action class name
        outcome: completed, halted, recovered or error
        status: Final status code, or "error" for unhandled exceptions

    Examples:
        >>> record_call("Show", "completed", 200)
        >>> record_call("Show", "error", "error")
    """
    requests_total.labels(action=action, outcome=outcome, status=str(status)).inc()


def record_duration(action: str, seconds: float) -> None:
    """Record how long an action call took.

    Examples:
        >>> record_duration("Show", 0.004)
    """
    duration_seconds.labels(action=action).observe(seconds)


def set_active_sessions(count: int) -> None:
    """Set the active sessions gauge."""
    active_sessions.set(count)


def record_cleanup(sessions_removed: int) -> None:
    """Record a cleanup operation.

    Args:
        sessions_removed: Number of expired sessions removed

    Examples:
        >>> record_cleanup(42)
    """
    cleanup_operations.inc()
    cleanup_sessions_removed.inc(sessions_removed)
