"""Background cleanup of expired sessions.

:class:`SessionCleanup` periodically calls ``store.cleanup_expired()`` so
that an in-memory session store does not grow without bound. A failing
run is logged and the next run happens on schedule.

Examples:
    Starlette lifespan::

        from http_actions.core.cleanup import SessionCleanup
        from http_actions.storage.memory import MemorySessionStore

        store = MemorySessionStore()
        cleanup = SessionCleanup(store, interval_seconds=300)

        @contextlib.asynccontextmanager
        async def lifespan(app):
            cleanup.start()
            yield
            await cleanup.stop()
"""

import asyncio

from http_actions.observability.logging import get_logger
from http_actions.observability.metrics import record_cleanup
from http_actions.storage.base import SessionStore

logger = get_logger(__name__)


class SessionCleanup:
    """Periodic removal of expired sessions.

    Attributes:
        store: Session store to clean up
        interval_seconds: Time between runs (default 300s)
        task: The running asyncio task, if started
    """

    def __init__(self, store: SessionStore, interval_seconds: float = 300) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self.task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    async def run_once(self) -> int:
        """Remove expired sessions once and report how many were removed."""
        removed = await self.store.cleanup_expired()
        record_cleanup(removed)
        if removed:
            logger.info("cleanup.completed", sessions_removed=removed)
        else:
            logger.debug("cleanup.completed", sessions_removed=0)
        return removed

    async def run(self) -> None:
        """Run until :meth:`stop` is called."""
        logger.info("cleanup.started", interval_seconds=self.interval_seconds)

        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.error("cleanup.failed", error=str(e), error_type=type(e).__name__)

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue

        logger.info("cleanup.stopped")

    def start(self) -> asyncio.Task[None]:
        """Schedule :meth:`run` on the running event loop."""
        if self.task is None or self.task.done():
            self._stop_event.clear()
            self.task = asyncio.create_task(self.run())
        return self.task

    async def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop to stop and wait for it, cancelling after ``timeout``."""
        if self.task is None:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self.task, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("cleanup.stop_timeout", timeout=timeout)
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                logger.debug("cleanup.cancelled")
