"""In-memory session store with asyncio concurrency control.

Suitable for single-process applications, development and tests. Sessions
are lost on restart.

Thread Safety:
    - Each session id has its own asyncio.Lock
    - A global lock protects the _locks dictionary
    - Locks are dropped together with expired sessions

Examples:
    Basic usage::

        from http_actions.storage.memory import MemorySessionStore

        store = MemorySessionStore()
        await store.save("3f1c0d", {"user_id": 23}, ttl_seconds=3600)
        record = await store.load("3f1c0d")
        record.data                      # {"user_id": 23}
"""

import asyncio
import copy
from datetime import UTC, datetime, timedelta
from typing import Any

from http_actions.models import SessionRecord
from http_actions.observability.metrics import set_active_sessions
from http_actions.storage.base import SessionStore


class MemorySessionStore(SessionStore):
    """In-memory session store.

    Attributes:
        _store: Dictionary mapping session ids to records.
        _locks: Dictionary mapping session ids to asyncio.Lock objects.
        _global_lock: Lock protecting the _locks dictionary.
    """

    def __init__(self) -> None:
        self._store: dict[str, SessionRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._global_lock = asyncio.Lock()

    async def _lock_for(self, session_id: str) -> asyncio.Lock:
        async with self._global_lock:
            if session_id not in self._locks:
                self._locks[session_id] = asyncio.Lock()
            return self._locks[session_id]

    async def load(self, session_id: str) -> SessionRecord | None:
        """Return a copy of the session, or None if missing or expired."""
        record = self._store.get(session_id)
        if record is None or record.expires_at <= datetime.now(UTC):
            return None
        # Callers mutate the data; keep the stored copy untouched
        return record.model_copy(update={"data": copy.deepcopy(record.data)})

    async def save(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> SessionRecord:
        """Create or replace a session, preserving its creation time."""
        lock = await self._lock_for(session_id)
        async with lock:
            now = datetime.now(UTC)
            existing = self._store.get(session_id)
            created_at = existing.created_at if existing is not None else now
            record = SessionRecord(
                session_id=session_id,
                data=copy.deepcopy(data),
                created_at=created_at,
                expires_at=now + timedelta(seconds=ttl_seconds),
            )
            self._store[session_id] = record

        set_active_sessions(len(self._store))
        return record

    async def delete(self, session_id: str) -> bool:
        """Remove a session."""
        lock = await self._lock_for(session_id)
        async with lock:
            removed = self._store.pop(session_id, None) is not None

        async with self._global_lock:
            self._locks.pop(session_id, None)

        set_active_sessions(len(self._store))
        return removed

    async def cleanup_expired(self) -> int:
        """Remove every expired session and its lock."""
        now = datetime.now(UTC)
        expired = [session_id for session_id, record in self._store.items() if record.expires_at <= now]

        for session_id in expired:
            self._store.pop(session_id, None)

        async with self._global_lock:
            for session_id in expired:
                self._locks.pop(session_id, None)

        set_active_sessions(len(self._store))
        return len(expired)
