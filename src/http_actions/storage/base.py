"""Session store protocol for http-actions.

Actions keep the session as a plain dict in the transport envelope. A
server adapter loads it from a store before the call and saves it after.
This module defines the interface that stores implement.

Examples:
    Implementing a custom store::

        from http_actions.storage.base import SessionStore
        from http_actions.models import SessionRecord

        class RedisSessionStore:
            async def load(self, session_id: str) -> SessionRecord | None:
                data = await self.redis.get(f"session:{session_id}")
                if data is None:
                    return None
                return SessionRecord.model_validate_json(data)

            async def save(self, session_id, data, ttl_seconds):
                ...

Thread Safety:
    All methods may be called concurrently from multiple asyncio tasks.
    Implementations must protect their own state.
"""

from typing import Any, Protocol, runtime_checkable

from http_actions.models import SessionRecord


@runtime_checkable
class SessionStore(Protocol):
    """Protocol defining the interface for session stores.

    Expiration:
        Records whose ``expires_at`` has passed must be treated as missing
        by ``load`` even before ``cleanup_expired`` removes them.
    """

    async def load(self, session_id: str) -> SessionRecord | None:
        """Return the session for ``session_id``, or None if missing or expired.

        Examples:
            >>> record = await store.load("3f1c0d")
            >>> if record:
            ...     print(record.data)
        """
        ...

    async def save(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> SessionRecord:
        """Create or replace a session.

        The creation time of an existing session is preserved; the expiry
        is pushed ``ttl_seconds`` into the future.

        Args:
            session_id: Session identifier.
            data: Session contents.
            ttl_seconds: Lifetime from now.

        Returns:
            The stored record.
        """
        ...

    async def delete(self, session_id: str) -> bool:
        """Remove a session.

        Returns:
            True if a session was removed.
        """
        ...

    async def cleanup_expired(self) -> int:
        """Remove expired sessions.

        Returns:
            Number of sessions removed.
        """
        ...
