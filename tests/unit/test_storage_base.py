"""Unit tests for the session store protocol.

Tests in this module verify that the SessionStore protocol is correctly
defined and that runtime type checking works as expected.
"""

from typing import Any

from http_actions.models import SessionRecord
from http_actions.storage.base import SessionStore
from http_actions.storage.memory import MemorySessionStore


class TestSessionStoreProtocol:
    """Test suite for the SessionStore protocol definition."""

    def test_session_store_has_required_methods(self):
        """SessionStore protocol should define all required methods."""
        assert hasattr(SessionStore, "load")
        assert hasattr(SessionStore, "save")
        assert hasattr(SessionStore, "delete")
        assert hasattr(SessionStore, "cleanup_expired")

    def test_conforming_class(self):
        """A class implementing all methods should conform to SessionStore."""

        class ConformingStore:
            async def load(self, session_id: str) -> SessionRecord | None:  # noqa: ARG002
                return None

            async def save(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> SessionRecord:
                raise NotImplementedError

            async def delete(self, session_id: str) -> bool:  # noqa: ARG002
                return False

            async def cleanup_expired(self) -> int:
                return 0

        assert isinstance(ConformingStore(), SessionStore)

    def test_non_conforming_class(self):
        """A class missing methods should not conform to SessionStore."""

        class PartialStore:
            async def load(self, session_id: str) -> None:  # noqa: ARG002
                return None

        assert not isinstance(PartialStore(), SessionStore)

    def test_memory_store_conforms(self):
        """MemorySessionStore should conform to SessionStore."""
        assert isinstance(MemorySessionStore(), SessionStore)
