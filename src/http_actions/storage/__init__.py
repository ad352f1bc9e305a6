"""Session stores for http-actions."""

from http_actions.storage.base import SessionStore
from http_actions.storage.memory import MemorySessionStore

__all__ = ["SessionStore", "MemorySessionStore"]
