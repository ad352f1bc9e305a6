"""Unit tests for MemorySessionStore.

This test suite covers:
    - Basic operations (load, save, delete)
    - Isolation of returned data from stored data
    - TTL expiry and cleanup
    - Lock cleanup
    - Concurrent saves
"""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from http_actions.storage.memory import MemorySessionStore


@pytest.fixture
def store():
    """Create a fresh MemorySessionStore for each test."""
    return MemorySessionStore()


def expire(store, session_id):
    """Move a stored session's expiry into the past."""
    record = store._store[session_id]
    store._store[session_id] = record.model_copy(
        update={"expires_at": datetime.now(UTC) - timedelta(seconds=1)}
    )


# ============================================================================
# Basic Operations
# ============================================================================


@pytest.mark.asyncio
async def test_load_nonexistent_session(store):
    """Test that load() returns None for an unknown id."""
    assert await store.load("nonexistent") is None


@pytest.mark.asyncio
async def test_save_and_load(store):
    """Test that saved data can be loaded back."""
    saved = await store.save("abc", {"user_id": 23}, ttl_seconds=60)
    loaded = await store.load("abc")

    assert loaded is not None
    assert loaded.data == {"user_id": 23}
    assert loaded.session_id == "abc"
    assert loaded.expires_at == saved.expires_at


@pytest.mark.asyncio
async def test_save_preserves_created_at(store):
    """Test that replacing a session keeps its creation time."""
    first = await store.save("abc", {"n": 1}, ttl_seconds=60)
    second = await store.save("abc", {"n": 2}, ttl_seconds=60)

    assert second.created_at == first.created_at
    assert second.expires_at >= first.expires_at
    assert (await store.load("abc")).data == {"n": 2}


@pytest.mark.asyncio
async def test_loaded_data_is_a_copy(store):
    """Test that mutating loaded data does not change the store."""
    await store.save("abc", {"cart": [1]}, ttl_seconds=60)

    loaded = await store.load("abc")
    loaded.data["cart"].append(2)

    assert (await store.load("abc")).data == {"cart": [1]}


@pytest.mark.asyncio
async def test_saved_data_is_a_copy(store):
    """Test that mutating the caller's dict after save does not change the store."""
    data = {"cart": [1]}
    await store.save("abc", data, ttl_seconds=60)
    data["cart"].append(2)

    assert (await store.load("abc")).data == {"cart": [1]}


@pytest.mark.asyncio
async def test_delete(store):
    """Test that delete() removes the session and its lock."""
    await store.save("abc", {}, ttl_seconds=60)

    assert await store.delete("abc") is True
    assert await store.load("abc") is None
    assert "abc" not in store._locks
    assert await store.delete("abc") is False


# ============================================================================
# TTL Expiry and Cleanup
# ============================================================================


@pytest.mark.asyncio
async def test_expired_session_is_hidden(store):
    """Test that load() treats expired sessions as missing."""
    await store.save("abc", {"user_id": 23}, ttl_seconds=60)
    expire(store, "abc")

    assert await store.load("abc") is None


@pytest.mark.asyncio
async def test_cleanup_expired(store):
    """Test that cleanup_expired() removes only expired sessions and their locks."""
    await store.save("old", {}, ttl_seconds=60)
    await store.save("new", {}, ttl_seconds=60)
    expire(store, "old")

    removed = await store.cleanup_expired()

    assert removed == 1
    assert "old" not in store._store
    assert "old" not in store._locks
    assert await store.load("new") is not None


@pytest.mark.asyncio
async def test_cleanup_empty_store(store):
    """Test that cleanup on an empty store removes nothing."""
    assert await store.cleanup_expired() == 0


# ============================================================================
# Concurrency
# ============================================================================


@pytest.mark.asyncio
async def test_concurrent_saves_share_one_lock(store):
    """Test that concurrent saves to one id leave one consistent record."""
    await asyncio.gather(*(store.save("abc", {"n": n}, ttl_seconds=60) for n in range(20)))

    loaded = await store.load("abc")

    assert loaded.data["n"] in range(20)
    assert len(store._locks) == 1
    assert len(store._store) == 1
