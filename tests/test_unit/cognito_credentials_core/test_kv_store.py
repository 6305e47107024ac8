"""Tests for key-value store implementations.

This module contains unit tests for the in-memory store, the store factory
and the behaviour shared by all backends.
"""

import asyncio
from typing import Any

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import cognito_credentials_core.kv_store.redis as redis_store_module
from cognito_credentials_core.exceptions import StoreError
from cognito_credentials_core.kv_store import (
    InMemoryKeyValueStore,
    RedisKeyValueStore,
    UnknownStoreTypeError,
    create_kv_store,
)


class TestInMemoryKeyValueStore:
    """Test the in-memory key-value store implementation."""

    @pytest.mark.asyncio
    async def test_basic_operations(self, memory_store: InMemoryKeyValueStore) -> None:
        """Test basic PUT, GET, DELETE operations."""
        await memory_store.put("test_key", {"value": "test_data"})
        assert await memory_store.get("test_key") == {"value": "test_data"}
        assert await memory_store.get("nonexistent_key") is None

        assert await memory_store.delete("test_key") is True
        assert await memory_store.delete("nonexistent_key") is False
        assert await memory_store.get("test_key") is None

    @pytest.mark.asyncio
    async def test_overwrite(self, memory_store: InMemoryKeyValueStore) -> None:
        """Test a second put replaces the first value."""
        await memory_store.put("key", {"error": "first"})
        await memory_store.put("key", {"error": "second"})
        assert await memory_store.get("key") == {"error": "second"}

    @pytest.mark.asyncio
    async def test_default_ttl_expires_entries(self) -> None:
        """Test entries expire once the default TTL has passed."""
        store = InMemoryKeyValueStore(default_ttl=1)
        try:
            await store.put("ttl_key", "ttl_value")
            assert await store.get("ttl_key") == "ttl_value"

            await asyncio.sleep(1.1)

            assert await store.get("ttl_key") is None
            assert store._entries == {}
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_no_ttl_by_default(self, memory_store: InMemoryKeyValueStore) -> None:
        """Test entries do not expire unless a TTL is configured."""
        await memory_store.put("key", "value")
        assert memory_store._entries["key"][1] is None

    def test_zero_ttl_means_no_expiry(self) -> None:
        """Test a zero TTL is treated as no TTL."""
        assert InMemoryKeyValueStore(default_ttl=0)._default_ttl is None

    @pytest.mark.asyncio
    async def test_key_prefix(self) -> None:
        """Test the key prefix is applied with a single separator."""
        for prefix in ("creds", "creds:"):
            store = InMemoryKeyValueStore(key_prefix=prefix)
            await store.put("key", "value")
            assert await store.get("key") == "value"
            assert list(store._entries) == ["creds:key"]
            await store.close()

    @pytest.mark.asyncio
    async def test_corrupt_value_raises_value_error(
        self, memory_store: InMemoryKeyValueStore, write_raw: Any
    ) -> None:
        """Test a raw value that is not JSON fails to decode."""
        write_raw(memory_store, "key", "{not json")
        with pytest.raises(ValueError):
            await memory_store.get("key")

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        """Test leaving the context clears the store."""
        store = InMemoryKeyValueStore()
        async with store as entered:
            await entered.put("key", "value")
        assert store._entries == {}


class TestRedisConnection:
    """Test RedisKeyValueStore connection handling without a server."""

    @staticmethod
    def _patched(client: MagicMock, pool: MagicMock) -> Any:
        return (
            patch.object(redis_store_module.redis, "ConnectionPool", return_value=pool),
            patch.object(redis_store_module.redis, "Redis", return_value=client),
        )

    @pytest.mark.asyncio
    async def test_failed_ping_disconnects_pool(self) -> None:
        """Test a failed PING releases the pool and leaves the store unconnected."""
        pool = MagicMock(disconnect=AsyncMock())
        client = MagicMock(ping=AsyncMock(side_effect=RedisConnectionError("refused")))
        pool_patch, client_patch = self._patched(client, pool)

        with pool_patch, client_patch:
            store = RedisKeyValueStore()
            with pytest.raises(StoreError) as exc_info:
                await store.get("key")

        assert exc_info.value.operation == "connect"
        pool.disconnect.assert_awaited_once()
        assert store._pool is None
        assert store._redis is None

    @pytest.mark.asyncio
    async def test_concurrent_first_use_opens_one_pool(self) -> None:
        """Test concurrent callers share a single connection pool."""
        pool = MagicMock(disconnect=AsyncMock())
        client = MagicMock(
            ping=AsyncMock(return_value=True),
            get=AsyncMock(return_value=None),
            aclose=AsyncMock(),
        )
        pool_patch, client_patch = self._patched(client, pool)

        with pool_patch as pool_cls, client_patch:
            store = RedisKeyValueStore()
            results = await asyncio.gather(*(store.get("key") for _ in range(5)))
            await store.close()

        assert results == [None] * 5
        assert pool_cls.call_count == 1
        client.ping.assert_awaited_once()
        pool.disconnect.assert_awaited_once()


class TestStoreFactory:
    """Test create_kv_store configuration handling."""

    def test_memory_store(self) -> None:
        """Test the memory store type."""
        assert isinstance(create_kv_store("memory"), InMemoryKeyValueStore)

    def test_redis_is_the_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test Redis is used when no type is configured."""
        monkeypatch.delenv("COGNITO_CREDENTIALS_KV_STORE_TYPE", raising=False)
        store = create_kv_store()
        assert isinstance(store, RedisKeyValueStore)
        assert store._redis is None

    def test_redis_store_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test Redis settings are read from the environment."""
        monkeypatch.setenv("COGNITO_CREDENTIALS_KV_STORE_TYPE", "redis")
        monkeypatch.setenv("COGNITO_CREDENTIALS_KV_STORE_REDIS_HOST", "cache.local")
        monkeypatch.setenv("COGNITO_CREDENTIALS_KV_STORE_REDIS_PORT", "6380")
        monkeypatch.setenv("COGNITO_CREDENTIALS_KV_STORE_REDIS_PASSWORD", "s3cret")

        store = create_kv_store()

        assert isinstance(store, RedisKeyValueStore)
        assert store._host == "cache.local"
        assert store._port == 6380
        assert store._password == "s3cret"

    def test_arguments_override_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test explicit arguments win over the environment."""
        monkeypatch.setenv("COGNITO_CREDENTIALS_KV_STORE_REDIS_HOST", "cache.local")
        store = create_kv_store("redis", redis_host="other.local")
        assert store._host == "other.local"  # type: ignore[attr-defined]

    def test_default_ttl_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the default TTL is read from the environment."""
        monkeypatch.setenv("COGNITO_CREDENTIALS_KV_STORE_DEFAULT_TTL", "120")
        store = create_kv_store("memory")
        assert store._default_ttl == 120  # type: ignore[attr-defined]

    def test_invalid_ttl_in_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a non-numeric TTL is reported instead of ignored."""
        monkeypatch.setenv("COGNITO_CREDENTIALS_KV_STORE_DEFAULT_TTL", "soon")
        with pytest.raises(ValueError):
            create_kv_store("memory")

    def test_unknown_store_type(self) -> None:
        """Test an unknown store type is rejected."""
        with pytest.raises(UnknownStoreTypeError, match="Unknown store type: dynamo"):
            create_kv_store("dynamo")
