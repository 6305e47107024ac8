"""Redis key-value store.

Entries written here are shared by every process pointed at the same Redis
database, so a login cached by one invocation is reused by the next.
"""

import asyncio

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from cognito_credentials_core.exceptions import StoreError

from .base import BaseKeyValueStore

# Get logger for this module
logger = structlog.get_logger(__name__)


class RedisKeyValueStore(BaseKeyValueStore):
    """Redis-backed store.

    The connection pool is opened on first use and verified with ``PING``.
    Any Redis failure is raised as ``StoreError`` naming the operation.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
        timeout: float = 10.0,
        default_ttl: int | None = None,
        key_prefix: str | None = None,
    ) -> None:
        super().__init__(default_ttl, key_prefix)
        self._host = host
        self._port = port
        self._db = db
        self._password = password
        self._timeout = timeout

        self._redis: redis.Redis | None = None
        self._pool: redis.ConnectionPool | None = None
        self._connect_lock = asyncio.Lock()

    async def _ensure_connection(self) -> redis.Redis:
        """Return the client, connecting on first use."""
        async with self._connect_lock:
            if self._redis is not None:
                return self._redis

            pool = redis.ConnectionPool(
                host=self._host,
                port=self._port,
                db=self._db,
                password=self._password,
                socket_timeout=self._timeout,
                socket_connect_timeout=self._timeout,
                decode_responses=True,
            )
            client = redis.Redis(connection_pool=pool)
            try:
                await client.ping()
            except (RedisError, OSError) as e:
                logger.exception(
                    "REDIS_CONNECTION_FAILED", host=self._host, port=self._port
                )
                await pool.disconnect()
                raise StoreError(f"Redis connection failed: {e}", "connect") from e

            logger.debug("REDIS_CONNECTED", host=self._host, port=self._port)
            self._pool = pool
            self._redis = client
            return client

    async def put(self, key: str, value: object) -> None:
        client = await self._ensure_connection()
        try:
            await client.set(
                self._full_key(key), self._encode(value), ex=self._default_ttl
            )
        except RedisError as e:
            raise StoreError(f"Redis put failed: {e}", "put") from e

    async def get(self, key: str) -> object | None:
        client = await self._ensure_connection()
        try:
            raw = await client.get(self._full_key(key))
        except RedisError as e:
            raise StoreError(f"Redis get failed: {e}", "get") from e
        return None if raw is None else self._decode(raw)

    async def delete(self, key: str) -> bool:
        client = await self._ensure_connection()
        try:
            removed = await client.delete(self._full_key(key))
        except RedisError as e:
            raise StoreError(f"Redis delete failed: {e}", "delete") from e
        return removed > 0

    async def close(self) -> None:
        """Close the client and disconnect the pool."""
        async with self._connect_lock:
            client, pool = self._redis, self._pool
            self._redis = None
            self._pool = None
        if client is not None:
            # redis-py asyncio deprecates close() in favor of aclose() in 5.0.1
            await client.aclose()
        if pool is not None:
            await pool.disconnect()
