"""Key-value store factory.

Environment Variables:
    COGNITO_CREDENTIALS_KV_STORE_TYPE: Store type ("memory" or "redis"). Default: "redis"
    COGNITO_CREDENTIALS_KV_STORE_DEFAULT_TTL: TTL in seconds for every entry. Default: no TTL
    COGNITO_CREDENTIALS_KV_STORE_KEY_PREFIX: Prefix applied to every key. Default: None
    COGNITO_CREDENTIALS_KV_STORE_REDIS_HOST: Redis host. Default: "localhost"
    COGNITO_CREDENTIALS_KV_STORE_REDIS_PORT: Redis port. Default: 6379
    COGNITO_CREDENTIALS_KV_STORE_REDIS_DB: Redis database number. Default: 0
    COGNITO_CREDENTIALS_KV_STORE_REDIS_PASSWORD: Redis password. Default: None
"""

import os

from .base import KeyValueStore
from .memory import InMemoryKeyValueStore
from .redis import RedisKeyValueStore

ENV_PREFIX = "COGNITO_CREDENTIALS_KV_STORE"


class UnknownStoreTypeError(ValueError):
    """Raised when an unknown key-value store type is specified."""

    def __init__(self, store_type: str) -> None:
        super().__init__(f"Unknown store type: {store_type}")
        self.store_type = store_type


def _env(name: str) -> str | None:
    return os.getenv(f"{ENV_PREFIX}_{name}") or None


def _env_int(name: str) -> int | None:
    """Read an integer setting.

    Raises:
        ValueError: If the variable is set but is not an integer.
    """
    raw = _env(name)
    return int(raw) if raw is not None else None


def create_kv_store(
    store_type: str | None = None,
    default_ttl: int | None = None,
    key_prefix: str | None = None,
    redis_host: str | None = None,
    redis_port: int | None = None,
    redis_db: int | None = None,
    redis_password: str | None = None,
) -> KeyValueStore:
    """Create a key-value store.

    Arguments take precedence over the environment. Entries get no TTL unless
    one is configured, so cached failures persist until overwritten.

    Raises:
        UnknownStoreTypeError: If the store type is neither memory nor redis.
        ValueError: If a numeric environment setting is not an integer.
    """
    kind = (store_type or _env("TYPE") or "redis").lower()
    ttl = default_ttl or _env_int("DEFAULT_TTL")
    prefix = key_prefix or _env("KEY_PREFIX")

    if kind == "memory":
        return InMemoryKeyValueStore(default_ttl=ttl, key_prefix=prefix)

    if kind == "redis":
        return RedisKeyValueStore(
            host=redis_host or _env("REDIS_HOST") or "localhost",
            port=redis_port or _env_int("REDIS_PORT") or 6379,
            db=redis_db or _env_int("REDIS_DB") or 0,
            password=redis_password or _env("REDIS_PASSWORD"),
            default_ttl=ttl,
            key_prefix=prefix,
        )

    raise UnknownStoreTypeError(kind)
