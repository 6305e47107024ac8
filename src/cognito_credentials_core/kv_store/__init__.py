"""Key-value stores the credential cache persists entries in."""

from .base import BaseKeyValueStore, KeyValueStore
from .factory import UnknownStoreTypeError, create_kv_store
from .memory import InMemoryKeyValueStore
from .redis import RedisKeyValueStore

__all__ = [
    "BaseKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "UnknownStoreTypeError",
    "create_kv_store",
]
