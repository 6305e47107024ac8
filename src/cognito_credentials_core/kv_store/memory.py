"""In-memory key-value store.

Entries live for the lifetime of the process, which suits tests and hosts
that do not need credentials to survive a restart.
"""

import asyncio
import time

from .base import BaseKeyValueStore


class InMemoryKeyValueStore(BaseKeyValueStore):
    """Process-local store.

    Values are held JSON-encoded, as Redis holds them, so an undecodable value
    fails the same way on both backends. Entries past their TTL are dropped
    when read.
    """

    def __init__(
        self, default_ttl: int | None = None, key_prefix: str | None = None
    ) -> None:
        super().__init__(default_ttl, key_prefix)
        # full key -> (encoded value, monotonic deadline or None)
        self._entries: dict[str, tuple[str, float | None]] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, value: object) -> None:
        deadline = (
            time.monotonic() + self._default_ttl if self._default_ttl else None
        )
        async with self._lock:
            self._entries[self._full_key(key)] = (self._encode(value), deadline)

    async def get(self, key: str) -> object | None:
        full_key = self._full_key(key)
        async with self._lock:
            entry = self._entries.get(full_key)
            if entry is None:
                return None
            raw, deadline = entry
            if deadline is not None and time.monotonic() >= deadline:
                del self._entries[full_key]
                return None
        return self._decode(raw)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(self._full_key(key), None) is not None

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()
