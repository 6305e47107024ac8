"""Store interface the credential cache persists entries through."""

import json
from typing import Protocol


class KeyValueStore(Protocol):
    """Async store of JSON values.

    Backend I/O failures surface as ``StoreError``. A stored value that cannot
    be decoded surfaces from ``get`` as ``ValueError``.
    """

    async def put(self, key: str, value: object) -> None:
        """Write a value, replacing any previous value for the key."""
        ...

    async def get(self, key: str) -> object | None:
        """Read a value, or None if the key is absent or expired."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove a key.

        Returns:
            True if the key existed.
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...

    async def __aenter__(self) -> "KeyValueStore":
        """Async context manager entry."""
        ...

    async def __aexit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> None:
        """Async context manager exit."""
        ...


class BaseKeyValueStore:
    """Key prefixing, JSON encoding and the default TTL shared by backends.

    A default TTL of None or 0 means entries never expire.
    """

    def __init__(
        self, default_ttl: int | None = None, key_prefix: str | None = None
    ) -> None:
        self._default_ttl = default_ttl or None
        self._key_prefix = f"{key_prefix.rstrip(':')}:" if key_prefix else ""

    def _full_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    @staticmethod
    def _encode(value: object) -> str:
        return json.dumps(value)

    @staticmethod
    def _decode(raw: str | bytes) -> object:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    async def close(self) -> None:
        """Release backend resources."""

    async def __aenter__(self) -> "BaseKeyValueStore":
        return self

    async def __aexit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> None:
        await self.close()
