"""Credential cache over a key-value store.

This module provides the CredentialCache class. It persists the outcome of
the last authentication attempt for a parameter set, either credentials or a
failure message, and decides on read whether the entry can be reused.

Read rules:
    - no entry: miss
    - entry that cannot be decoded: removed, then miss
    - failure entry: replayed as ``CachedCredentialError`` (never expires)
    - credentials entry: hit while not expired, otherwise miss (left in place)
"""

from datetime import UTC, datetime

import structlog

from cognito_credentials_core.exceptions import CachedCredentialError
from cognito_credentials_core.kv_store import KeyValueStore
from cognito_credentials_core.models import (
    CachedFailure,
    CloudCredentials,
    entry_from_dict,
)

# Get logger for this module
logger = structlog.get_logger(__name__)


class CredentialCache:
    """Stores and validates cached credential entries."""

    def __init__(self, store: KeyValueStore) -> None:
        """Initialize the cache.

        Args:
            store: Key-value store entries are persisted in.
        """
        self.store = store

    async def load(
        self, key: str, now: datetime | None = None
    ) -> CloudCredentials | None:
        """Load reusable credentials for a cache key.

        Args:
            key: Cache key built from the request parameters.
            now: Reference instant for the expiry check. Defaults to the current time.

        Returns:
            Credentials that have not expired yet, or None on a miss.

        Raises:
            CachedCredentialError: If the entry records a failed attempt.
            StoreError: If the store cannot be read.
        """
        try:
            raw = await self.store.get(key)
            entry = None if raw is None else entry_from_dict(raw)
        except ValueError:
            logger.warning("CREDENTIALS_CACHE_CORRUPT", cache_key=key)
            await self.store.delete(key)
            return None

        if entry is None:
            logger.debug("CREDENTIALS_CACHE_MISS", cache_key=key)
            return None

        if isinstance(entry, CachedFailure):
            logger.error("CREDENTIALS_CACHE_ERROR", cache_key=key, error=entry.error)
            raise CachedCredentialError(entry.error, key)

        if not entry.is_valid(now or datetime.now(UTC)):
            logger.info(
                "CREDENTIALS_CACHE_EXPIRED",
                cache_key=key,
                expire_time=entry.expire_time.isoformat(),
            )
            return None

        logger.debug("CREDENTIALS_CACHE_HIT", cache_key=key)
        return entry

    async def save(self, key: str, entry: CloudCredentials | CachedFailure) -> None:
        """Write an entry, replacing whatever was stored for the key.

        Raises:
            StoreError: If the store cannot be written.
        """
        await self.store.put(key, entry.to_dict())
        logger.debug(
            "CREDENTIALS_CACHE_SAVED",
            cache_key=key,
            failure=isinstance(entry, CachedFailure),
        )

    async def save_error(self, key: str, message: str) -> None:
        """Record a failed attempt so later reads replay it."""
        await self.save(key, CachedFailure(error=message))

    async def invalidate(self, key: str) -> bool:
        """Remove the entry for a key.

        Returns:
            True if an entry was removed.
        """
        removed = await self.store.delete(key)
        logger.info("CREDENTIALS_CACHE_INVALIDATED", cache_key=key, removed=removed)
        return removed
