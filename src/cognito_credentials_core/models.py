"""Data model for the credential lifecycle.

This module defines the values that flow between the authenticator, the
exchanger and the cache: the login request, the identity assertion returned
by the user pool, the temporary AWS credentials returned by the identity
pool, and the cached entry shapes persisted in the key-value store.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

CACHE_KEY_PREFIX = "cognito-credentials"


class CredentialType(str, Enum):
    """Credential field that a caller can request."""

    ACCESS_KEY_ID = "accessKeyId"
    SECRET_ACCESS_KEY = "secretAccessKey"
    SESSION_TOKEN = "sessionToken"

    def __str__(self) -> str:
        return self.value


class CacheEntryValidationError(ValueError):
    """Raised when a stored cache entry does not have a recognised shape."""


@dataclass(frozen=True)
class AuthRequest:
    """Username/password login against a user pool app client."""

    username: str
    password: str
    user_pool_id: str
    client_id: str

    @property
    def pool_region(self) -> str:
        """Region encoded in the user pool id (``<region>_<id>``).

        Raises:
            ValueError: If the user pool id is not in ``<region>_<id>`` format.
        """
        region, sep, pool = self.user_pool_id.partition("_")
        if not sep or not region or not pool:
            raise ValueError(f"Invalid UserPoolId format: {self.user_pool_id}")  # noqa: TRY003
        return region

    def __repr__(self) -> str:
        return (
            f"AuthRequest(username={self.username!r}, password='***', "
            f"user_pool_id={self.user_pool_id!r}, client_id={self.client_id!r})"
        )


@dataclass(frozen=True)
class IdentityAssertion:
    """ID token and access token issued by the user pool."""

    id_token: str
    access_token: str

    def __repr__(self) -> str:
        return "IdentityAssertion(id_token='***', access_token='***')"


@dataclass(frozen=True)
class CloudCredentials:
    """Temporary AWS credentials issued by the identity pool.

    Attributes:
        access_key_id: AWS access key id.
        secret_access_key: AWS secret access key.
        session_token: AWS session token.
        expire_time: Absolute, timezone-aware expiry instant.
    """

    access_key_id: str
    secret_access_key: str
    session_token: str
    expire_time: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        """Return True while ``now`` is strictly before the expiry instant."""
        current = now or datetime.now(UTC)
        return current < self.expire_time

    def get(self, credential_type: CredentialType) -> str:
        """Return the value of the requested credential field."""
        if credential_type is CredentialType.ACCESS_KEY_ID:
            return self.access_key_id
        if credential_type is CredentialType.SECRET_ACCESS_KEY:
            return self.secret_access_key
        return self.session_token

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored shape, with expiry as epoch milliseconds."""
        return {
            "accessKeyId": self.access_key_id,
            "secretAccessKey": self.secret_access_key,
            "sessionToken": self.session_token,
            "expireTime": int(self.expire_time.timestamp() * 1000),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CloudCredentials:
        """Create credentials from their stored shape.

        Raises:
            CacheEntryValidationError: If a field is missing or has the wrong type.
        """
        fields = ("accessKeyId", "secretAccessKey", "sessionToken")
        for name in fields:
            if not isinstance(data.get(name), str):
                raise CacheEntryValidationError(f"Cached credentials missing '{name}'")
        expire_ms = data.get("expireTime")
        if isinstance(expire_ms, bool) or not isinstance(expire_ms, int | float):
            raise CacheEntryValidationError("Cached credentials missing 'expireTime'")
        try:
            expire_time = datetime.fromtimestamp(expire_ms / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError) as e:
            raise CacheEntryValidationError("Cached 'expireTime' out of range") from e

        return cls(
            access_key_id=data["accessKeyId"],
            secret_access_key=data["secretAccessKey"],
            session_token=data["sessionToken"],
            expire_time=expire_time,
        )

    def __repr__(self) -> str:
        return (
            f"CloudCredentials(access_key_id={self.access_key_id!r}, "
            f"secret_access_key='***', session_token='***', "
            f"expire_time={self.expire_time.isoformat()!r})"
        )


@dataclass(frozen=True)
class CachedFailure:
    """A failed attempt, stored so later requests replay it."""

    error: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored shape."""
        return {"error": self.error}


CachedEntry = CloudCredentials | CachedFailure


def entry_from_dict(data: object) -> CachedEntry:
    """Decode a stored value into a cached entry.

    Entries carrying an ``error`` field are failures, everything else must be
    a complete set of credentials.

    Raises:
        CacheEntryValidationError: If the value is not a recognised entry.
    """
    if not isinstance(data, dict):
        raise CacheEntryValidationError("Cached entry must be a JSON object")
    if "error" in data:
        return CachedFailure(error=str(data["error"]))
    return CloudCredentials.from_dict(data)


def build_cache_key(
    username: str,
    password: str,
    user_pool_id: str,
    client_id: str,
    identity_pool_id: str,
    region: str,
) -> str:
    """Build the store key shared by all requests with the same parameters.

    The parameters are encoded as an ordered JSON array so no value can bleed
    into its neighbour, then hashed so the password never appears in a key.
    """
    encoded = json.dumps(
        [username, password, user_pool_id, client_id, identity_pool_id, region],
        ensure_ascii=False,
        separators=(",", ":"),
    )
    digest = hashlib.sha256(encoded.encode("utf-8", "surrogatepass")).hexdigest()
    return f"{CACHE_KEY_PREFIX}:{digest}"
