"""Credential lifecycle orchestration.

This module provides the CredentialOrchestrator class, the public entry point
that validates a request, reuses cached credentials when possible, and
otherwise authenticates against the user pool, exchanges the tokens with the
identity pool and caches the outcome, success or failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from cognito_credentials_core.authenticator import IdentityAuthenticator
from cognito_credentials_core.cache import CredentialCache
from cognito_credentials_core.exceptions import (
    AuthenticationError,
    ExchangeError,
    ValidationError,
)
from cognito_credentials_core.exchanger import CredentialExchanger
from cognito_credentials_core.models import CredentialType, build_cache_key

if TYPE_CHECKING:
    from cognito_credentials_core.kv_store import KeyValueStore

# Get logger for this module
logger = structlog.get_logger(__name__)


def _require(value: str | None, name: str) -> str:
    if not value:
        raise ValidationError(f"{name} attribute is required", name)
    return value


def _parse_credential_type(value: str | CredentialType | None) -> CredentialType:
    """Validate the requested credential field."""
    if isinstance(value, CredentialType):
        return value
    _require(value, "CredentialType")
    try:
        return CredentialType(value)
    except ValueError as e:
        allowed = ", ".join(t.value for t in CredentialType)
        raise ValidationError(
            f"CredentialType must be one of: {allowed}", "CredentialType"
        ) from e


class CredentialOrchestrator:
    """Returns one credential field, authenticating only when needed."""

    def __init__(
        self,
        cache: CredentialCache,
        authenticator: IdentityAuthenticator,
        exchanger: CredentialExchanger,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            cache: Cache the outcome of each attempt is persisted in.
            authenticator: User pool authenticator.
            exchanger: Identity pool credential exchanger.
        """
        self.cache = cache
        self.authenticator = authenticator
        self.exchanger = exchanger

    async def run(
        self,
        username: str,
        password: str,
        user_pool_id: str,
        client_id: str,
        identity_pool_id: str,
        region: str,
        credential_type: str | CredentialType,
    ) -> str:
        """Return the requested credential field for a login.

        Cached credentials are reused until they expire. A cached failure is
        replayed without contacting AWS until the entry is overwritten.

        Args:
            username: User pool username.
            password: User password.
            user_pool_id: User pool id.
            client_id: User pool app client id.
            identity_pool_id: Identity pool id.
            region: Identity pool region.
            credential_type: Field to return (accessKeyId, secretAccessKey or sessionToken).

        Returns:
            The value of the requested credential field.

        Raises:
            ValidationError: If an input is missing or the field is unknown.
            CachedCredentialError: If a previous failure is cached for these inputs.
            UnsupportedChallengeError: If the user pool requires a challenge.
            AuthenticationError: If the login fails.
            ExchangeError: If the credential exchange fails.
            StoreError: If the key-value store is unavailable.
        """
        _require(username, "Username")
        _require(password, "Password")
        _require(user_pool_id, "UserPoolId")
        _require(client_id, "ClientId")
        _require(identity_pool_id, "IdentityPoolId")
        _require(region, "CognitoRegion")
        field = _parse_credential_type(credential_type)

        key = build_cache_key(
            username, password, user_pool_id, client_id, identity_pool_id, region
        )

        with structlog.contextvars.bound_contextvars(cache_key=key):
            credentials = await self.cache.load(key)
            if credentials is not None:
                return credentials.get(field)

            try:
                assertion = await self.authenticator.authenticate(
                    username, password, user_pool_id, client_id
                )
                credentials = await self.exchanger.exchange(
                    assertion, user_pool_id, identity_pool_id, region
                )
            except (AuthenticationError, ExchangeError) as e:
                logger.exception("CREDENTIALS_REFRESH_FAILED", error=e.message)
                # a StoreError here is raised instead, with e as its __context__
                await self.cache.save_error(key, e.message)
                raise

            await self.cache.save(key, credentials)
            logger.info(
                "CREDENTIALS_REFRESHED",
                expire_time=credentials.expire_time.isoformat(),
            )
            return credentials.get(field)

    async def clear(
        self,
        username: str,
        password: str,
        user_pool_id: str,
        client_id: str,
        identity_pool_id: str,
        region: str,
    ) -> bool:
        """Drop the cached entry for a parameter set.

        Returns:
            True if an entry was removed.
        """
        key = build_cache_key(
            username, password, user_pool_id, client_id, identity_pool_id, region
        )
        return await self.cache.invalidate(key)


def create_orchestrator(
    store: KeyValueStore,
    authenticator: IdentityAuthenticator | None = None,
    exchanger: CredentialExchanger | None = None,
) -> CredentialOrchestrator:
    """Create an orchestrator over a store with default AWS collaborators."""
    return CredentialOrchestrator(
        cache=CredentialCache(store),
        authenticator=authenticator or IdentityAuthenticator(),
        exchanger=exchanger or CredentialExchanger(),
    )


async def run(
    store: KeyValueStore,
    username: str,
    password: str,
    user_pool_id: str,
    client_id: str,
    identity_pool_id: str,
    region: str,
    credential_type: str | CredentialType = CredentialType.ACCESS_KEY_ID,
) -> str:
    """Return one credential field using the given store as the cache."""
    orchestrator = create_orchestrator(store)
    return await orchestrator.run(
        username,
        password,
        user_pool_id,
        client_id,
        identity_pool_id,
        region,
        credential_type,
    )
