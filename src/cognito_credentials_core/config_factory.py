"""Configuration factory functions for creating application components.

This module provides factory functions to create the key-value store and the
AWS collaborators from environment variables and CLI arguments, without
using global state.

Environment Variables:
    COGNITO_CREDENTIALS_KV_STORE_TYPE: Store type to use ("memory" or "redis"). Default: "redis"
    COGNITO_CREDENTIALS_KV_STORE_DEFAULT_TTL: Default TTL in seconds. Default: no TTL
    COGNITO_CREDENTIALS_KV_STORE_KEY_PREFIX: Prefix applied to every key. Default: None
    COGNITO_CREDENTIALS_KV_STORE_REDIS_HOST: Redis host (when using redis). Default: "localhost"
    COGNITO_CREDENTIALS_KV_STORE_REDIS_PORT: Redis port (when using redis). Default: "6379"
    COGNITO_CREDENTIALS_KV_STORE_REDIS_DB: Redis database number (when using redis). Default: "0"
    COGNITO_CREDENTIALS_KV_STORE_REDIS_PASSWORD: Redis password (when using redis). Default: None

    COGNITO_CREDENTIALS_IDP_ENDPOINT_URL: cognito-idp endpoint override. Default: None
    COGNITO_CREDENTIALS_IDENTITY_ENDPOINT_URL: cognito-identity endpoint override. Default: None
"""

from dataclasses import dataclass
from typing import TypedDict, Unpack

import aioboto3

from cognito_credentials_core.authenticator import IdentityAuthenticator
from cognito_credentials_core.exchanger import CredentialExchanger
from cognito_credentials_core.kv_store import KeyValueStore, create_kv_store
from cognito_credentials_core.orchestrator import (
    CredentialOrchestrator,
    create_orchestrator,
)


class ConfigKwargs(TypedDict, total=False):
    """Type definition for configuration kwargs."""

    # Key-value store kwargs
    default_ttl: int
    key_prefix: str
    redis_host: str
    redis_port: int
    redis_db: int
    redis_password: str
    # AWS kwargs
    idp_endpoint_url: str
    identity_endpoint_url: str


@dataclass
class CredentialsConfig:
    """Application component container."""

    kv_store: KeyValueStore
    authenticator: IdentityAuthenticator
    exchanger: CredentialExchanger

    def create_orchestrator(self) -> CredentialOrchestrator:
        """Wire the components into an orchestrator."""
        return create_orchestrator(
            self.kv_store,
            authenticator=self.authenticator,
            exchanger=self.exchanger,
        )


def create_credentials_config(
    kv_store_type: str | None = None,
    **kwargs: Unpack[ConfigKwargs],
) -> CredentialsConfig:
    """Create a complete application configuration.

    Args:
        kv_store_type: Key-value store type ("redis" or "memory").
        **kwargs: Additional configuration parameters passed to individual factory functions.

    Returns:
        Configuration with all components.
    """
    kv_kwargs = {
        k: v
        for k, v in kwargs.items()
        if k.startswith(("redis_", "default_ttl", "key_prefix"))
    }
    kv_store = create_kv_store(
        store_type=kv_store_type,
        **kv_kwargs,  # type: ignore[arg-type]
    )

    # Login and exchange calls are unsigned, one session serves both
    session = aioboto3.Session()

    return CredentialsConfig(
        kv_store=kv_store,
        authenticator=IdentityAuthenticator(
            session=session, endpoint_url=kwargs.get("idp_endpoint_url")
        ),
        exchanger=CredentialExchanger(
            session=session, endpoint_url=kwargs.get("identity_endpoint_url")
        ),
    )
