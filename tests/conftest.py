"""PyTest configuration and shared test fixtures.

This module provides fake AWS sessions, sample responses and key-value
store fixtures that are used across multiple test files.
"""

import os
from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

from cognito_credentials_core.kv_store import InMemoryKeyValueStore

USER_POOL_ID = "eu-west-2_AbCdEf123"
CLIENT_ID = "1example23456789"
IDENTITY_POOL_ID = "eu-west-2:11111111-2222-3333-4444-555555555555"
REGION = "eu-west-2"


class FakeClientContext:
    """Async context manager standing in for an aioboto3 client."""

    def __init__(self, client: AsyncMock) -> None:
        self.client = client

    async def __aenter__(self) -> AsyncMock:
        return self.client

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> bool:
        return False


class FakeSession:
    """aioboto3 session double that hands out preconfigured clients."""

    def __init__(self, **clients: AsyncMock) -> None:
        self.clients = clients
        self.client_calls: list[tuple[str, dict[str, Any]]] = []

    def client(self, service_name: str, **kwargs: Any) -> FakeClientContext:
        self.client_calls.append((service_name, kwargs))
        return FakeClientContext(self.clients[service_name.replace("-", "_")])


def auth_success_response(
    id_token: str = "id-token-jwt", access_token: str = "access-token-jwt"
) -> dict[str, Any]:
    """Build an InitiateAuth response carrying tokens."""
    return {
        "AuthenticationResult": {
            "IdToken": id_token,
            "AccessToken": access_token,
            "RefreshToken": "refresh-token",
            "ExpiresIn": 3600,
            "TokenType": "Bearer",
        },
        "ChallengeParameters": {},
    }


def password_verifier_response(username: str = "alice") -> dict[str, Any]:
    """Build an InitiateAuth response asking for the SRP password proof."""
    return {
        "ChallengeName": "PASSWORD_VERIFIER",
        "ChallengeParameters": {
            "USERNAME": username,
            "USER_ID_FOR_SRP": username,
            "SALT": "5d8f3c1a9b7e2d4f",
            "SRP_B": "a3f1c5e7b9d2f4e6" * 24,
            "SECRET_BLOCK": "c2VjcmV0LWJsb2NrLWZyb20tdXNlci1wb29s",
        },
    }


def credentials_response(
    expiration: datetime | None = None,
    access_key_id: str = "ASIAEXAMPLEKEY",
    secret_key: str = "secret-example",
    session_token: str = "session-token-example",
) -> dict[str, Any]:
    """Build a GetCredentialsForIdentity response."""
    return {
        "IdentityId": "eu-west-2:identity-1",
        "Credentials": {
            "AccessKeyId": access_key_id,
            "SecretKey": secret_key,
            "SessionToken": session_token,
            "Expiration": expiration or datetime.now(UTC) + timedelta(hours=1),
        },
    }


@pytest.fixture
def cognito_idp_client() -> AsyncMock:
    """Create a cognito-idp client double running the SRP exchange."""
    client = AsyncMock()
    client.initiate_auth.return_value = password_verifier_response()
    client.respond_to_auth_challenge.return_value = auth_success_response()
    return client


@pytest.fixture
def cognito_identity_client() -> AsyncMock:
    """Create a cognito-identity client double answering with credentials."""
    client = AsyncMock()
    client.get_id.return_value = {"IdentityId": "eu-west-2:identity-1"}
    client.get_credentials_for_identity.return_value = credentials_response()
    return client


@pytest.fixture
def fake_session(
    cognito_idp_client: AsyncMock, cognito_identity_client: AsyncMock
) -> FakeSession:
    """Create a fake aioboto3 session over both Cognito clients."""
    return FakeSession(
        cognito_idp=cognito_idp_client, cognito_identity=cognito_identity_client
    )


@pytest.fixture
async def memory_store() -> AsyncGenerator[InMemoryKeyValueStore]:
    """Create a fresh in-memory store for each test."""
    store = InMemoryKeyValueStore()
    yield store
    await store.close()


@pytest.fixture(scope="class")
def redis_container() -> Generator[Any]:
    """Start Redis container for testing, skipping when Docker is unavailable."""
    from testcontainers.core.container import (  # type: ignore[import-untyped]
        DockerContainer,
    )
    from testcontainers.core.waiting_utils import (  # type: ignore[import-untyped]
        wait_for_logs,
    )

    if os.getenv("CI") and not os.path.exists("/var/run/docker.sock"):
        pytest.skip("Docker not available in CI environment")

    container = DockerContainer("redis:7-alpine")
    container.with_exposed_ports(6379)
    try:
        container.start()
        wait_for_logs(container, "Ready to accept connections")
    except Exception as e:  # noqa: BLE001
        pytest.skip(f"Redis container unavailable: {e}")

    yield container

    container.stop()


def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture
def login() -> dict[str, str]:
    """Parameters shared by every request for the same cached login."""
    return {
        "username": "alice",
        "password": "correct-horse",
        "user_pool_id": USER_POOL_ID,
        "client_id": CLIENT_ID,
        "identity_pool_id": IDENTITY_POOL_ID,
        "region": REGION,
    }


@pytest.fixture
def make_credentials_response() -> Any:
    """Factory for GetCredentialsForIdentity responses."""
    return credentials_response


@pytest.fixture
def make_verifier_response() -> Any:
    """Factory for PASSWORD_VERIFIER challenge responses."""
    return password_verifier_response


@pytest.fixture
def make_auth_response() -> Any:
    """Factory for successful InitiateAuth responses."""
    return auth_success_response


@pytest.fixture
def write_raw() -> Any:
    """Write an already-encoded value straight into an in-memory store."""

    def _write(store: InMemoryKeyValueStore, key: str, raw: str) -> None:
        store._entries[store._full_key(key)] = (raw, None)

    return _write
