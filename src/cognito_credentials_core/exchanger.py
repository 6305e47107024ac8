"""Cognito Identity Pool credential exchange.

This module provides the CredentialExchanger class, which trades a user pool
ID token for temporary AWS credentials scoped by an identity pool.
"""

import os
from datetime import UTC, datetime
from typing import Any

import aioboto3
import structlog
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from cognito_credentials_core.exceptions import ExchangeError
from cognito_credentials_core.models import CloudCredentials, IdentityAssertion

# Get logger for this module
logger = structlog.get_logger(__name__)


def provider_login_key(region: str, user_pool_id: str) -> str:
    """Return the identity pool login key for a user pool."""
    return f"cognito-idp.{region}.amazonaws.com/{user_pool_id}"


def _as_utc(value: object) -> datetime:
    """Normalize the ``Expiration`` value returned by the identity pool."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=UTC)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise ExchangeError(f"Unexpected credential expiration: {value!r}")  # noqa: TRY003


class CredentialExchanger:
    """Exchanges identity assertions for temporary AWS credentials."""

    def __init__(
        self,
        session: aioboto3.Session | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize the exchanger.

        Args:
            session: aioboto3 session used to open clients. Defaults to a new session.
            endpoint_url: Optional custom cognito-identity endpoint for testing or local development.
                Defaults to COGNITO_CREDENTIALS_IDENTITY_ENDPOINT_URL env var.
        """
        self.session = session or aioboto3.Session()
        self.endpoint_url = endpoint_url or os.getenv(
            "COGNITO_CREDENTIALS_IDENTITY_ENDPOINT_URL"
        )

    async def exchange(
        self,
        assertion: IdentityAssertion,
        user_pool_id: str,
        identity_pool_id: str,
        region: str,
    ) -> CloudCredentials:
        """Exchange an identity assertion for temporary AWS credentials.

        The region only configures the client opened for this call.

        Args:
            assertion: Tokens issued by the user pool.
            user_pool_id: User pool the tokens were issued by.
            identity_pool_id: Identity pool to request credentials from.
            region: Region of the identity pool.

        Returns:
            Temporary credentials with an absolute expiry.

        Raises:
            ExchangeError: If the identity pool call fails or returns unusable credentials.
        """
        logins = {provider_login_key(region, user_pool_id): assertion.id_token}

        client_kwargs: dict[str, Any] = {
            "region_name": region,
            "config": Config(signature_version=UNSIGNED),
        }
        if self.endpoint_url:
            client_kwargs["endpoint_url"] = self.endpoint_url

        logger.info(
            "IDENTITY_POOL_EXCHANGE_STARTING",
            identity_pool_id=identity_pool_id,
            region=region,
        )

        try:
            async with self.session.client("cognito-identity", **client_kwargs) as client:
                identity = await client.get_id(
                    IdentityPoolId=identity_pool_id, Logins=logins
                )
                response = await client.get_credentials_for_identity(
                    IdentityId=identity["IdentityId"], Logins=logins
                )
        except ClientError as e:
            error = e.response.get("Error", {})
            logger.exception(
                "IDENTITY_POOL_EXCHANGE_FAILED",
                identity_pool_id=identity_pool_id,
                code=error.get("Code"),
            )
            raise ExchangeError(
                error.get("Message") or str(e), error.get("Code")
            ) from e
        except BotoCoreError as e:
            logger.exception(
                "IDENTITY_POOL_EXCHANGE_FAILED", identity_pool_id=identity_pool_id
            )
            raise ExchangeError(str(e), type(e).__name__) from e
        except KeyError as e:
            raise ExchangeError(f"Identity pool response missing {e}") from e  # noqa: TRY003

        credentials = self._parse_credentials(response)
        logger.info(
            "IDENTITY_POOL_EXCHANGE_COMPLETED",
            identity_pool_id=identity_pool_id,
            expire_time=credentials.expire_time.isoformat(),
        )
        return credentials

    @staticmethod
    def _parse_credentials(response: dict[str, Any]) -> CloudCredentials:
        """Build credentials from a ``GetCredentialsForIdentity`` response."""
        creds = response.get("Credentials") or {}
        missing = [
            name
            for name in ("AccessKeyId", "SecretKey", "SessionToken", "Expiration")
            if not creds.get(name)
        ]
        if missing:
            raise ExchangeError(  # noqa: TRY003
                f"Identity pool response missing {', '.join(missing)}"
            )

        try:
            expire_time = _as_utc(creds["Expiration"])
        except (ValueError, OverflowError, OSError) as e:
            raise ExchangeError(  # noqa: TRY003
                f"Unexpected credential expiration: {creds['Expiration']!r}"
            ) from e

        credentials = CloudCredentials(
            access_key_id=creds["AccessKeyId"],
            secret_access_key=creds["SecretKey"],
            session_token=creds["SessionToken"],
            expire_time=expire_time,
        )
        if not credentials.is_valid():
            raise ExchangeError("Identity pool returned expired credentials")  # noqa: TRY003
        return credentials
