"""Cognito User Pool authentication.

This module provides the IdentityAuthenticator class, which logs a user in
against a user pool app client with the SRP flow and returns the issued ID
and access tokens. The password never leaves the process: the user pool
sends a ``PASSWORD_VERIFIER`` challenge that is answered with an SRP proof.
Any other challenge (new password, MFA, custom) is not supported and fails
immediately with ``UnsupportedChallengeError``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aioboto3
import structlog
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pycognito.aws_srp import AWSSRP

from cognito_credentials_core.exceptions import (
    AuthenticationError,
    UnsupportedChallengeError,
)
from cognito_credentials_core.models import AuthRequest, IdentityAssertion

if TYPE_CHECKING:
    from collections.abc import Mapping

# Get logger for this module
logger = structlog.get_logger(__name__)

AUTH_FLOW = "USER_SRP_AUTH"
PASSWORD_VERIFIER = "PASSWORD_VERIFIER"

NEW_PASSWORD_MESSAGE = "Given user needs to set a new password"
MFA_MESSAGE = "MFA is not currently supported"
CUSTOM_CHALLENGE_MESSAGE = "Custom challenge is not currently supported"

MFA_CHALLENGES = frozenset(
    {"SMS_MFA", "SOFTWARE_TOKEN_MFA", "EMAIL_OTP", "SELECT_MFA_TYPE", "MFA_SETUP"}
)


@dataclass(frozen=True)
class AuthSuccess:
    """The user pool issued tokens."""

    assertion: IdentityAssertion


@dataclass(frozen=True)
class AuthStep:
    """The user pool asked for the SRP password proof."""

    challenge: str
    parameters: dict[str, str] = field(default_factory=dict)
    session: str | None = None


@dataclass(frozen=True)
class AuthFailure:
    """The user pool rejected the login or could not be reached."""

    reason: str
    code: str | None = None


@dataclass(frozen=True)
class AuthUnsupported:
    """The user pool answered with a challenge we do not handle."""

    challenge: str
    reason: str


AuthResult = AuthSuccess | AuthStep | AuthFailure | AuthUnsupported


def classify_response(response: Mapping[str, Any]) -> AuthResult:
    """Turn an ``InitiateAuth`` or ``RespondToAuthChallenge`` response into a result."""
    challenge = response.get("ChallengeName")
    if challenge:
        if challenge == PASSWORD_VERIFIER:
            return AuthStep(
                challenge,
                dict(response.get("ChallengeParameters") or {}),
                response.get("Session"),
            )
        if challenge == "NEW_PASSWORD_REQUIRED":
            return AuthUnsupported(challenge, NEW_PASSWORD_MESSAGE)
        if challenge in MFA_CHALLENGES:
            return AuthUnsupported(challenge, MFA_MESSAGE)
        if challenge == "CUSTOM_CHALLENGE":
            return AuthUnsupported(challenge, CUSTOM_CHALLENGE_MESSAGE)
        return AuthUnsupported(
            challenge, f"Challenge '{challenge}' is not currently supported"
        )

    result = response.get("AuthenticationResult") or {}
    id_token = result.get("IdToken")
    access_token = result.get("AccessToken")
    if not id_token or not access_token:
        return AuthFailure("Authentication result did not include tokens")

    return AuthSuccess(IdentityAssertion(id_token=id_token, access_token=access_token))


class IdentityAuthenticator:
    """Authenticates username/password pairs against a Cognito User Pool."""

    def __init__(
        self,
        session: aioboto3.Session | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize the authenticator.

        Args:
            session: aioboto3 session used to open clients. Defaults to a new session.
            endpoint_url: Optional custom cognito-idp endpoint for testing or local development.
                Defaults to COGNITO_CREDENTIALS_IDP_ENDPOINT_URL env var.
        """
        self.session = session or aioboto3.Session()
        self.endpoint_url = endpoint_url or os.getenv(
            "COGNITO_CREDENTIALS_IDP_ENDPOINT_URL"
        )

    async def initiate(self, request: AuthRequest) -> AuthResult:
        """Run the SRP login and classify the outcome without raising."""
        try:
            region = request.pool_region
        except ValueError as e:
            return AuthFailure(str(e), "InvalidUserPoolId")

        client_kwargs: dict[str, Any] = {
            "region_name": region,
            "config": Config(signature_version=UNSIGNED),
        }
        if self.endpoint_url:
            client_kwargs["endpoint_url"] = self.endpoint_url

        try:
            async with self.session.client("cognito-idp", **client_kwargs) as client:
                # SRP math only, the client is never called by AWSSRP
                srp = AWSSRP(
                    username=request.username,
                    password=request.password,
                    pool_id=request.user_pool_id,
                    client_id=request.client_id,
                    client=client,
                )
                auth_params = srp.get_auth_params()
                response = await client.initiate_auth(
                    AuthFlow=AUTH_FLOW,
                    ClientId=request.client_id,
                    AuthParameters=auth_params,
                )
                result = classify_response(response)
                if not isinstance(result, AuthStep):
                    return result

                challenge_kwargs: dict[str, Any] = {
                    "ClientId": request.client_id,
                    "ChallengeName": PASSWORD_VERIFIER,
                    "ChallengeResponses": srp.process_challenge(
                        result.parameters, auth_params
                    ),
                }
                if result.session:
                    challenge_kwargs["Session"] = result.session
                response = await client.respond_to_auth_challenge(**challenge_kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            return AuthFailure(error.get("Message") or str(e), error.get("Code"))
        except BotoCoreError as e:
            return AuthFailure(str(e), type(e).__name__)
        except (KeyError, ValueError) as e:
            return AuthFailure(f"Invalid password verifier challenge: {e}")

        result = classify_response(response)
        if isinstance(result, AuthStep):
            return AuthFailure("User pool repeated the password verifier challenge")
        return result

    async def authenticate(
        self, username: str, password: str, user_pool_id: str, client_id: str
    ) -> IdentityAssertion:
        """Log in and return the issued identity assertion.

        Args:
            username: User pool username.
            password: User password.
            user_pool_id: User pool id in ``<region>_<id>`` format.
            client_id: User pool app client id.

        Returns:
            The ID token and access token.

        Raises:
            AuthenticationError: If the login is rejected or the user pool fails.
            UnsupportedChallengeError: If the user pool requires a new password,
                MFA or a custom challenge.
        """
        request = AuthRequest(
            username=username,
            password=password,
            user_pool_id=user_pool_id,
            client_id=client_id,
        )
        result = await self.initiate(request)

        if isinstance(result, AuthSuccess):
            logger.debug("USER_POOL_AUTHENTICATED", user_pool_id=user_pool_id)
            return result.assertion

        if isinstance(result, AuthUnsupported):
            logger.error(
                "USER_POOL_CHALLENGE_UNSUPPORTED",
                user_pool_id=user_pool_id,
                challenge=result.challenge,
            )
            raise UnsupportedChallengeError(result.reason, result.challenge)

        logger.error(
            "USER_POOL_AUTHENTICATION_FAILED",
            user_pool_id=user_pool_id,
            error=result.reason,
            code=result.code,
        )
        raise AuthenticationError(result.reason, result.code)
