"""Cognito user pool login to temporary AWS credentials, with caching."""

from .authenticator import IdentityAuthenticator
from .cache import CredentialCache
from .exceptions import (
    AuthenticationError,
    CachedCredentialError,
    CognitoCredentialsError,
    ExchangeError,
    StoreError,
    UnsupportedChallengeError,
    ValidationError,
)
from .exchanger import CredentialExchanger
from .models import (
    AuthRequest,
    CachedFailure,
    CloudCredentials,
    CredentialType,
    IdentityAssertion,
    build_cache_key,
)
from .orchestrator import CredentialOrchestrator, create_orchestrator, run

__version__ = "0.1.0"

__all__ = [
    "AuthRequest",
    "AuthenticationError",
    "CachedCredentialError",
    "CachedFailure",
    "CloudCredentials",
    "CognitoCredentialsError",
    "CredentialCache",
    "CredentialExchanger",
    "CredentialOrchestrator",
    "CredentialType",
    "ExchangeError",
    "IdentityAssertion",
    "IdentityAuthenticator",
    "StoreError",
    "UnsupportedChallengeError",
    "ValidationError",
    "build_cache_key",
    "create_orchestrator",
    "run",
]
