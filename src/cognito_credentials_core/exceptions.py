"""Standardized exceptions for the cognito credentials core module.

This module provides the exception types raised across the credential
lifecycle: input validation, user pool authentication, identity pool
exchange, cached failures and key-value store access.
"""


class CognitoCredentialsError(Exception):
    """Base exception for all cognito credentials errors."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        """Initialize the error with a message and optional error code.

        Args:
            message: Human-readable error message.
            error_code: Optional error code for programmatic handling.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ValidationError(CognitoCredentialsError):
    """Raised when a required input is missing or invalid."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Error message describing the validation failure.
            field: Optional name of the input that failed validation.
        """
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class UnsupportedChallengeError(CognitoCredentialsError):
    """Raised when the user pool answers with a challenge we do not handle.

    New password, MFA and custom challenges are terminal and never cached.
    """

    def __init__(self, message: str, challenge: str | None = None) -> None:
        """Initialize unsupported challenge error.

        Args:
            message: Error message naming the unsupported flow.
            challenge: Optional challenge name returned by the user pool.
        """
        super().__init__(message, "UNSUPPORTED_CHALLENGE")
        self.challenge = challenge


class AuthenticationError(CognitoCredentialsError):
    """Raised when the user pool rejects the login or fails."""

    def __init__(self, message: str, provider_code: str | None = None) -> None:
        """Initialize authentication error.

        Args:
            message: Error message reported by the identity provider.
            provider_code: Optional provider error code (e.g. NotAuthorizedException).
        """
        super().__init__(message, "AUTHENTICATION_ERROR")
        self.provider_code = provider_code


class ExchangeError(CognitoCredentialsError):
    """Raised when the identity pool credential exchange fails."""

    def __init__(self, message: str, provider_code: str | None = None) -> None:
        """Initialize exchange error.

        Args:
            message: Error message describing the exchange failure.
            provider_code: Optional provider error code.
        """
        super().__init__(message, "EXCHANGE_ERROR")
        self.provider_code = provider_code


class CachedCredentialError(CognitoCredentialsError):
    """Raised when a previously cached failure is replayed from the store."""

    def __init__(self, message: str, cache_key: str | None = None) -> None:
        """Initialize cached credential error.

        Args:
            message: The failure message that was cached.
            cache_key: Optional cache key the failure was stored under.
        """
        super().__init__(message, "CACHED_ERROR")
        self.cache_key = cache_key


class StoreError(CognitoCredentialsError):
    """Raised when the key-value store cannot be read or written."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        """Initialize store error.

        Args:
            message: Error message describing the store failure.
            operation: Optional store operation that failed (get, put, delete).
        """
        super().__init__(message, "STORE_ERROR")
        self.operation = operation
