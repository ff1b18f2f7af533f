"""
Exception classes for the token broker.

This module defines the exception hierarchy for every failure the broker
can report, from configuration problems to failed acquisition steps.
"""


class TokenBrokerError(Exception):
    """Base exception for all token broker errors."""

    pass


class ConfigurationError(TokenBrokerError):
    """Broker configuration error (invalid settings or output format)."""

    pass


class CredentialsError(TokenBrokerError):
    """Credentials are missing, malformed, or of an unsupported type."""

    pass


class TokenFetchError(TokenBrokerError):
    """Primary OAuth2 token fetch failed."""

    pass


class SsoError(TokenBrokerError):
    """SSO delegate command failed to produce a token."""

    pass


class StsExchangeError(TokenBrokerError):
    """Security Token Service exchange failed."""

    pass


class TokenCacheError(TokenBrokerError):
    """Token cache operation failed (file I/O or corrupt cache)."""

    pass


class TokenValidationError(TokenBrokerError):
    """Token info endpoint rejected the token or could not be reached."""

    pass
