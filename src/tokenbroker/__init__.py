"""
OAuth2 token broker.

Obtains access tokens from service account or user credentials, or from an
SSO delegate for human identities, optionally exchanges them through the
Security Token Service, caches them, and renders them for the command line.
Tokens can also be validated against the token info endpoint.

Public API:
    Settings: Credential configuration (also the cache key)
    TaskSettings: Per-command presentation options
    Token: Acquired access token
    CredentialOrchestrator: Cache / SSO / fetch / STS sequencing
    AcquisitionResult: Outcome of an acquisition
    TokenCache, FileTokenCache, MemoryTokenCache: Token caches
    TokenValidator: Token info lookups
    BrokerConfig: Endpoints, commands and cache location

Exceptions:
    TokenBrokerError: Base exception
    ConfigurationError: Invalid configuration or output format
    CredentialsError: Missing or invalid credentials
    TokenFetchError: Primary fetch failed
    SsoError: SSO delegate failed
    StsExchangeError: STS exchange failed
    TokenCacheError: Cache operation failed
    TokenValidationError: Token rejected by the token info endpoint
"""

from .cache import FileTokenCache, MemoryTokenCache, TokenCache
from .config import BrokerConfig
from .exceptions import (
    ConfigurationError,
    CredentialsError,
    SsoError,
    StsExchangeError,
    TokenBrokerError,
    TokenCacheError,
    TokenFetchError,
    TokenValidationError,
)
from .fetcher import PrimaryFetcher
from .formatter import OutputFormat, build_header, render_token
from .models import Settings, TaskSettings, Token
from .orchestrator import AcquisitionResult, AcquisitionStatus, CredentialOrchestrator
from .sso import SsoFetcher
from .sts import StsExchanger, encode_claims
from .validator import TokenValidator

__all__ = [
    # Configuration
    "BrokerConfig",
    # Data model
    "Settings",
    "TaskSettings",
    "Token",
    # Cache
    "TokenCache",
    "FileTokenCache",
    "MemoryTokenCache",
    # Acquisition paths
    "PrimaryFetcher",
    "SsoFetcher",
    "StsExchanger",
    "encode_claims",
    # Orchestrator
    "CredentialOrchestrator",
    "AcquisitionResult",
    "AcquisitionStatus",
    # Output and validation
    "OutputFormat",
    "build_header",
    "render_token",
    "TokenValidator",
    # Exceptions
    "TokenBrokerError",
    "ConfigurationError",
    "CredentialsError",
    "TokenFetchError",
    "SsoError",
    "StsExchangeError",
    "TokenCacheError",
    "TokenValidationError",
]
