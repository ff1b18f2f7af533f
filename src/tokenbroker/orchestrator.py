"""
Credential acquisition orchestrator.

This module sequences the acquisition paths under a fixed precedence:

1. Cache lookup (a hit short-circuits everything else)
2. SSO delegate or primary fetch (exactly one, chosen by the settings)
3. Optional STS exchange
4. Cache insert

Any failing step ends the acquisition without a token and without a
cache write. Nothing is retried here.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .cache import TokenCache
from .exceptions import TokenBrokerError, TokenCacheError
from .fetcher import PrimaryFetcher
from .models import Settings, TaskSettings, Token
from .sso import SsoFetcher
from .sts import StsExchanger, encode_claims

logger = logging.getLogger(__name__)


class AcquisitionStatus(Enum):
    """How an acquisition ended."""

    HIT = "hit"
    FETCHED = "fetched"
    FAILED = "failed"


@dataclass(frozen=True)
class AcquisitionResult:
    """
    Outcome of a single acquisition.

    Attributes:
        status: HIT, FETCHED or FAILED
        token: Token for HIT and FETCHED, None for FAILED
        reason: Failure message (FAILED only)
        failed_step: Step that failed: "sso", "fetch", "sts" or "cache_insert"
    """

    status: AcquisitionStatus
    token: Optional[Token] = None
    reason: Optional[str] = None
    failed_step: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not AcquisitionStatus.FAILED

    @property
    def from_cache(self) -> bool:
        return self.status is AcquisitionStatus.HIT

    @classmethod
    def failed(cls, step: str, error: Exception) -> "AcquisitionResult":
        return cls(status=AcquisitionStatus.FAILED, reason=str(error), failed_step=step)


class CredentialOrchestrator:
    """
    Acquires tokens from the cache, the SSO delegate, or the primary fetcher.

    All collaborators are injected so the same cache handle is shared by
    every acquisition in the process.

    Example:
        orchestrator = CredentialOrchestrator(cache=FileTokenCache(path))
        result = orchestrator.acquire(Settings(credentials_json=key, scope=scope))
        if result.ok:
            use(result.token)
    """

    def __init__(
        self,
        cache: TokenCache,
        primary_fetcher: Optional[PrimaryFetcher] = None,
        sso_fetcher: Optional[SsoFetcher] = None,
        sts_exchanger: Optional[StsExchanger] = None,
        sso_cli: str = "sso",
    ):
        """
        Args:
            cache: Token cache shared across acquisitions
            primary_fetcher: OAuth2 fetcher (default PrimaryFetcher())
            sso_fetcher: SSO delegate (default SsoFetcher())
            sts_exchanger: STS exchanger (default StsExchanger())
            sso_cli: SSO command used when TaskSettings has no override
        """
        self.cache = cache
        self.primary_fetcher = primary_fetcher or PrimaryFetcher()
        self.sso_fetcher = sso_fetcher or SsoFetcher()
        self.sts_exchanger = sts_exchanger or StsExchanger()
        self.sso_cli = sso_cli

    def acquire(
        self, settings: Settings, task_settings: Optional[TaskSettings] = None
    ) -> AcquisitionResult:
        """
        Acquire a token for settings.

        Args:
            settings: Credential settings (also the cache key)
            task_settings: Optional per-invocation options (SSO command override)

        Returns:
            AcquisitionResult; its token is None unless the status is HIT or FETCHED
        """
        cached = self._lookup(settings)
        if cached is not None:
            logger.info("Using cached token")
            return AcquisitionResult(status=AcquisitionStatus.HIT, token=cached)

        step = "sso" if settings.uses_sso else "fetch"
        try:
            if step == "sso":
                sso_cli = (task_settings and task_settings.sso_cli) or self.sso_cli
                token = self.sso_fetcher.fetch(sso_cli, settings.email, settings.scope)
            else:
                token = self.primary_fetcher.fetch(settings)
        except TokenBrokerError as e:
            logger.debug(f"Token acquisition failed: {e}")
            return AcquisitionResult.failed(step, e)

        if settings.sts:
            try:
                token = self.sts_exchanger.exchange(
                    token.access_token, encode_claims(settings)
                )
            except TokenBrokerError as e:
                logger.debug(f"STS exchange failed, discarding token: {e}")
                return AcquisitionResult.failed("sts", e)

        try:
            self.cache.insert(settings, token)
        except TokenCacheError as e:
            # An uncacheable token is never handed back
            logger.debug(f"Could not cache token, discarding it: {e}")
            return AcquisitionResult.failed("cache_insert", e)

        return AcquisitionResult(status=AcquisitionStatus.FETCHED, token=token)

    def fetch_token(
        self, settings: Settings, task_settings: Optional[TaskSettings] = None
    ) -> Optional[Token]:
        """
        Acquire a token, returning None on any failure.

        Returns:
            Token, or None if acquisition failed (the failure is already logged)
        """
        return self.acquire(settings, task_settings).token

    def reset(self) -> None:
        """
        Clear every cached token.

        Raises:
            TokenCacheError: If the cache cannot be cleared
        """
        self.cache.clear()
        logger.info("Token cache reset")

    def _lookup(self, settings: Settings) -> Optional[Token]:
        """Cache lookup where an unavailable cache counts as a miss."""
        try:
            return self.cache.lookup(settings)
        except TokenCacheError as e:
            logger.warning(f"Token cache unavailable, fetching a new token: {e}")
            return None
