"""
Data types shared by every acquisition path.

Settings describe which token is wanted, TaskSettings describe how a
command presents or uses it, and Token is what every path produces.
"""

import hashlib
import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass(frozen=True)
class Settings:
    """
    Per-request credential configuration.

    Attributes:
        credentials_json: Raw service account or authorized user JSON text
        email: Identity for the SSO delegate (used when no credentials are given)
        scope: Space-separated OAuth scopes
        audience: JWT audience; produces a self-signed JWT for service accounts
        quota_project: Quota project forwarded in STS claims
        sts: Whether the fetched token must be exchanged through STS
    """

    credentials_json: str = ""
    email: str = ""
    scope: str = ""
    audience: str = ""
    quota_project: str = ""
    sts: bool = False

    @property
    def scopes(self) -> list[str]:
        """Scopes as a list (accepts spaces or commas as separators)."""
        return [s for s in re.split(r"[\s,]+", self.scope) if s]

    @property
    def uses_sso(self) -> bool:
        """True when the SSO delegate, not the primary fetcher, must be used."""
        return not self.credentials_json and bool(self.email)

    def cache_key(self) -> str:
        """
        Derive the cache key for these settings.

        Returns:
            Hex digest that is equal for equal credential identity and scope
        """
        identity = {
            "credentials_json": self.credentials_json,
            "email": self.email,
            "scope": self.scope,
            "audience": self.audience,
            "sts": self.sts,
        }
        canonical = json.dumps(identity, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()

    def credential_type(self) -> str:
        """
        Credential type declared by the credentials JSON.

        Returns:
            Value of the "type" field, or "" if unavailable
        """
        if not self.credentials_json:
            return ""
        try:
            data = json.loads(self.credentials_json)
        except ValueError:
            return ""
        if not isinstance(data, dict):
            return ""
        return str(data.get("type", ""))


@dataclass
class TaskSettings:
    """
    Per-invocation presentation and execution options. Never cached.

    Attributes:
        format: Output format name for fetch tasks
        sso_cli: SSO delegate command override
        curl_cli: HTTP client command override for the curl task
        url: Target URL for the curl task
        extra_args: Extra arguments passed through to the HTTP client
    """

    format: str = "bare"
    sso_cli: Optional[str] = None
    curl_cli: Optional[str] = None
    url: str = ""
    extra_args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Token:
    """
    Access token produced by an acquisition path.

    Attributes:
        access_token: The token string
        token_type: Token type (typically "Bearer")
        raw: Provider response, preserved verbatim for JSON output
        expiry: When the token expires (timezone-aware UTC), if known
    """

    access_token: str
    token_type: str = "Bearer"
    raw: dict[str, Any] = field(default_factory=dict)
    expiry: Optional[datetime] = None

    @property
    def is_expired(self) -> bool:
        """True if the token has a known expiry in the past."""
        if self.expiry is None:
            return False
        return datetime.now(timezone.utc) >= self.expiry

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "raw": self.raw,
            "expiry": self.expiry.isoformat() if self.expiry else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        """
        Create Token from dictionary.

        Raises:
            KeyError: If access_token is missing
            ValueError: If access_token is empty or expiry is not an ISO timestamp
        """
        access_token = data["access_token"]
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("access_token must be a non-empty string")

        expiry = data.get("expiry")
        expires_at = None
        if expiry:
            expires_at = datetime.fromisoformat(expiry)
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
        return cls(
            access_token=access_token,
            token_type=data.get("token_type") or "Bearer",
            raw=data.get("raw") or {},
            expiry=expires_at,
        )
