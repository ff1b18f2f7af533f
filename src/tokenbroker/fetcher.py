"""
Primary OAuth2 token fetcher.

Obtains access tokens from explicit credentials using google-auth:
- Service account keys, via the OAuth2 JWT bearer grant (or a self-signed
  JWT access token when an audience is requested)
- Authorized user credentials, via the refresh token grant
"""

import json
import logging
from datetime import timezone
from typing import Any

from google.auth import exceptions as google_auth_exceptions
from google.auth import jwt
from google.auth.transport.requests import Request
from google.oauth2 import credentials as user_credentials
from google.oauth2 import service_account

from .exceptions import CredentialsError, TokenFetchError
from .models import Settings, Token

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT = "service_account"
AUTHORIZED_USER = "authorized_user"


class PrimaryFetcher:
    """
    Fetches tokens for explicit service account or user credentials.

    Example:
        fetcher = PrimaryFetcher()
        token = fetcher.fetch(Settings(credentials_json=key_json, scope=scope))
    """

    def fetch(self, settings: Settings) -> Token:
        """
        Fetch an access token for the credentials in settings.

        Args:
            settings: Settings carrying credentials_json and scope

        Returns:
            Freshly fetched Token

        Raises:
            CredentialsError: If no credentials are configured or they are invalid
            TokenFetchError: If the token endpoint rejects the request
        """
        info = self._parse_credentials(settings)
        credentials = self._build_credentials(info, settings)

        logger.info(f"Fetching access token for {info['type']} credentials")
        try:
            credentials.refresh(Request())
        except google_auth_exceptions.GoogleAuthError as e:
            logger.debug(f"Token fetch failed: {e}")
            raise TokenFetchError(f"Token fetch failed: {e}") from e

        return self._to_token(credentials, settings)

    def _parse_credentials(self, settings: Settings) -> dict[str, Any]:
        if not settings.credentials_json:
            raise CredentialsError(
                "No credentials configured. Provide a credentials file or an SSO email."
            )

        try:
            info = json.loads(settings.credentials_json)
        except ValueError as e:
            raise CredentialsError(f"Credentials are not valid JSON: {e}") from e

        if not isinstance(info, dict) or not info.get("type"):
            raise CredentialsError("Credentials JSON is missing the 'type' field")
        return info

    def _build_credentials(self, info: dict[str, Any], settings: Settings):
        cred_type = info["type"]
        try:
            if cred_type == SERVICE_ACCOUNT:
                if settings.audience:
                    return jwt.Credentials.from_service_account_info(
                        info, audience=settings.audience
                    )
                return service_account.Credentials.from_service_account_info(
                    info, scopes=settings.scopes
                )
            if cred_type == AUTHORIZED_USER:
                return user_credentials.Credentials.from_authorized_user_info(
                    info, scopes=settings.scopes or None
                )
        except (ValueError, KeyError) as e:
            raise CredentialsError(f"Invalid {cred_type} credentials: {e}") from e

        raise CredentialsError(
            f"Unsupported credential type: '{cred_type}' "
            f"(supported: '{SERVICE_ACCOUNT}', '{AUTHORIZED_USER}')"
        )

    def _to_token(self, credentials, settings: Settings) -> Token:
        access_token = credentials.token
        if isinstance(access_token, bytes):
            access_token = access_token.decode()
        if not access_token:
            raise TokenFetchError("Token endpoint returned no access token")

        expiry = credentials.expiry
        if expiry is not None and expiry.tzinfo is None:
            # google-auth reports naive UTC datetimes
            expiry = expiry.replace(tzinfo=timezone.utc)

        raw: dict[str, Any] = {"access_token": access_token, "token_type": "Bearer"}
        if expiry is not None:
            raw["expiry"] = expiry.isoformat()
        if settings.scope:
            raw["scope"] = " ".join(settings.scopes)

        return Token(access_token=access_token, token_type="Bearer", raw=raw, expiry=expiry)
