"""
Security Token Service exchange.

Exchanges an access token, together with encoded claims, for a new
(possibly scoped-down) access token using the OAuth 2.0 token exchange
grant (RFC 8693).
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

import requests

from .config import DEFAULT_STS_ENDPOINT
from .exceptions import StsExchangeError
from .models import Settings, Token

logger = logging.getLogger(__name__)

GRANT_TYPE_TOKEN_EXCHANGE = "urn:ietf:params:oauth:grant-type:token-exchange"
TOKEN_TYPE_ACCESS_TOKEN = "urn:ietf:params:oauth:token-type:access_token"


def encode_claims(settings: Settings) -> str:
    """
    Encode the claims forwarded to STS for settings.

    Only non-empty claims among audience, scope and quota_project are
    included.

    Returns:
        URL-encoded compact JSON object (e.g. "%7B%22scope%22%3A%22a%22%7D")
    """
    claims = {
        "audience": settings.audience,
        "quota_project": settings.quota_project,
        "scope": " ".join(settings.scopes),
    }
    claims = {key: value for key, value in claims.items() if value}
    return quote(json.dumps(claims, sort_keys=True, separators=(",", ":")), safe="")


class StsExchanger:
    """Performs a single token exchange against the STS endpoint."""

    def __init__(self, endpoint: str = DEFAULT_STS_ENDPOINT, timeout: int = 30):
        self.endpoint = endpoint
        self.timeout = timeout

    def exchange(self, access_token: str, encoded_claims: str) -> Token:
        """
        Exchange access_token for a new token.

        Never retried: each acquisition calls this at most once.

        Args:
            access_token: Token obtained from SSO or the primary fetcher
            encoded_claims: Output of encode_claims()

        Returns:
            Exchanged Token

        Raises:
            StsExchangeError: If the exchange fails
        """
        logger.info("Exchanging access token via STS")
        try:
            response = requests.post(
                self.endpoint,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data={
                    "grant_type": GRANT_TYPE_TOKEN_EXCHANGE,
                    "subject_token_type": TOKEN_TYPE_ACCESS_TOKEN,
                    "requested_token_type": TOKEN_TYPE_ACCESS_TOKEN,
                    "subject_token": access_token,
                    "options": encoded_claims,
                },
                timeout=self.timeout,
            )

            if response.status_code != 200:
                logger.debug(
                    f"STS exchange failed: {response.status_code} - {response.text}"
                )
                raise StsExchangeError(
                    f"STS exchange failed with status {response.status_code}: "
                    f"{response.text}"
                )

            data = response.json()
            if not isinstance(data, dict):
                raise StsExchangeError(
                    "Invalid response from STS endpoint: expected a JSON object"
                )
            access_token = data.get("access_token")
            if not isinstance(access_token, str) or not access_token:
                raise StsExchangeError(
                    "Invalid response from STS endpoint: no access_token"
                )

            expiry = None
            if data.get("expires_in"):
                expiry = datetime.now(timezone.utc) + timedelta(
                    seconds=int(data["expires_in"])
                )

            token = Token(
                access_token=access_token,
                token_type=data.get("token_type") or "Bearer",
                raw=data,
                expiry=expiry,
            )
            logger.info("STS exchange succeeded")
            return token

        except requests.RequestException as e:
            logger.debug(f"Network error during STS exchange: {e}")
            raise StsExchangeError(f"Network error during STS exchange: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Invalid response from STS endpoint: {e}")
            raise StsExchangeError(f"Invalid response from STS endpoint: {e}") from e
