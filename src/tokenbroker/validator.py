"""
Remote token validation against the token info endpoint.
"""

import logging

import requests

from .config import DEFAULT_TOKEN_INFO_URL
from .exceptions import TokenValidationError

logger = logging.getLogger(__name__)


class TokenValidator:
    """
    Checks tokens with the token info endpoint.

    Example:
        validator = TokenValidator()
        if validator.test(token):
            print(validator.info(token))
    """

    def __init__(self, token_info_url: str = DEFAULT_TOKEN_INFO_URL, timeout: int = 30):
        self.token_info_url = token_info_url
        self.timeout = timeout

    def info(self, token: str) -> str:
        """
        Fetch the information the endpoint reports for token.

        Args:
            token: Access token to inspect

        Returns:
            Response body of a 200 response

        Raises:
            TokenValidationError: Carrying the response body verbatim for any
                non-200 status, or the network error
        """
        try:
            response = requests.get(
                self.token_info_url,
                params={"access_token": token},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.debug(f"Network error during token info request: {e}")
            raise TokenValidationError(f"Network error during token info request: {e}") from e

        if response.status_code != 200:
            logger.debug(f"Token info returned {response.status_code}")
            raise TokenValidationError(response.text)

        return response.text

    def test(self, token: str) -> bool:
        """Return True if the endpoint accepts token."""
        try:
            self.info(token)
        except TokenValidationError:
            return False
        return True
