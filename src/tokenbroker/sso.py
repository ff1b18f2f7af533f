"""
SSO delegate: obtain tokens for human identities via an external command.

The command is invoked as ``<sso_cli> <email> <scope>`` and must print the
access token on stdout.
"""

import logging
import shlex
import subprocess

from .exceptions import SsoError
from .models import Token

logger = logging.getLogger(__name__)


class SsoFetcher:
    """Runs the SSO delegate command and wraps its output in a Token."""

    def __init__(self, timeout: int = 120):
        """
        Args:
            timeout: Seconds to wait for the delegate (it may be interactive)
        """
        self.timeout = timeout

    def fetch(self, sso_cli: str, email: str, scope: str) -> Token:
        """
        Obtain a token for email by running the SSO command.

        Args:
            sso_cli: SSO delegate command (may include arguments)
            email: Identity to authenticate as
            scope: Space-separated scopes

        Returns:
            Token carrying the delegate's output

        Raises:
            SsoError: If the command cannot be run, fails or prints nothing
        """
        args = shlex.split(sso_cli)
        if not args:
            raise SsoError("SSO command cannot be empty")
        command = args + [email, scope]
        logger.info(f"Running SSO command for {email}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise SsoError(f"SSO command not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise SsoError(f"SSO command timed out after {self.timeout}s") from e
        except UnicodeDecodeError as e:
            raise SsoError(f"SSO command printed non-text output: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise SsoError(
                f"SSO command exited with code {result.returncode}"
                + (f": {stderr}" if stderr else "")
            )

        access_token = result.stdout.strip()
        if not access_token:
            raise SsoError("SSO command returned empty output")

        logger.info("SSO token obtained successfully")
        return Token(
            access_token=access_token,
            token_type="Bearer",
            raw={"access_token": access_token, "token_type": "Bearer"},
        )
