"""
Output formatting for acquired tokens.
"""

import json
from enum import Enum
from typing import Optional

import click

from .exceptions import ConfigurationError
from .models import Token


class OutputFormat(Enum):
    """Supported output formats."""

    BARE = "bare"
    HEADER = "header"
    JSON = "json"
    JSON_COMPACT = "json_compact"
    PRETTY = "pretty"


FORMAT_CHOICES = [f.value for f in OutputFormat]


def parse_format(name: str) -> OutputFormat:
    """
    Resolve a format name.

    Raises:
        ConfigurationError: If name is not one of the supported formats
    """
    try:
        return OutputFormat(name)
    except ValueError:
        choices = ", ".join(f"'{choice}'" for choice in FORMAT_CHOICES)
        raise ConfigurationError(
            f"Invalid choice: '{name}' (choose from {choices})"
        ) from None


def build_header(token_type: str, access_token: str) -> str:
    """Return the token as an HTTP Authorization header line."""
    return f"Authorization: {token_type} {access_token}"


def render_token(
    token: Optional[Token], output_format: str, credential_type: str = ""
) -> Optional[str]:
    """
    Render token in the requested format.

    The format is validated even when there is no token to render.

    Args:
        token: Token to render (None renders nothing)
        output_format: One of FORMAT_CHOICES
        credential_type: Credential type shown by the pretty format

    Returns:
        Rendered text, or None if token is None

    Raises:
        ConfigurationError: If output_format is not supported
    """
    fmt = parse_format(output_format)
    if token is None:
        return None

    if fmt is OutputFormat.BARE:
        return token.access_token
    if fmt is OutputFormat.HEADER:
        return build_header(token.token_type, token.access_token)
    if fmt is OutputFormat.JSON:
        return json.dumps(token.raw, indent=2)
    if fmt is OutputFormat.JSON_COMPACT:
        return json.dumps(token.raw, separators=(",", ":"))
    return (
        f"Fetched credentials of type:\n  {credential_type}\n"
        f"Access Token:\n  {token.access_token}"
    )


def print_token(
    token: Optional[Token], output_format: str, credential_type: str = ""
) -> None:
    """Render token and print it. Prints nothing for a missing token."""
    text = render_token(token, output_format, credential_type)
    if text is not None:
        click.echo(text)
