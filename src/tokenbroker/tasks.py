"""
Task functions behind the command-line interface.

Each task performs one command end to end and returns the process exit
code, so the CLI layer only parses options and exits.
"""

import logging

import click

from .curl import curl_command, split_command
from .exceptions import ConfigurationError, TokenCacheError, TokenValidationError
from .formatter import OutputFormat, build_header, parse_format, print_token
from .models import Settings, TaskSettings
from .orchestrator import CredentialOrchestrator
from .validator import TokenValidator

logger = logging.getLogger(__name__)


def print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def fetch(
    orchestrator: CredentialOrchestrator,
    settings: Settings,
    task_settings: TaskSettings,
) -> int:
    """
    Acquire a token and print it in task_settings.format.

    Returns:
        0 if a token was printed, 1 if acquisition failed

    Raises:
        ConfigurationError: If the output format is not supported
    """
    parse_format(task_settings.format)

    result = orchestrator.acquire(settings, task_settings)
    if not result.ok:
        print_error(result.reason or "Could not obtain token")
        return 1

    print_token(result.token, task_settings.format, settings.credential_type())
    return 0


def header(
    orchestrator: CredentialOrchestrator,
    settings: Settings,
    task_settings: TaskSettings,
) -> int:
    """Acquire a token and print it as an Authorization header."""
    task_settings.format = OutputFormat.HEADER.value
    return fetch(orchestrator, settings, task_settings)


def curl(
    orchestrator: CredentialOrchestrator,
    settings: Settings,
    task_settings: TaskSettings,
) -> int:
    """
    Acquire a token and call task_settings.url with it using the HTTP client.

    Returns:
        The HTTP client's exit code, or 1 if no token could be acquired
    """
    curl_cli = task_settings.curl_cli or "curl"
    try:
        split_command(curl_cli)
    except ConfigurationError as e:
        print_error(str(e))
        return 1

    result = orchestrator.acquire(settings, task_settings)
    if not result.ok:
        print_error(result.reason or "Could not obtain token")
        return 1

    token = result.token
    auth_header = build_header(token.token_type, token.access_token)
    return curl_command(
        curl_cli,
        auth_header,
        task_settings.url,
        *task_settings.extra_args,
    )


def info(validator: TokenValidator, token: str) -> int:
    """Print what the token info endpoint reports for token (or its error body)."""
    try:
        click.echo(validator.info(token))
    except TokenValidationError as e:
        click.echo(str(e), nl=False)
    return 0


def test(validator: TokenValidator, token: str) -> int:
    """Print and return 0 for a valid token, 1 otherwise."""
    code = 0 if validator.test(token) else 1
    click.echo(code)
    return code


def reset(orchestrator: CredentialOrchestrator) -> int:
    """Clear the token cache."""
    try:
        orchestrator.reset()
    except TokenCacheError as e:
        print_error(str(e))
        return 1
    return 0
