"""
Run an external HTTP client with an Authorization header.
"""

import logging
import shlex
import subprocess

import click

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def split_command(command: str) -> list[str]:
    """
    Split a command line into arguments.

    Raises:
        ConfigurationError: If the command has no program to run
    """
    args = shlex.split(command)
    if not args:
        raise ConfigurationError("HTTP client command cannot be empty")
    return args


def curl_command(curl_cli: str, header: str, url: str, *extra_args: str) -> int:
    """
    Invoke ``<curl_cli> -H <header> <url> <extra_args...>`` and echo its output.

    The client's output is passed through as bytes, so binary responses are
    written unchanged.

    Args:
        curl_cli: HTTP client command (may include arguments)
        header: Complete header line, e.g. "Authorization: Bearer abc"
        url: Request URL
        extra_args: Additional arguments passed through unchanged

    Returns:
        The client's exit code (127 if it could not be found)

    Raises:
        ConfigurationError: If curl_cli is empty
    """
    client = split_command(curl_cli)
    command = client + ["-H", header, url, *extra_args]
    logger.debug(f"Executing {client[0]} for {url}")
    try:
        result = subprocess.run(command, capture_output=True)
    except FileNotFoundError as e:
        click.echo(f"Command not found: {e}", err=True)
        return 127

    if result.stdout:
        click.echo(result.stdout, nl=False)
    if result.stderr:
        click.echo(result.stderr, err=True, nl=False)
    return result.returncode
