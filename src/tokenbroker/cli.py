"""
Click CLI for the token broker.

Commands:
    fetch   Print a token in the selected format
    header  Print a token as an Authorization header
    curl    Call a URL with curl using a fetched token
    info    Print the token info reported for a token
    test    Exit 0 if a token is valid, 1 otherwise
    reset   Clear the token cache
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from . import tasks
from .cache import FileTokenCache
from .config import BrokerConfig
from .exceptions import ConfigurationError
from .fetcher import PrimaryFetcher
from .models import Settings, TaskSettings
from .orchestrator import CredentialOrchestrator
from .sso import SsoFetcher
from .sts import StsExchanger
from .tasks import print_error
from .validator import TokenValidator

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Context object passed to all CLI commands.

    Attributes:
        config: Broker configuration
        verbose: Verbose output enabled
    """
    config: BrokerConfig
    verbose: bool

    def build_orchestrator(self) -> CredentialOrchestrator:
        """Create the orchestrator with a file cache shared by this process."""
        return CredentialOrchestrator(
            cache=FileTokenCache(self.config.cache_file),
            primary_fetcher=PrimaryFetcher(),
            sso_fetcher=SsoFetcher(),
            sts_exchanger=StsExchanger(
                self.config.sts_endpoint, timeout=self.config.http_timeout
            ),
            sso_cli=self.config.sso_cli,
        )

    def build_validator(self) -> TokenValidator:
        return TokenValidator(self.config.token_info_url, timeout=self.config.http_timeout)


def get_cli_context(ctx: click.Context) -> CLIContext:
    """Get the CLIContext from the click context."""
    return ctx.obj


def credential_options(func):
    """Options shared by every command that acquires a token."""
    options = [
        click.option(
            "--credentials",
            type=click.Path(exists=True, dir_okay=False),
            envvar="TOKENBROKER_CREDENTIALS",
            help="Service account or authorized user JSON file",
        ),
        click.option("--email", default="", help="Identity for SSO (used without --credentials)"),
        click.option("--scope", multiple=True, help="OAuth scope (repeatable)"),
        click.option("--audience", default="", help="JWT audience for service accounts"),
        click.option("--quota-project", default="", help="Quota project for STS claims"),
        click.option("--sts", is_flag=True, help="Exchange the token via STS"),
        click.option("--ssocli", default=None, help="SSO command override"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_settings(
    credentials: Optional[str],
    email: str,
    scope: tuple[str, ...],
    audience: str,
    quota_project: str,
    sts: bool,
) -> Settings:
    """Build Settings from command options, reading the credentials file."""
    credentials_json = ""
    if credentials:
        try:
            credentials_json = Path(credentials).read_text()
        except OSError as e:
            print_error(f"Could not read credentials file: {e}")
            sys.exit(1)

    return Settings(
        credentials_json=credentials_json,
        email=email,
        scope=" ".join(scope),
        audience=audience,
        quota_project=quota_project,
        sts=sts,
    )


@click.group()
@click.option(
    "--config-file",
    type=click.Path(exists=True, dir_okay=False),
    envvar="TOKENBROKER_CONFIG",
    help="Path to configuration file (default: ~/.tokenbroker/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool) -> None:
    """
    Token broker - fetch, inspect and cache OAuth2 access tokens.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
    )

    try:
        config = BrokerConfig.load_from_file(Path(config_file) if config_file else None)
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(1)

    ctx.obj = CLIContext(config=config, verbose=verbose)


@cli.command()
@credential_options
@click.option("--format", "output_format", default="bare",
              help="Output format: bare, header, json, json_compact, pretty")
@click.pass_context
def fetch(
    ctx: click.Context,
    credentials: Optional[str],
    email: str,
    scope: tuple[str, ...],
    audience: str,
    quota_project: str,
    sts: bool,
    ssocli: Optional[str],
    output_format: str,
) -> None:
    """
    Fetch an access token and print it.

    Example: tokenbroker fetch --credentials key.json --scope cloud-platform
    """
    cli_ctx = get_cli_context(ctx)
    settings = build_settings(credentials, email, scope, audience, quota_project, sts)
    task_settings = TaskSettings(format=output_format, sso_cli=ssocli)

    try:
        code = tasks.fetch(cli_ctx.build_orchestrator(), settings, task_settings)
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(1)
    sys.exit(code)


@cli.command()
@credential_options
@click.pass_context
def header(
    ctx: click.Context,
    credentials: Optional[str],
    email: str,
    scope: tuple[str, ...],
    audience: str,
    quota_project: str,
    sts: bool,
    ssocli: Optional[str],
) -> None:
    """
    Fetch an access token and print it as an Authorization header.
    """
    cli_ctx = get_cli_context(ctx)
    settings = build_settings(credentials, email, scope, audience, quota_project, sts)
    task_settings = TaskSettings(sso_cli=ssocli)

    sys.exit(tasks.header(cli_ctx.build_orchestrator(), settings, task_settings))


@cli.command(context_settings={"ignore_unknown_options": True})
@credential_options
@click.option("--url", required=True, help="URL to request")
@click.option("--curlcli", default=None, help="HTTP client command override")
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def curl(
    ctx: click.Context,
    credentials: Optional[str],
    email: str,
    scope: tuple[str, ...],
    audience: str,
    quota_project: str,
    sts: bool,
    ssocli: Optional[str],
    url: str,
    curlcli: Optional[str],
    extra_args: tuple[str, ...],
) -> None:
    """
    Fetch an access token and request URL with it using curl.

    Arguments after the options are passed to curl unchanged.

    Example: tokenbroker curl --credentials key.json --url https://example.com -- -v
    """
    cli_ctx = get_cli_context(ctx)
    settings = build_settings(credentials, email, scope, audience, quota_project, sts)
    task_settings = TaskSettings(
        sso_cli=ssocli,
        curl_cli=curlcli or cli_ctx.config.curl_cli,
        url=url,
        extra_args=list(extra_args),
    )

    sys.exit(tasks.curl(cli_ctx.build_orchestrator(), settings, task_settings))


@cli.command()
@click.argument("token")
@click.pass_context
def info(ctx: click.Context, token: str) -> None:
    """Print the token info reported for TOKEN."""
    cli_ctx = get_cli_context(ctx)
    sys.exit(tasks.info(cli_ctx.build_validator(), token))


@cli.command("test")
@click.argument("token")
@click.pass_context
def test_token(ctx: click.Context, token: str) -> None:
    """Exit 0 if TOKEN is valid, 1 otherwise."""
    cli_ctx = get_cli_context(ctx)
    sys.exit(tasks.test(cli_ctx.build_validator(), token))


@cli.command()
@click.pass_context
def reset(ctx: click.Context) -> None:
    """Clear the token cache."""
    cli_ctx = get_cli_context(ctx)
    sys.exit(tasks.reset(cli_ctx.build_orchestrator()))
