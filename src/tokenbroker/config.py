"""
Broker configuration.

Configuration covers the endpoints and external commands the broker talks
to and where tokens are cached. It can be provided programmatically,
loaded from environment variables, or loaded from a YAML file with
environment variable overrides.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_STS_ENDPOINT = "https://sts.googleapis.com/v1/token"
DEFAULT_TOKEN_INFO_URL = "https://www.googleapis.com/oauth2/v3/tokeninfo"


def _default_cache_file() -> str:
    return str(Path.home() / ".tokenbroker" / "token_cache.json")


def _section(config_dict: dict[str, Any], name: str) -> dict[str, Any]:
    section = config_dict.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return section


@dataclass
class BrokerConfig:
    """
    Configuration for the token broker.

    Attributes:
        cache_file: Path of the JSON file holding cached tokens
        sso_cli: Default SSO delegate command
        curl_cli: Default HTTP client command used by the curl task
        sts_endpoint: Security Token Service token endpoint
        token_info_url: Token introspection endpoint
        http_timeout: Timeout in seconds for every outbound HTTP call
    """

    cache_file: str = ""
    sso_cli: str = "sso"
    curl_cli: str = "curl"
    sts_endpoint: str = DEFAULT_STS_ENDPOINT
    token_info_url: str = DEFAULT_TOKEN_INFO_URL
    http_timeout: int = 30

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in ("cache_file", "sso_cli", "curl_cli", "sts_endpoint", "token_info_url"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"{name} must be a string")

        if not self.cache_file:
            self.cache_file = _default_cache_file()

        if not self.sso_cli.strip():
            raise ConfigurationError("sso_cli cannot be empty")

        if not self.curl_cli.strip():
            raise ConfigurationError("curl_cli cannot be empty")

        for name in ("sts_endpoint", "token_info_url"):
            url = getattr(self, name)
            if not url.startswith(("http://", "https://")):
                raise ConfigurationError(f"{name} must start with http:// or https://")

        if not isinstance(self.http_timeout, int) or self.http_timeout <= 0:
            raise ConfigurationError(
                f"http_timeout must be a positive integer, got {self.http_timeout}"
            )

    @classmethod
    def get_default_config_path(cls) -> Path:
        """
        Get default configuration file path.

        Returns:
            Path to default config file (~/.tokenbroker/config.yaml)
        """
        return Path.home() / ".tokenbroker" / "config.yaml"

    @classmethod
    def from_env(cls) -> "BrokerConfig":
        """
        Load configuration from environment variables only.

        Optional environment variables:
            TOKENBROKER_CACHE_FILE: Token cache file path
            TOKENBROKER_SSO_CLI: SSO delegate command
            TOKENBROKER_CURL_CLI: HTTP client command
            TOKENBROKER_STS_ENDPOINT: STS token endpoint
            TOKENBROKER_TOKEN_INFO_URL: Token info endpoint
            TOKENBROKER_HTTP_TIMEOUT: HTTP timeout in seconds

        Returns:
            BrokerConfig instance

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        return cls.merge_with_defaults({})

    @classmethod
    def load_from_file(cls, path: Optional[Path] = None) -> "BrokerConfig":
        """
        Load configuration from a YAML file.

        A missing file is not an error; defaults and environment
        variables are used instead.

        Args:
            path: Config file path (default: ~/.tokenbroker/config.yaml)

        Returns:
            BrokerConfig instance

        Raises:
            ConfigurationError: If the file is unreadable or invalid
        """
        config_path = path or cls.get_default_config_path()
        config_dict: dict[str, Any] = {}

        if config_path.exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f)
                    if file_config:
                        config_dict = file_config
                logger.debug(f"Loaded configuration from {config_path}")
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Invalid YAML in configuration file: {e}"
                ) from e
            except OSError as e:
                raise ConfigurationError(
                    f"Failed to load configuration file: {e}"
                ) from e
        else:
            logger.debug(f"Configuration file not found at {config_path}, using defaults")

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {config_path}"
            )

        return cls.merge_with_defaults(config_dict)

    @classmethod
    def merge_with_defaults(cls, config_dict: dict[str, Any]) -> "BrokerConfig":
        """
        Merge a configuration dictionary with defaults and environment variables.

        Precedence order (highest to lowest):
        1. Environment variables
        2. Config file values
        3. Default values

        The file may be flat or grouped under ``cache``, ``commands`` and
        ``endpoints`` sections.

        Args:
            config_dict: Configuration dictionary from file

        Returns:
            BrokerConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        cache_config = _section(config_dict, "cache")
        commands_config = _section(config_dict, "commands")
        endpoints_config = _section(config_dict, "endpoints")

        cache_file = os.getenv(
            "TOKENBROKER_CACHE_FILE",
            cache_config.get("file", config_dict.get("cache_file", "")),
        )
        sso_cli = os.getenv(
            "TOKENBROKER_SSO_CLI",
            commands_config.get("sso", config_dict.get("sso_cli", "sso")),
        )
        curl_cli = os.getenv(
            "TOKENBROKER_CURL_CLI",
            commands_config.get("curl", config_dict.get("curl_cli", "curl")),
        )
        sts_endpoint = os.getenv(
            "TOKENBROKER_STS_ENDPOINT",
            endpoints_config.get(
                "sts", config_dict.get("sts_endpoint", DEFAULT_STS_ENDPOINT)
            ),
        )
        token_info_url = os.getenv(
            "TOKENBROKER_TOKEN_INFO_URL",
            endpoints_config.get(
                "token_info", config_dict.get("token_info_url", DEFAULT_TOKEN_INFO_URL)
            ),
        )

        try:
            http_timeout = int(
                os.getenv(
                    "TOKENBROKER_HTTP_TIMEOUT",
                    endpoints_config.get("timeout", config_dict.get("http_timeout", 30)),
                )
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid http_timeout: {e}") from e

        if isinstance(cache_file, str) and cache_file:
            cache_file = str(Path(cache_file).expanduser())

        return cls(
            cache_file=cache_file or "",
            sso_cli=sso_cli,
            curl_cli=curl_cli,
            sts_endpoint=sts_endpoint,
            token_info_url=token_info_url,
            http_timeout=http_timeout,
        )
