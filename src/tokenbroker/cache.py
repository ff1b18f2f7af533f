"""
Token cache for previously acquired tokens.

Tokens are keyed by the settings that produced them. The file-backed
cache stores every entry in a single plaintext JSON file readable only by
its owner; the in-memory cache keeps entries for the life of the process.
Neither implementation locks: concurrent writers must serialize access
themselves.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .exceptions import TokenCacheError
from .models import Settings, Token

logger = logging.getLogger(__name__)


class TokenCache(ABC):
    """
    Keyed store of tokens.

    ``lookup`` returns None on a miss and raises TokenCacheError only when
    the store itself is unavailable. Expired tokens are reported as a miss.
    """

    @abstractmethod
    def lookup(self, settings: Settings) -> Optional[Token]:
        """Return the cached token for settings, or None on a miss."""

    @abstractmethod
    def insert(self, settings: Settings, token: Token) -> None:
        """Store token under the key of settings."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every cached token."""


class MemoryTokenCache(TokenCache):
    """Process-local cache backed by a dict."""

    def __init__(self) -> None:
        self._entries: dict[str, Token] = {}

    def lookup(self, settings: Settings) -> Optional[Token]:
        token = self._entries.get(settings.cache_key())
        if token is None or token.is_expired:
            return None
        return token

    def insert(self, settings: Settings, token: Token) -> None:
        self._entries[settings.cache_key()] = token

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class FileTokenCache(TokenCache):
    """
    File-based token cache (plaintext JSON, chmod 600).

    The file holds a single JSON object mapping cache keys to serialized
    tokens. A missing file is an empty cache; an unreadable or corrupt
    file makes the cache unavailable.
    """

    def __init__(self, cache_file: str):
        """
        Initialize the cache.

        Args:
            cache_file: Path to the cache file (e.g., ~/.tokenbroker/token_cache.json)
        """
        self.cache_file = Path(cache_file).expanduser()

    def _set_secure_permissions(self, path: Path) -> None:
        """Set file permissions to user-only read/write (600)."""
        try:
            path.chmod(0o600)
        except OSError as e:
            logger.warning(f"Could not set secure permissions on {path}: {e}")

    def _load(self) -> dict[str, dict]:
        """
        Read all entries from the cache file.

        Raises:
            TokenCacheError: If the file cannot be read or parsed
        """
        if not self.cache_file.exists():
            return {}

        try:
            with open(self.cache_file, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise TokenCacheError(f"Corrupt token cache at {self.cache_file}: {e}") from e
        except OSError as e:
            raise TokenCacheError(f"Could not read token cache: {e}") from e

        if not isinstance(data, dict):
            raise TokenCacheError(f"Corrupt token cache at {self.cache_file}")
        return data

    def _write(self, entries: dict[str, dict]) -> None:
        """Write entries through a temp file so readers never see a partial cache."""
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.cache_file.with_suffix(".tmp")
            with open(temp_path, "w") as f:
                json.dump(entries, f, indent=2)
            self._set_secure_permissions(temp_path)
            temp_path.replace(self.cache_file)
        except OSError as e:
            logger.debug(f"Failed to write token cache: {e}")
            raise TokenCacheError(f"Failed to write token cache: {e}") from e

    def lookup(self, settings: Settings) -> Optional[Token]:
        """
        Look up the token cached for settings.

        Returns:
            Token if cached and unexpired, None otherwise

        Raises:
            TokenCacheError: If the cache file is unreadable or corrupt
        """
        entry = self._load().get(settings.cache_key())
        if entry is None:
            logger.debug("Token cache miss")
            return None

        if not isinstance(entry, dict):
            logger.warning("Ignoring invalid token cache entry: not an object")
            return None

        try:
            token = Token.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring invalid token cache entry: {e}")
            return None

        if token.is_expired:
            logger.debug("Cached token expired, treating as miss")
            return None

        logger.debug(f"Token cache hit in {self.cache_file}")
        return token

    def insert(self, settings: Settings, token: Token) -> None:
        """
        Cache token under the key of settings.

        A corrupt cache file is replaced rather than repaired.

        Raises:
            TokenCacheError: If the cache file cannot be written
        """
        try:
            entries = self._load()
        except TokenCacheError as e:
            logger.warning(f"Replacing unreadable token cache: {e}")
            entries = {}
        entries[settings.cache_key()] = token.to_dict()
        self._write(entries)
        logger.info(f"Token cached in {self.cache_file}")

    def clear(self) -> None:
        """
        Delete the cache file. A missing file is not an error.

        Raises:
            TokenCacheError: If the file exists but cannot be deleted
        """
        if not self.cache_file.exists():
            logger.debug(f"Token cache does not exist: {self.cache_file}")
            return

        try:
            self.cache_file.unlink()
        except OSError as e:
            logger.debug(f"Failed to delete token cache: {e}")
            raise TokenCacheError(f"Failed to delete token cache: {e}") from e
        logger.info(f"Token cache cleared: {self.cache_file}")
