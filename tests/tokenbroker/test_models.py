"""Tests for settings and token data types."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from tokenbroker.models import Settings, TaskSettings, Token


class TestSettings:
    """Tests for Settings class."""

    def test_equal_settings_share_cache_key(self):
        """Equal settings always derive the same cache key."""
        first = Settings(credentials_json='{"type": "service_account"}', scope="a b")
        second = Settings(credentials_json='{"type": "service_account"}', scope="a b")

        assert first == second
        assert first.cache_key() == second.cache_key()

    @pytest.mark.parametrize(
        "other",
        [
            Settings(credentials_json="{}", scope="other"),
            Settings(credentials_json='{"x": 1}', scope="scope"),
            Settings(credentials_json="{}", scope="scope", sts=True),
            Settings(credentials_json="{}", scope="scope", audience="aud"),
        ],
    )
    def test_different_identity_changes_cache_key(self, other):
        """Credential identity, scope, audience and STS all affect the key."""
        base = Settings(credentials_json="{}", scope="scope")
        assert base.cache_key() != other.cache_key()

    def test_cache_key_does_not_embed_credentials(self):
        """The cache key is a digest, not the raw credentials."""
        settings = Settings(credentials_json='{"private_key": "secret"}')
        key = settings.cache_key()

        assert "secret" not in key
        assert len(key) == 64

    def test_scopes_accepts_spaces_and_commas(self):
        """scopes splits on whitespace and commas."""
        settings = Settings(scope="a, b  c")
        assert settings.scopes == ["a", "b", "c"]

    def test_uses_sso_only_without_credentials(self):
        """The SSO path is chosen only for email without credentials."""
        assert Settings(email="user@example.com").uses_sso is True
        assert Settings(credentials_json="{}", email="user@example.com").uses_sso is False
        assert Settings().uses_sso is False

    def test_credential_type(self):
        """credential_type reads the type field of the credentials JSON."""
        settings = Settings(credentials_json=json.dumps({"type": "authorized_user"}))
        assert settings.credential_type() == "authorized_user"

    @pytest.mark.parametrize("credentials", ["", "not json", "[1, 2]", "{}"])
    def test_credential_type_unavailable(self, credentials):
        """credential_type is empty when it cannot be determined."""
        assert Settings(credentials_json=credentials).credential_type() == ""

    def test_settings_are_immutable(self):
        """Settings cannot be modified after creation."""
        settings = Settings(scope="a")
        with pytest.raises(AttributeError):
            settings.scope = "b"


class TestTaskSettings:
    """Tests for TaskSettings class."""

    def test_defaults(self):
        """TaskSettings defaults to bare output and no overrides."""
        task_settings = TaskSettings()

        assert task_settings.format == "bare"
        assert task_settings.sso_cli is None
        assert task_settings.curl_cli is None
        assert task_settings.extra_args == []


class TestToken:
    """Tests for Token class."""

    def test_token_without_expiry_never_expires(self):
        """A token with unknown expiry is treated as valid."""
        assert Token(access_token="abc").is_expired is False

    def test_is_expired(self):
        """is_expired compares expiry against now."""
        past = datetime.now(timezone.utc) - timedelta(minutes=1)
        future = datetime.now(timezone.utc) + timedelta(minutes=30)

        assert Token(access_token="abc", expiry=past).is_expired is True
        assert Token(access_token="abc", expiry=future).is_expired is False

    def test_dict_serialization(self):
        """to_dict/from_dict preserve every field."""
        expiry = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
        token = Token(
            access_token="abc",
            token_type="Bearer",
            raw={"access_token": "abc", "expires_in": 3599},
            expiry=expiry,
        )

        restored = Token.from_dict(json.loads(json.dumps(token.to_dict())))

        assert restored == token

    def test_from_dict_naive_expiry_is_utc(self):
        """Naive expiry timestamps are interpreted as UTC."""
        token = Token.from_dict({"access_token": "abc", "expiry": "2026-10-19T12:00:00"})
        assert token.expiry == datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

    def test_from_dict_defaults(self):
        """from_dict fills in token type and raw payload."""
        token = Token.from_dict({"access_token": "abc"})

        assert token.token_type == "Bearer"
        assert token.raw == {}
        assert token.expiry is None

    def test_from_dict_requires_access_token(self):
        """from_dict raises KeyError without an access token."""
        with pytest.raises(KeyError):
            Token.from_dict({"token_type": "Bearer"})

    def test_from_dict_rejects_empty_access_token(self):
        """from_dict raises ValueError for a null or empty access token."""
        with pytest.raises(ValueError):
            Token.from_dict({"access_token": None})
        with pytest.raises(ValueError):
            Token.from_dict({"access_token": ""})
