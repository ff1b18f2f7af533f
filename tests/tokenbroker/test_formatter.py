"""Tests for token output formatting."""

import json

import pytest

from tokenbroker.exceptions import ConfigurationError
from tokenbroker.formatter import (
    FORMAT_CHOICES,
    OutputFormat,
    build_header,
    parse_format,
    print_token,
    render_token,
)
from tokenbroker.models import Token


@pytest.fixture
def token():
    return Token(
        access_token="T",
        token_type="Bearer",
        raw={"access_token": "T", "expires_in": 3599, "token_type": "Bearer"},
    )


class TestParseFormat:
    """Tests for parse_format."""

    def test_known_formats(self):
        """Every supported name resolves to its enum member."""
        assert [parse_format(name) for name in FORMAT_CHOICES] == list(OutputFormat)

    def test_unknown_format_names_all_choices(self):
        """An unknown format is a configuration error naming the five choices."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_format("yaml")

        assert str(exc_info.value) == (
            "Invalid choice: 'yaml' "
            "(choose from 'bare', 'header', 'json', 'json_compact', 'pretty')"
        )


class TestRenderToken:
    """Tests for render_token."""

    def test_header(self, token):
        """header renders an Authorization header."""
        assert render_token(token, "header") == "Authorization: Bearer T"

    def test_bare(self, token):
        """bare renders only the access token."""
        assert render_token(token, "bare") == "T"

    def test_json(self, token):
        """json renders the raw payload indented."""
        rendered = render_token(token, "json")

        assert rendered == json.dumps(token.raw, indent=2)
        assert "\n  " in rendered

    def test_json_compact(self, token):
        """json_compact renders the raw payload minified."""
        assert render_token(token, "json_compact") == (
            '{"access_token":"T","expires_in":3599,"token_type":"Bearer"}'
        )

    def test_pretty(self, token):
        """pretty renders credential type and access token."""
        assert render_token(token, "pretty", "service_account") == (
            "Fetched credentials of type:\n  service_account\nAccess Token:\n  T"
        )

    def test_none_token_renders_nothing(self):
        """A missing token renders to None."""
        assert render_token(None, "bare") is None

    def test_invalid_format_fails_even_without_token(self):
        """The format is validated before looking at the token."""
        with pytest.raises(ConfigurationError, match="Invalid choice"):
            render_token(None, "xml")

    def test_build_header(self):
        """build_header joins type and token."""
        assert build_header("MAC", "abc") == "Authorization: MAC abc"


class TestPrintToken:
    """Tests for print_token."""

    def test_prints_rendered_token(self, token, capsys):
        """print_token writes the rendered token and a newline."""
        print_token(token, "header")
        assert capsys.readouterr().out == "Authorization: Bearer T\n"

    def test_none_token_prints_nothing(self, capsys):
        """print_token is a no-op for a missing token."""
        print_token(None, "json")
        assert capsys.readouterr().out == ""
