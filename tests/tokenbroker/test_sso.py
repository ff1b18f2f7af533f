"""Tests for the SSO delegate."""

import subprocess
from unittest import mock

import pytest

from tokenbroker.exceptions import SsoError
from tokenbroker.sso import SsoFetcher


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


class TestSsoFetcher:
    """Tests for SsoFetcher class."""

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_fetch_success(self, mock_run):
        """The command output becomes a Bearer token."""
        mock_run.return_value = completed(stdout="sso_token\n")

        token = SsoFetcher(timeout=60).fetch("sso", "user@example.com", "scope-a scope-b")

        mock_run.assert_called_once_with(
            ["sso", "user@example.com", "scope-a scope-b"],
            capture_output=True,
            text=True,
            timeout=60,
        )
        assert token.access_token == "sso_token"
        assert token.token_type == "Bearer"
        assert token.raw == {"access_token": "sso_token", "token_type": "Bearer"}

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_command_with_arguments(self, mock_run):
        """The SSO command may carry its own arguments."""
        mock_run.return_value = completed(stdout="tok")

        SsoFetcher().fetch("/opt/sso --quiet", "user@example.com", "scope")

        assert mock_run.call_args[0][0] == [
            "/opt/sso", "--quiet", "user@example.com", "scope",
        ]

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        """A failing command raises SsoError with its stderr."""
        mock_run.return_value = completed(returncode=2, stderr="not logged in\n")

        with pytest.raises(SsoError, match="exited with code 2: not logged in"):
            SsoFetcher().fetch("sso", "user@example.com", "scope")

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_empty_output(self, mock_run):
        """An empty token raises SsoError."""
        mock_run.return_value = completed(stdout="  \n")

        with pytest.raises(SsoError, match="empty output"):
            SsoFetcher().fetch("sso", "user@example.com", "scope")

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_command_not_found(self, mock_run):
        """A missing command raises SsoError."""
        mock_run.side_effect = FileNotFoundError("sso")

        with pytest.raises(SsoError, match="not found"):
            SsoFetcher().fetch("sso", "user@example.com", "scope")

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_timeout(self, mock_run):
        """A hanging command raises SsoError."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="sso", timeout=5)

        with pytest.raises(SsoError, match="timed out after 5s"):
            SsoFetcher(timeout=5).fetch("sso", "user@example.com", "scope")

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_blank_command(self, mock_run):
        """A whitespace-only command is rejected without running anything."""
        with pytest.raises(SsoError, match="cannot be empty"):
            SsoFetcher().fetch("   ", "user@example.com", "scope")

        mock_run.assert_not_called()

    @mock.patch("tokenbroker.sso.subprocess.run")
    def test_non_text_output(self, mock_run):
        """Output that cannot be decoded raises SsoError."""
        mock_run.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        with pytest.raises(SsoError, match="non-text output"):
            SsoFetcher().fetch("sso", "user@example.com", "scope")
