"""Shared test fixtures for oauthcli.

Provides reusable client-config payloads, an isolated environment for
settings resolution, output-state management, a free-port helper for the
redirect listener, and a CLI runner. These fixtures are automatically
discovered by pytest.
"""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Any

import pytest

from oauthcli.models import Config
from oauthcli.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When CliRunner redirects those streams during a test,
    the cached references become stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config payloads
# ---------------------------------------------------------------------------


@pytest.fixture
def flat_config_data() -> dict[str, Any]:
    """A flat-layout client config."""
    return {
        "client_id": "abc",
        "client_secret": "s",
        "auth_url": "https://ex.com/auth",
        "token_url": "https://ex.com/token",
        "redirect_url": "http://localhost:8000/",
    }


@pytest.fixture
def web_config_data() -> dict[str, Any]:
    """A Google ``web`` client file."""
    return {
        "web": {
            "client_id": "123.apps.googleusercontent.com",
            "project_id": "demo-project",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
            "client_secret": "GOCSPX-secret",
            "redirect_uris": [
                "http://localhost:9004/callback",
                "https://app.example.com/oauth/callback",
            ],
        }
    }


@pytest.fixture
def config(flat_config_data: dict[str, Any]) -> Config:
    """A validated flat config."""
    return Config.model_validate(flat_config_data)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear OAUTHCLI_* variables and point XDG_DATA_HOME at tmp_path."""
    for var in [
        "OAUTHCLI_LISTEN_HOST",
        "OAUTHCLI_DEFAULT_PORT",
        "OAUTHCLI_TIMEOUT",
        "OAUTHCLI_TOKEN_TIMEOUT",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


# ---------------------------------------------------------------------------
# Networking helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def free_port() -> int:
    """A TCP port on 127.0.0.1 that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet JSON-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.JSON, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
