"""CLI tests for oauthcli.app.

Commands are driven through Typer's ``CliRunner`` with the flow mocked;
:func:`oauthcli.app.main` is called directly to check exit-code mapping.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from oauthcli import __version__
from oauthcli.app import app, main
from oauthcli.exceptions import CodeTimeoutError, TokenRequestError
from oauthcli.exit_codes import (
    EXIT_CODE_ACQUISITION_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
)
from oauthcli.models import ReadCodeMode, Token

TOKEN = Token(access_token="AT", client_id="abc", token_type="Bearer")


@pytest.fixture
def config_file(tmp_path: Path, flat_config_data: dict[str, Any]) -> Path:
    path = tmp_path / "client.json"
    path.write_text(json.dumps(flat_config_data), encoding="utf-8")
    return path


@pytest.fixture
def mock_get_token():
    with patch("oauthcli.flow.get_token", return_value=TOKEN) as mocked:
        yield mocked


def _run_main(monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["oauthcli", *args])
    monkeypatch.setattr("oauthcli.app._setup_signal_handlers", lambda: None)
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


class TestTokenCommand:
    def test_prints_token_json(
        self, cli_runner: CliRunner, config_file: Path, mock_get_token, isolated_env
    ) -> None:
        result = cli_runner.invoke(app, ["--json", "token", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {
            "access_token": "AT",
            "client_id": "abc",
            "token_type": "Bearer",
        }

    def test_options_forwarded(
        self, cli_runner: CliRunner, config_file: Path, mock_get_token, isolated_env
    ) -> None:
        result = cli_runner.invoke(
            app,
            [
                "token",
                "-c", str(config_file),
                "-s", "openid",
                "-s", "email",
                "--no-browser",
                "--read-code", "console",
                "--port", "9100",
                "--timeout", "3",
                "--verify-state",
            ],
        )

        assert result.exit_code == 0, result.output
        args, kwargs = mock_get_token.call_args
        assert args[0].client_id == "abc"
        assert kwargs["scope"] == ["openid", "email"]
        assert kwargs["open_browser"] is False
        assert kwargs["read_code"] is ReadCodeMode.CONSOLE
        assert kwargs["port"] == 9100
        assert kwargs["verify_state"] is True
        assert kwargs["settings"].listen_timeout == 3.0

    def test_defaults_forwarded(
        self, cli_runner: CliRunner, config_file: Path, mock_get_token, isolated_env
    ) -> None:
        cli_runner.invoke(app, ["token", "-c", str(config_file)])

        kwargs = mock_get_token.call_args.kwargs
        assert kwargs["scope"] is None
        assert kwargs["open_browser"] is True
        assert kwargs["read_code"] is ReadCodeMode.WEBSERVER
        assert kwargs["port"] is None
        assert kwargs["settings"].listen_timeout == 60.0

    def test_cache_writes_file(
        self, cli_runner: CliRunner, config_file: Path, mock_get_token, isolated_env, tmp_path: Path
    ) -> None:
        target = tmp_path / "out" / "token.json"
        result = cli_runner.invoke(
            app, ["--quiet", "token", "-c", str(config_file), "--cache", str(target)]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(target.read_text())["access_token"] == "AT"
        assert result.stdout == ""

    def test_invalid_read_code(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(app, ["token", "-c", str(config_file), "--read-code", "fax"])
        assert result.exit_code == 2


class TestUrlCommand:
    def test_prints_url(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(app, ["url", "-c", str(config_file), "-s", "openid"])

        assert result.exit_code == 0, result.output
        url = result.stdout.strip()
        assert url.startswith("https://ex.com/auth?")
        assert "state=oauthcli%3Aabc" in url
        assert "scope=openid" in url

    def test_redirect_override(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(
            app, ["url", "-c", str(config_file), "--redirect-uri", "http://127.0.0.1:7000/"]
        )
        assert "redirect_uri=http%3A%2F%2F127.0.0.1%3A7000%2F" in result.stdout


class TestShowConfigCommand:
    def test_secret_masked(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "show-config", "-c", str(config_file)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["client_id"] == "abc"
        assert data["client_secret"] == "********"
        assert "scope" not in data

    def test_show_secret(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "show-config", "-c", str(config_file), "--show-secret"]
        )
        assert json.loads(result.stdout)["client_secret"] == "s"


class TestVerbose:
    def test_verbose_enables_debug_logging(self, cli_runner: CliRunner, config_file: Path) -> None:
        with patch("oauthcli.app.logging.basicConfig") as basic_config:
            result = cli_runner.invoke(app, ["--verbose", "url", "-c", str(config_file)])

        assert result.exit_code == 0, result.output
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG

    def test_logging_untouched_without_verbose(self, cli_runner: CliRunner, config_file: Path) -> None:
        with patch("oauthcli.app.logging.basicConfig") as basic_config:
            cli_runner.invoke(app, ["url", "-c", str(config_file)])

        basic_config.assert_not_called()


class TestVersion:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestMainExitCodes:
    def test_success(self, monkeypatch, config_file: Path, mock_get_token, isolated_env, capsys) -> None:
        code = _run_main(monkeypatch, "--json", "token", "-c", str(config_file))
        assert code == 0
        assert json.loads(capsys.readouterr().out)["access_token"] == "AT"

    def test_missing_config_file(self, monkeypatch, tmp_path: Path, capsys) -> None:
        code = _run_main(monkeypatch, "--no-color", "token", "-c", str(tmp_path / "nope.json"))
        assert code == EXIT_CONFIG_ERROR
        assert "Error: Config file not found" in capsys.readouterr().err

    def test_invalid_config_shape(self, monkeypatch, tmp_path: Path, capsys) -> None:
        path = tmp_path / "client.json"
        path.write_text(json.dumps({"hello": "world"}))
        code = _run_main(monkeypatch, "--no-color", "url", "-c", str(path))
        assert code == EXIT_CONFIG_ERROR
        assert "Invalid OAuth config" in capsys.readouterr().err

    def test_timeout_suggests_console(
        self, monkeypatch, config_file: Path, isolated_env, capsys
    ) -> None:
        with patch("oauthcli.flow.get_token", side_effect=CodeTimeoutError("No authorization code")):
            code = _run_main(monkeypatch, "--no-color", "token", "-c", str(config_file))

        assert code == EXIT_CODE_ACQUISITION_FAILURE
        err = capsys.readouterr().err
        assert "Error: No authorization code" in err
        assert "--read-code console" in err

    def test_connection_error(self, monkeypatch, config_file: Path, isolated_env) -> None:
        with patch("oauthcli.flow.get_token", side_effect=TokenRequestError("refused")):
            code = _run_main(monkeypatch, "token", "-c", str(config_file))
        assert code == EXIT_CONNECTION_ERROR

    def test_usage_error(self, monkeypatch) -> None:
        assert _run_main(monkeypatch, "token") == 2

    def test_unexpected_error_writes_crash_log(
        self, monkeypatch, config_file: Path, isolated_env: Path, capsys
    ) -> None:
        monkeypatch.setattr("oauthcli.config._is_xdg_platform", lambda: True)
        with patch("oauthcli.flow.get_token", side_effect=RuntimeError("boom")):
            code = _run_main(monkeypatch, "--no-color", "token", "-c", str(config_file))

        assert code == EXIT_GENERIC_FAILURE
        assert "Unexpected error" in capsys.readouterr().err
        logs = list((isolated_env / "data" / "oauthcli" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: boom" in logs[0].read_text()

    def test_keyboard_interrupt(self, monkeypatch, config_file: Path, isolated_env) -> None:
        with patch("oauthcli.flow.get_token", side_effect=KeyboardInterrupt):
            code = _run_main(monkeypatch, "token", "-c", str(config_file))
        assert code == 130
