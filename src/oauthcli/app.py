"""Typer application and CLI entry point for oauthcli.

Commands:

* ``oauthcli token`` -- run the authorization code flow and emit the token
  JSON on stdout (or write it to ``--cache``).
* ``oauthcli url`` -- print the authorization URL only.
* ``oauthcli show-config`` -- print the normalised client configuration.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app,
maps :class:`~oauthcli.exceptions.OAuthCliError` to its exit code, and
writes a crash log for anything unexpected.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from oauthcli import __version__
from oauthcli.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from oauthcli.models import ReadCodeMode


app = typer.Typer(
    name="oauthcli",
    help="Obtain OAuth 2.0 access tokens with the authorization code grant.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"oauthcli {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Always emit raw JSON on stdout."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback: installs the global OutputManager from CLI flags."""
    from oauthcli.output import OutputFormat, OutputManager, set_output

    set_output(
        OutputManager(
            format=OutputFormat.JSON if json_output else OutputFormat.AUTO,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="[debug] %(name)s: %(message)s",
        )


@app.command("token")
def token_command(
    config_path: str = typer.Option(
        ..., "--config", "-c", help="Path to the OAuth client JSON file."
    ),
    scope: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope to request (repeatable). Ignored if the config sets one."
    ),
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Print the URL instead of launching a browser."
    ),
    read_code: ReadCodeMode = typer.Option(
        ReadCodeMode.WEBSERVER,
        "--read-code",
        help="How to receive the code: local webserver or console paste.",
    ),
    cache: Optional[str] = typer.Option(
        None, "--cache", help="Write the token JSON to this file instead of stdout."
    ),
    port: Optional[int] = typer.Option(
        None, "--port", help="Listener port (default: the redirect URL's port)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the redirect (default 60)."
    ),
    verify_state: bool = typer.Option(
        False, "--verify-state", help="Reject redirects with an unexpected state."
    ),
) -> None:
    """Run the authorization code flow and output the access token."""
    from oauthcli.config import load_json_config, resolve_settings
    from oauthcli.flow import get_token
    from oauthcli.output import format_json, success
    from oauthcli.storage import save_token

    config = load_json_config(config_path)
    settings = resolve_settings(cli_timeout=timeout)
    token = get_token(
        config,
        scope=list(scope) if scope else None,
        open_browser=not no_browser,
        read_code=read_code,
        cache_path=cache,
        port=port,
        verify_state=verify_state,
        settings=settings,
    )

    if cache:
        written = save_token(token, cache)
        success(f"Token written to {written}")
    else:
        format_json(token.to_json_dict())


@app.command("url")
def url_command(
    config_path: str = typer.Option(
        ..., "--config", "-c", help="Path to the OAuth client JSON file."
    ),
    scope: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope to request (repeatable). Ignored if the config sets one."
    ),
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect-uri", help="Override the configured redirect URL."
    ),
) -> None:
    """Print the authorization URL without starting the flow."""
    from oauthcli.auth_url import build_auth_url
    from oauthcli.config import load_json_config
    from oauthcli.output import print_data

    config = load_json_config(config_path)
    print_data(
        build_auth_url(config, scope=list(scope) if scope else None, redirect_uri=redirect_uri)
    )


@app.command("show-config")
def show_config_command(
    config_path: str = typer.Option(
        ..., "--config", "-c", help="Path to the OAuth client JSON file."
    ),
    show_secret: bool = typer.Option(
        False, "--show-secret", help="Print client_secret unmasked."
    ),
) -> None:
    """Print the normalised client configuration."""
    from oauthcli.config import load_json_config
    from oauthcli.output import format_json

    config = load_json_config(config_path)
    data = config.model_dump(mode="json", exclude_none=True)
    if not show_secret:
        data["client_secret"] = "********"
    format_json(data)


def _hint_for(exc: Exception) -> Optional[str]:
    """Return a next-step suggestion for acquisition failures, if any."""
    from oauthcli.exceptions import CodeTimeoutError, ListenerBindError

    if isinstance(exc, CodeTimeoutError):
        return "If the browser cannot reach this machine, re-run with --read-code console."
    if isinstance(exc, ListenerBindError):
        return "Free the port or choose one with --port; it must match a registered redirect URL."
    return None


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from oauthcli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oauthcli`` console script.

    Typer runs in standalone mode off, so library errors reach this
    function: :class:`~oauthcli.exceptions.OAuthCliError` exits with the
    error's ``exit_code``; anything else writes a crash log and exits with
    :data:`~oauthcli.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised.
    """
    import click

    from oauthcli.exceptions import OAuthCliError
    from oauthcli.output import error, suggest

    _setup_signal_handlers()
    try:
        result = app(standalone_mode=False)
    except (KeyboardInterrupt, click.exceptions.Abort):
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except click.exceptions.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)
    except OAuthCliError as exc:
        error(str(exc))
        hint = _hint_for(exc)
        if hint:
            suggest(hint)
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
    sys.exit(result if isinstance(result, int) else 0)
