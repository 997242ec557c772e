"""Client configuration loading, normalisation, and runtime settings.

This module handles everything that turns user-supplied input into the
validated models of :mod:`oauthcli.models`:

* **Config normalisation** -- :func:`normalize_config` accepts the JSON
  layouts that OAuth providers hand out (a flat object, Google's ``web``
  client file, and Google's ``installed`` desktop client file) and produces
  one canonical :class:`~oauthcli.models.Config`.
* **Config files** -- :func:`load_json_config` reads and normalises a file.
* **Settings** -- :func:`resolve_settings` merges CLI flags, ``OAUTHCLI_*``
  environment variables, and defaults into a
  :class:`~oauthcli.models.Settings`.
* **Directory layout** -- :func:`get_data_dir` is XDG compliant on
  Linux/BSD and falls back to ``~/.oauthcli/`` elsewhere.
"""

from __future__ import annotations

import json
import os
import platform
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import ValidationError

from oauthcli.exceptions import (
    ConfigError,
    ConfigValidationError,
    InvalidConfigShapeError,
)
from oauthcli.models import Config, Settings

_APP_NAME = "oauthcli"

ShapeMatcher = Callable[[Mapping[str, Any]], Optional[dict[str, Any]]]
"""Maps raw JSON to flat :class:`Config` fields, or declines with ``None``."""


# --- Config shapes ---


def _match_flat(data: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    """Flat layout: ``client_id`` and ``client_secret`` at the top level."""
    if data.get("client_id") and data.get("client_secret"):
        return dict(data)
    return None


def _google_client_matcher(section: str) -> ShapeMatcher:
    """Build a matcher for Google-style client files nested under *section*.

    Google names its fields ``auth_uri``, ``token_uri`` and a list of
    ``redirect_uris``; the first redirect URI becomes ``redirect_url``.
    """

    def matcher(data: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        client = data.get(section)
        if not isinstance(client, Mapping) or not client.get("client_id"):
            return None
        redirect_uris = client.get("redirect_uris")
        redirect_url = None
        if isinstance(redirect_uris, list) and redirect_uris:
            redirect_url = redirect_uris[0]
        return {
            **client,
            "redirect_url": redirect_url,
            "auth_url": client.get("auth_uri"),
            "token_url": client.get("token_uri"),
        }

    return matcher


CONFIG_SHAPES: list[tuple[str, ShapeMatcher]] = [
    ("flat", _match_flat),
    ("web", _google_client_matcher("web")),
    ("installed", _google_client_matcher("installed")),
]
"""Known config layouts, tried in order. The first match wins."""


def _validation_error(exc: ValidationError) -> ConfigValidationError:
    """Convert a pydantic error into a :class:`ConfigValidationError`."""
    problems: list[str] = []
    fields: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "config"
        fields.append(loc.split(".")[0])
        problems.append(f"{loc}: {err.get('msg', 'invalid value')}")
    field = fields[0] if fields else "config"
    return ConfigValidationError(
        f"Invalid OAuth config: {'; '.join(problems)}", field=field
    )


def normalize_config(data: Any) -> Config:  # noqa: ANN401
    """Normalise raw JSON into a validated :class:`~oauthcli.models.Config`.

    Each entry of :data:`CONFIG_SHAPES` is tried in order; the first layout
    that recognises *data* supplies the field values, which are then
    validated as a whole.

    Args:
        data: Parsed JSON, usually a dict.

    Returns:
        The validated configuration.

    Raises:
        InvalidConfigShapeError: If no known layout matches *data*.
        ConfigValidationError: If the matched layout has missing or
            malformed fields. ``field`` names the first offender.
    """
    if not isinstance(data, Mapping):
        raise InvalidConfigShapeError(
            f"Invalid OAuth config: expected a JSON object, got {type(data).__name__}"
        )

    for _name, matcher in CONFIG_SHAPES:
        fields = matcher(data)
        if fields is None:
            continue
        try:
            return Config.model_validate(fields)
        except ValidationError as exc:
            raise _validation_error(exc) from exc

    known = ", ".join(name for name, _ in CONFIG_SHAPES)
    raise InvalidConfigShapeError(
        f"Invalid OAuth config: no client_id/client_secret found (known layouts: {known})"
    )


def validate_config(config: Config | Mapping[str, Any]) -> Config:
    """Re-check a config with the same rules as :func:`normalize_config`.

    Accepts an existing :class:`Config` (re-validated field by field, which
    also catches instances built with ``model_construct``) or a raw mapping
    (normalised first).
    """
    if not isinstance(config, Config):
        return normalize_config(config)
    try:
        return Config.model_validate(dict(config))
    except ValidationError as exc:
        raise _validation_error(exc) from exc


def load_json_config(path: str | Path) -> Config:
    """Read a JSON client file from disk and normalise it.

    Args:
        path: Path to the JSON file.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file is missing, unreadable, or not valid JSON,
            or any error raised by :func:`normalize_config`.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Config file not found: {file_path}")
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {file_path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {file_path}: {exc}") from exc
    return normalize_config(data)


# --- Runtime settings ---


_SETTINGS_ENV = {
    "listen_host": "OAUTHCLI_LISTEN_HOST",
    "default_port": "OAUTHCLI_DEFAULT_PORT",
    "listen_timeout": "OAUTHCLI_TIMEOUT",
    "token_timeout": "OAUTHCLI_TOKEN_TIMEOUT",
}


def resolve_settings(
    cli_timeout: Optional[float] = None,
    cli_host: Optional[str] = None,
) -> Settings:
    """Resolve runtime settings with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_timeout``, ``cli_host``)
        2. Environment variables (``OAUTHCLI_LISTEN_HOST``,
           ``OAUTHCLI_DEFAULT_PORT``, ``OAUTHCLI_TIMEOUT``,
           ``OAUTHCLI_TOKEN_TIMEOUT``)
        3. Defaults declared on :class:`~oauthcli.models.Settings`

    Raises:
        ConfigError: If an environment variable or flag holds an invalid
            value (e.g. a negative timeout).
    """
    values: dict[str, Any] = {}
    for field, env_var in _SETTINGS_ENV.items():
        env_value = os.environ.get(env_var)
        if env_value:
            values[field] = env_value

    if cli_timeout is not None:
        values["listen_timeout"] = cli_timeout
    if cli_host is not None:
        values["listen_host"] = cli_host

    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory spec."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/oauthcli/`` (default
    ``~/.local/share/oauthcli/``). On macOS/Windows: ``~/.oauthcli/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path
