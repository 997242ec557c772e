"""Canonical Pydantic models shared across all oauthcli modules.

This is the single source of truth for data shapes in the project:

* :class:`Config` -- the validated OAuth client configuration produced by
  :func:`~oauthcli.config.normalize_config`.
* :class:`Token` -- the access token produced by
  :func:`~oauthcli.exchange.exchange_code`.
* :class:`ReadCodeMode` -- selects the code acquisition strategy.
* :class:`Settings` -- runtime knobs resolved by
  :func:`~oauthcli.config.resolve_settings`.

``Config`` and ``Token`` are frozen: once validated they never change, so a
partially-valid instance can never reach downstream code.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


def _check_http_url(value: str) -> str:
    """Accept ``http``/``https`` URLs with a host; bare hostnames are fine."""
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https"):
        raise ValueError("must use the http or https scheme")
    if not parts.hostname:
        raise ValueError("must include a host")
    try:
        parts.port
    except ValueError as exc:
        raise ValueError(f"has an invalid port ({exc})") from None
    return value


def integral_value(value: Any) -> Any:  # noqa: ANN401
    """Return integral floats such as ``3600.0`` as ``int``; other values unchanged."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# --- Client configuration ---


class Config(BaseModel):
    """OAuth 2.0 client configuration for the authorization code grant.

    URL fields are validated but stored verbatim, so a config loaded from
    disk round-trips without normalisation. ``scope`` may be given as a
    list or as a single space-separated string.

    Example::

        Config(
            client_id="abc",
            client_secret="s",
            auth_url="https://ex.com/auth",
            token_url="https://ex.com/token",
            redirect_url="http://localhost:8000/",
        )
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    auth_url: str = Field(description="Authorization endpoint")
    token_url: str = Field(description="Token endpoint")
    redirect_url: str = Field(
        description="Redirect URI registered with the provider; its port is "
        "the default port of the local listener"
    )
    scope: Optional[list[str]] = None

    @field_validator("auth_url", "token_url", "redirect_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        return _check_http_url(value)

    @field_validator("scope", mode="before")
    @classmethod
    def _split_scope(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.split()
        return value


# --- Token ---


class Token(BaseModel):
    """Access token obtained from the token endpoint.

    ``client_id`` always comes from the local :class:`Config`, never from the
    provider. ``expires_at`` is an absolute epoch timestamp in milliseconds.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str
    client_id: str
    token_type: Literal["Bearer"]
    expires_in: Optional[StrictInt] = None
    expires_at: Optional[StrictInt] = None
    scope: Optional[str] = None

    @field_validator("token_type", mode="before")
    @classmethod
    def _normalise_token_type(cls, value: Any) -> Any:
        # Some providers answer "bearer"
        if isinstance(value, str) and value.lower() == "bearer":
            return "Bearer"
        return value

    @field_validator("expires_in", "expires_at", mode="before")
    @classmethod
    def _integral_floats(cls, value: Any) -> Any:
        return integral_value(value)

    def to_json_dict(self) -> dict[str, Any]:
        """Return the output JSON shape, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


# --- Runtime selection and settings ---


class ReadCodeMode(str, enum.Enum):
    """How the authorization code is read back from the user."""

    WEBSERVER = "webserver"
    CONSOLE = "console"


class Settings(BaseModel):
    """Runtime settings for the local listener and the token request.

    See :func:`~oauthcli.config.resolve_settings` for the precedence chain
    (CLI flags, then ``OAUTHCLI_*`` environment variables, then defaults).
    """

    listen_host: str = Field(
        default="127.0.0.1", description="Interface the redirect listener binds"
    )
    default_port: int = Field(
        default=8000,
        ge=0,
        le=65535,
        description="Listener port when the redirect URL has no explicit port",
    )
    listen_timeout: float = Field(
        default=60.0, gt=0, description="Seconds to wait for the redirect"
    )
    token_timeout: float = Field(
        default=30.0, gt=0, description="HTTP timeout for the token request"
    )
