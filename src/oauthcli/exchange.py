"""Exchange an authorization code for an access token.

:func:`exchange_code` performs the form-encoded POST to the token endpoint
and turns the JSON answer into a validated :class:`~oauthcli.models.Token`.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from oauthcli.exceptions import (
    ExchangeRejectedError,
    MalformedTokenResponseError,
    TokenRequestError,
)
from oauthcli.models import Config, Token, integral_value
from oauthcli.output import debug

DEFAULT_TIMEOUT = 30.0


def _now_ms() -> int:
    return int(time.time() * 1000)


def _error_fields(response: httpx.Response) -> tuple[Optional[str], Optional[str]]:
    """Best-effort extraction of ``error`` / ``error_description`` from a body."""
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    error = body.get("error")
    description = body.get("error_description")
    return (
        str(error) if error is not None else None,
        str(description) if description is not None else None,
    )


def _rejected(response: httpx.Response) -> ExchangeRejectedError:
    error, description = _error_fields(response)
    message = (
        f"Token exchange failed with status {response.status_code} "
        f"{response.reason_phrase}".rstrip()
    )
    details = [part for part in (error, description) if part]
    if details:
        message += ": " + " - ".join(details)
    return ExchangeRejectedError(
        message,
        status_code=response.status_code,
        error=error,
        error_description=description,
    )


def build_token(config: Config, token_data: dict[str, Any], captured_at: int) -> Token:
    """Validate a token endpoint response as a :class:`Token`.

    ``client_id`` is taken from *config*, overriding anything the provider
    sent. When the response has ``expires_in`` but no ``expires_at``,
    ``expires_at`` is set to *captured_at* (epoch millis) plus
    ``expires_in`` seconds. Integral floats such as ``3600.0`` count as
    integers.

    Raises:
        MalformedTokenResponseError: If the result is not a valid token.
    """
    fields = {**token_data, "client_id": config.client_id}
    expires_in = integral_value(token_data.get("expires_in"))
    if (
        isinstance(expires_in, int)
        and not isinstance(expires_in, bool)
        and expires_in > 0
        and token_data.get("expires_at") is None
    ):
        fields["expires_at"] = captured_at + expires_in * 1000

    try:
        return Token.model_validate(fields)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ())) or 'token'}: {err.get('msg')}"
            for err in exc.errors()
        )
        raise MalformedTokenResponseError(
            f"Token response is not a valid Bearer token: {problems}"
        ) from exc


def exchange_code(
    config: Config,
    code: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> Token:
    """Exchange *code* for a token at ``config.token_url``.

    Args:
        config: Validated client configuration.
        code: Authorization code obtained by a
            :class:`~oauthcli.acquirers.CodeAcquirer`.
        timeout: HTTP timeout in seconds.

    Returns:
        The validated token.

    Raises:
        TokenRequestError: On network-level failures.
        ExchangeRejectedError: If the endpoint answers with a non-2xx
            status. Carries the status code and any ``error`` /
            ``error_description`` the body contained.
        MalformedTokenResponseError: If a 2xx body is not a JSON object
            describing a Bearer token.
    """
    data = {
        "code": code,
        "client_id": config.client_id,
        "client_secret": config.client_secret,
        "redirect_uri": config.redirect_url,
        "grant_type": "authorization_code",
    }

    debug(f"Exchanging authorization code at {config.token_url}")
    try:
        response = httpx.post(
            config.token_url,
            data=data,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except httpx.HTTPError as exc:
        raise TokenRequestError(f"Token exchange failed: {exc}") from exc
    captured_at = _now_ms()

    if not response.is_success:
        raise _rejected(response)

    try:
        token_data = response.json()
    except ValueError as exc:
        raise MalformedTokenResponseError(
            f"Token response is not valid JSON: {exc}"
        ) from exc
    if not isinstance(token_data, dict):
        raise MalformedTokenResponseError("Token response is not a JSON object")

    return build_token(config, token_data, captured_at)
