"""Authorization URL construction.

:func:`build_auth_url` is a pure function: the same config and arguments
always produce the same URL, and nothing is read from or written to the
outside world.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from oauthcli.models import Config

STATE_PREFIX = "oauthcli:"

ScopeArg = Union[str, Sequence[str], None]


def auth_state(client_id: str) -> str:
    """Return the ``state`` value sent with the authorization request.

    This is a fixed tag, not a per-request nonce. The redirect listener only
    checks it when asked to (see ``expected_state`` on
    :class:`~oauthcli.acquirers.HttpRedirectListener`).
    """
    return STATE_PREFIX + client_id


def resolve_scope(config: Config, scope: ScopeArg = None) -> Optional[str]:
    """Resolve the space-joined scope string, or ``None`` when there is none.

    ``config.scope`` wins over *scope*.
    """
    if config.scope:
        return " ".join(config.scope)
    if scope is None:
        return None
    if isinstance(scope, str):
        return scope or None
    return " ".join(scope) or None


def build_auth_url(
    config: Config,
    scope: ScopeArg = None,
    redirect_uri: Optional[str] = None,
) -> str:
    """Build the authorization endpoint URL for the code grant.

    Query parameters already present on ``config.auth_url`` are kept;
    parameters set here replace any existing ones of the same name.

    Args:
        config: Validated client configuration.
        scope: Scope to request when the config defines none. A list is
            space-joined.
        redirect_uri: Override for ``config.redirect_url``.

    Returns:
        The fully-formed URL to open in the browser.
    """
    params: dict[str, str] = {
        "response_type": "code",
        "redirect_uri": redirect_uri or config.redirect_url,
        "client_id": config.client_id,
        "state": auth_state(config.client_id),
    }
    resolved_scope = resolve_scope(config, scope)
    if resolved_scope is not None:
        params["scope"] = resolved_scope

    parts = urlsplit(config.auth_url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in params
    ]
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))
