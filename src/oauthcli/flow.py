"""End-to-end authorization code flow.

:func:`get_token` composes the other modules in a fixed order::

    validate config -> build authorization URL -> show URL / launch browser
        -> acquire code -> exchange code -> Token

The browser is launched before the code acquirer starts, so the user
always has a URL to follow before the listener can time out. Every call
builds its own acquirer; nothing is retried.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from oauthcli.acquirers import create_acquirer
from oauthcli.auth_url import ScopeArg, auth_state, build_auth_url
from oauthcli.browser import launch_browser
from oauthcli.config import validate_config
from oauthcli.exchange import exchange_code
from oauthcli.models import Config, ReadCodeMode, Settings, Token
from oauthcli.output import debug, info


def get_token(
    config: Union[Config, Mapping[str, Any]],
    scope: ScopeArg = None,
    open_browser: bool = True,
    read_code: Union[ReadCodeMode, str] = ReadCodeMode.WEBSERVER,
    cache_path: Optional[Union[str, Path]] = None,
    port: Optional[int] = None,
    timeout: Optional[float] = None,
    prompt: Optional[str] = None,
    verify_state: bool = False,
    settings: Optional[Settings] = None,
) -> Token:
    """Run the authorization code grant and return the resulting token.

    Args:
        config: A :class:`Config` or raw config JSON; validated either way.
        scope: Scope to request when the config defines none.
        open_browser: Launch the system browser on the authorization URL.
            The URL is always printed to stderr as well.
        read_code: ``"webserver"`` (local redirect listener) or
            ``"console"`` (paste the code).
        cache_path: Accepted for callers that persist the token; this
            function never writes files (see :func:`oauthcli.storage.save_token`).
        port: Listener port override.
        timeout: Listener timeout override in seconds.
        prompt: Console prompt text.
        verify_state: Reject redirects whose ``state`` does not match the
            one sent in the authorization URL.
        settings: Runtime settings; defaults when omitted.

    Returns:
        The validated :class:`Token`.

    Raises:
        ConfigError: If the config is invalid.
        CodeAcquisitionError: If no code was obtained.
        TokenError: If the code could not be exchanged.
    """
    settings = settings or Settings()
    config = validate_config(config)

    auth_url = build_auth_url(config, scope=scope)
    info("Open this URL to authorize access:")
    info(auth_url)
    if open_browser:
        launch_browser(auth_url)

    acquirer = create_acquirer(
        read_code,
        config,
        settings,
        port=port,
        timeout=timeout,
        prompt=prompt,
        expected_state=auth_state(config.client_id) if verify_state else None,
    )
    code = acquirer.acquire()
    debug("Authorization code received")

    return exchange_code(config, code, timeout=settings.token_timeout)
