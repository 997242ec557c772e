"""Authorization code acquisition strategies.

Two strategies share the :class:`CodeAcquirer` interface:

- :class:`HttpRedirectListener` -- catches the provider's redirect on a
  short-lived local HTTP server (``webserver`` mode).
- :class:`ConsoleCodePrompt` -- asks the user to paste the code
  (``console`` mode).

:func:`create_acquirer` builds a fresh, single-use acquirer for the
selected :class:`~oauthcli.models.ReadCodeMode`.

Typical usage::

    from oauthcli.acquirers import create_acquirer

    acquirer = create_acquirer("webserver", config, settings)
    code = acquirer.acquire()
"""

from __future__ import annotations

from typing import Callable, Optional, Union

from oauthcli.acquirers.base import CodeAcquirer
from oauthcli.acquirers.console import DEFAULT_PROMPT, ConsoleCodePrompt
from oauthcli.acquirers.http_listener import (
    HttpRedirectListener,
    ListenerState,
    redirect_port,
)
from oauthcli.exceptions import InvalidUsageError
from oauthcli.models import Config, ReadCodeMode, Settings


def _webserver(
    config: Config,
    settings: Settings,
    port: Optional[int],
    timeout: Optional[float],
    prompt: Optional[str],
    expected_state: Optional[str],
) -> CodeAcquirer:
    return HttpRedirectListener(
        config.redirect_url,
        port=port,
        timeout=timeout if timeout is not None else settings.listen_timeout,
        host=settings.listen_host,
        expected_state=expected_state,
        default_port=settings.default_port,
    )


def _console(
    config: Config,
    settings: Settings,
    port: Optional[int],
    timeout: Optional[float],
    prompt: Optional[str],
    expected_state: Optional[str],
) -> CodeAcquirer:
    return ConsoleCodePrompt(prompt=prompt or DEFAULT_PROMPT)


AcquirerFactory = Callable[
    [Config, Settings, Optional[int], Optional[float], Optional[str], Optional[str]],
    CodeAcquirer,
]

ACQUIRERS: dict[ReadCodeMode, AcquirerFactory] = {
    ReadCodeMode.WEBSERVER: _webserver,
    ReadCodeMode.CONSOLE: _console,
}
"""Factories keyed by the mode they implement."""


def create_acquirer(
    mode: Union[ReadCodeMode, str],
    config: Config,
    settings: Optional[Settings] = None,
    port: Optional[int] = None,
    timeout: Optional[float] = None,
    prompt: Optional[str] = None,
    expected_state: Optional[str] = None,
) -> CodeAcquirer:
    """Build a fresh acquirer for *mode*.

    Args:
        mode: ``"webserver"`` or ``"console"`` (or the enum member).
        config: Validated client configuration.
        settings: Runtime settings; defaults are used when omitted.
        port: Listener port override (webserver only).
        timeout: Listener timeout override in seconds (webserver only).
        prompt: Prompt text (console only).
        expected_state: Enables ``state`` checking (webserver only).

    Raises:
        InvalidUsageError: If *mode* is not a known strategy.
    """
    try:
        read_mode = ReadCodeMode(mode)
    except ValueError:
        known = ", ".join(m.value for m in ReadCodeMode)
        raise InvalidUsageError(
            f"Unknown code reading mode '{mode}' (expected one of: {known})"
        ) from None
    factory = ACQUIRERS[read_mode]
    return factory(config, settings or Settings(), port, timeout, prompt, expected_state)


__all__ = [
    "ACQUIRERS",
    "CodeAcquirer",
    "ConsoleCodePrompt",
    "HttpRedirectListener",
    "ListenerState",
    "create_acquirer",
    "redirect_port",
]
