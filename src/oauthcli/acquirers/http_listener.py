"""Capture the authorization code with a short-lived local HTTP listener.

:class:`HttpRedirectListener` binds the port named by the redirect URL,
serves connections on daemon threads, and arms a :class:`threading.Timer`.
The request handler and the timer race to settle a single-assignment
outcome cell (a :class:`concurrent.futures.Future` guarded by a lock):

* a request carrying ``code`` gets the "close this window" page and
  settles the cell with the code;
* any other request gets a 404 and the listener keeps waiting (browsers
  ask for ``/favicon.ico`` and the like);
* timer expiry settles the cell with :class:`CodeTimeoutError`.

Whichever settles first wins; the loser's attempt is a no-op. The caller
thread waits on the cell and then tears down the timer, the server and
its socket on every exit path, so no port stays bound after
:meth:`HttpRedirectListener.acquire` returns or raises.
"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse, urlsplit

from oauthcli.acquirers.base import CodeAcquirer
from oauthcli.exceptions import (
    CodeAcquisitionError,
    CodeTimeoutError,
    ListenerBindError,
)
from oauthcli.models import ReadCodeMode
from oauthcli.output import debug, warning

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000
DEFAULT_TIMEOUT = 60.0

# How often serve_forever() checks for a shutdown request
_POLL_INTERVAL = 0.05

# Seconds a connection may stay silent before its handler gives up
HANDLER_TIMEOUT = 5.0

SUCCESS_PAGE = (
    "<!DOCTYPE html><html><body>"
    "<h1>Authorization complete. You can now close this window.</h1>"
    "<script>window.close();</script>"
    "</body></html>"
)


class ListenerState(str, enum.Enum):
    """Lifecycle of a :class:`HttpRedirectListener`.

    ``IDLE -> LISTENING -> RESOLVED | TIMED_OUT | ERRORED``. The last three
    are terminal.
    """

    IDLE = "idle"
    LISTENING = "listening"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


def redirect_port(redirect_url: str, default: int = DEFAULT_PORT) -> int:
    """Return the explicit port of *redirect_url*, or *default* when it has none."""
    port = urlsplit(redirect_url).port
    return port if port is not None else default


class _RedirectServer(ThreadingHTTPServer):
    """Handles each connection on its own daemon thread.

    A silent connection (browser preconnect, port scanner) never blocks the
    code request or :meth:`shutdown`.
    """

    daemon_threads = True

    def __init__(self, address: tuple[str, int], listener: HttpRedirectListener) -> None:
        self.listener = listener
        super().__init__(address, _RedirectHandler)


class _RedirectHandler(BaseHTTPRequestHandler):
    server: _RedirectServer
    timeout = HANDLER_TIMEOUT

    def do_GET(self) -> None:
        listener = self.server.listener
        params = parse_qs(urlparse(self.path).query)
        code = params.get("code", [""])[0]

        if not code:
            provider_error = params.get("error", [""])[0]
            if provider_error:
                description = params.get("error_description", [""])[0]
                detail = f" - {description}" if description else ""
                warning(f"Authorization server redirected with error: {provider_error}{detail}")
            self._respond(404, "<html><body><h2>Not found</h2></body></html>")
            return

        if listener.expected_state is not None:
            state = params.get("state", [""])[0]
            if state != listener.expected_state:
                warning("Ignoring redirect with an unexpected state parameter")
                self._respond(400, "<html><body><h2>State mismatch</h2></body></html>")
                return

        self._respond(200, SUCCESS_PAGE)
        listener._settle(code=code)

    def _respond(self, status: int, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class HttpRedirectListener(CodeAcquirer):
    """Wait for the provider to redirect the browser back with ``?code=...``.

    Args:
        redirect_url: The redirect URI sent in the authorization request.
            Its explicit port is used unless *port* is given.
        port: Explicit port override.
        timeout: Seconds to wait for a qualifying request.
        host: Interface to bind.
        expected_state: When set, code requests whose ``state`` differs are
            answered with 400 and ignored. ``None`` accepts any state.
        default_port: Port used when *redirect_url* has no explicit port.

    Example::

        listener = HttpRedirectListener("http://localhost:8000/", timeout=30)
        code = listener.acquire()
    """

    def __init__(
        self,
        redirect_url: str,
        port: Optional[int] = None,
        timeout: float = DEFAULT_TIMEOUT,
        host: str = "127.0.0.1",
        expected_state: Optional[str] = None,
        default_port: int = DEFAULT_PORT,
    ) -> None:
        self.redirect_url = redirect_url
        self.port = port if port is not None else redirect_port(redirect_url, default_port)
        self.timeout = timeout
        self.host = host
        self.expected_state = expected_state

        self._lock = threading.Lock()
        self._state = ListenerState.IDLE
        self._outcome: Future[str] = Future()
        self._server: Optional[_RedirectServer] = None
        self._thread: Optional[threading.Thread] = None
        self._timer: Optional[threading.Timer] = None

    @property
    def mode(self) -> ReadCodeMode:
        return ReadCodeMode.WEBSERVER

    @property
    def state(self) -> ListenerState:
        """Current lifecycle state."""
        return self._state

    @property
    def server_address(self) -> Optional[tuple[str, int]]:
        """The bound ``(host, port)``, or ``None`` before binding."""
        if self._server is None:
            return None
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def acquire(self) -> str:
        """Listen until a request supplies a code or the timeout fires.

        Returns:
            The authorization code.

        Raises:
            ListenerBindError: If the port cannot be bound.
            CodeTimeoutError: If no code arrives within ``timeout`` seconds.
            CodeAcquisitionError: If the listener was already used.
        """
        with self._lock:
            if self._state is not ListenerState.IDLE:
                raise CodeAcquisitionError("A redirect listener can only be used once")
            self._state = ListenerState.LISTENING

        try:
            self._server = _RedirectServer((self.host, self.port), self)
        except OSError as exc:
            self._state = ListenerState.ERRORED
            raise ListenerBindError(
                f"Cannot listen for the redirect on {self.host}:{self.port}: {exc}"
            ) from exc

        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"poll_interval": _POLL_INTERVAL},
            name="oauthcli-redirect-listener",
            daemon=True,
        )
        self._timer = threading.Timer(self.timeout, self._on_timeout)
        self._timer.daemon = True

        try:
            self._thread.start()
            self._timer.start()
            host, port = self.server_address or (self.host, self.port)
            debug(f"Listening for the authorization redirect on http://{host}:{port}/")
            return self._outcome.result()
        except BaseException:
            self._abandon()
            raise
        finally:
            self._teardown()

    def _settle(
        self,
        code: Optional[str] = None,
        error: Optional[CodeAcquisitionError] = None,
    ) -> bool:
        """Resolve the outcome once. Returns ``False`` if it was already settled."""
        with self._lock:
            if self._outcome.done():
                return False
            if error is not None:
                if isinstance(error, CodeTimeoutError):
                    self._state = ListenerState.TIMED_OUT
                else:
                    self._state = ListenerState.ERRORED
                self._outcome.set_exception(error)
            else:
                self._state = ListenerState.RESOLVED
                self._outcome.set_result(code or "")
            return True

    def _on_timeout(self) -> None:
        settled = self._settle(
            error=CodeTimeoutError(
                f"No authorization code received within {self.timeout:g} seconds"
            )
        )
        if settled:
            logger.debug("redirect listener on port %s timed out", self.port)

    def _abandon(self) -> None:
        """Mark the outcome as errored when the caller stops waiting early."""
        with self._lock:
            if not self._outcome.done():
                self._state = ListenerState.ERRORED
                self._outcome.cancel()

    def _teardown(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        if self._server is not None:
            if self._thread is not None and self._thread.is_alive():
                self._server.shutdown()
            self._server.server_close()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=1.0)
