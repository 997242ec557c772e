"""Fire-and-forget browser launch.

Opening a browser is best-effort: headless hosts have none, and some
console browsers block until they exit. :func:`launch_browser` therefore
runs :func:`webbrowser.open` on a daemon thread and only reports failures
as warnings, so the flow continues and the user can open the printed URL
by hand.
"""

from __future__ import annotations

import threading
import webbrowser

from oauthcli.output import debug, warning


def _open(url: str) -> None:
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        warning(f"Could not launch a browser ({exc}). Open the URL above manually.")
        return
    if not opened:
        warning("No browser available. Open the URL above manually.")
    else:
        debug("Browser launched")


def launch_browser(url: str) -> threading.Thread:
    """Open *url* in the default browser without blocking the caller.

    Returns:
        The started daemon thread, so callers (and tests) may join it.
    """
    thread = threading.Thread(
        target=_open, args=(url,), name="oauthcli-browser", daemon=True
    )
    thread.start()
    return thread
