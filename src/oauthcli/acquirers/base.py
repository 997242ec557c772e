"""Abstract base class for authorization code acquirers.

A :class:`CodeAcquirer` obtains the one-time authorization code after the
user has approved access in the browser. The flow orchestrator only relies
on :meth:`CodeAcquirer.acquire`, so it never needs to know whether the code
arrived through a local redirect listener or was typed into the terminal.

To add a strategy, subclass :class:`CodeAcquirer`, return a new
:class:`~oauthcli.models.ReadCodeMode` from :attr:`~CodeAcquirer.mode`, and
register a factory in :data:`oauthcli.acquirers.ACQUIRERS`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from oauthcli.models import ReadCodeMode


class CodeAcquirer(ABC):
    """Produces exactly one authorization code, or fails.

    Instances are single-use: each call to
    :func:`~oauthcli.flow.get_token` creates a fresh acquirer, and all
    resources it opens (sockets, timers) are released before
    :meth:`acquire` returns or raises.
    """

    @property
    @abstractmethod
    def mode(self) -> ReadCodeMode:
        """Return the :class:`~oauthcli.models.ReadCodeMode` this acquirer implements."""
        ...

    @abstractmethod
    def acquire(self) -> str:
        """Block until the authorization code is available and return it.

        Raises:
            CodeAcquisitionError: If no code could be obtained.
        """
        ...
