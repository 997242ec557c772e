"""Read the authorization code from the terminal.

Used on headless hosts and whenever the provider cannot redirect to a
local port: the user copies the code from the browser and pastes it at
the prompt. The prompt goes to stderr so stdout stays reserved for the
token JSON.
"""

from __future__ import annotations

import sys

from oauthcli.acquirers.base import CodeAcquirer
from oauthcli.exceptions import InputClosedError
from oauthcli.models import ReadCodeMode

DEFAULT_PROMPT = "oauth code: "


class ConsoleCodePrompt(CodeAcquirer):
    """Prompt once and return the trimmed line. There is no timeout.

    Args:
        prompt: Prompt text shown on stderr.
    """

    def __init__(self, prompt: str = DEFAULT_PROMPT) -> None:
        self.prompt = prompt

    @property
    def mode(self) -> ReadCodeMode:
        return ReadCodeMode.CONSOLE

    def acquire(self) -> str:
        """Read one line from stdin.

        Raises:
            InputClosedError: If stdin reaches end-of-input first.
        """
        sys.stderr.write(self.prompt)
        sys.stderr.flush()
        line = sys.stdin.readline()
        if not line:
            raise InputClosedError(
                "Input closed before an authorization code was entered"
            )
        return line.strip()
