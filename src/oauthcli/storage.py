"""Write a token to a caller-chosen file.

The token is written once, atomically (temp file in the same directory,
fsync, ``os.replace``) with ``0o600`` permissions so the access token is
never world-readable, even momentarily. Nothing is ever read back.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from oauthcli.models import Token


def token_to_json(token: Token) -> str:
    """Render *token* as the output JSON document."""
    return json.dumps(token.to_json_dict(), indent=2) + "\n"


def save_token(token: Token, path: Union[str, Path]) -> Path:
    """Atomically write *token* as JSON to *path*.

    Returns:
        The resolved path that was written.
    """
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Optional[str] = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(token_to_json(token))
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, target)
        tmp_path = None
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
    return target
