"""oauthcli -- OAuth 2.0 authorization code grant for terminals and headless hosts.

The package loads an OAuth client configuration, builds the authorization
URL, captures the one-time code (through a short-lived local redirect
listener or a console prompt), and exchanges it for an access token.

Typical library usage::

    from oauthcli import get_token, load_json_config

    config = load_json_config("client.json")
    token = get_token(config, scope=["openid", "email"])
    print(token.access_token)

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models (``Config``, ``Token``, ``Settings``).
    config: Config normalisation, loading, and settings resolution.
    auth_url: Authorization URL builder.
    acquirers: Code acquisition strategies.
    exchange: Token endpoint exchange.
    flow: End-to-end orchestration.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"

from oauthcli.auth_url import build_auth_url  # noqa: E402
from oauthcli.config import load_json_config, normalize_config  # noqa: E402
from oauthcli.exchange import exchange_code  # noqa: E402
from oauthcli.flow import get_token  # noqa: E402
from oauthcli.models import Config, ReadCodeMode, Token  # noqa: E402

__all__ = [
    "Config",
    "ReadCodeMode",
    "Token",
    "__version__",
    "build_auth_url",
    "exchange_code",
    "get_token",
    "load_json_config",
    "normalize_config",
]
