"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to one failure class of the authorization flow and is
referenced by the corresponding :class:`~oauthcli.exceptions.OAuthCliError`
subclass. Shell wrappers can branch on the exit code without parsing stderr.

Example::

    $ oauthcli token --config client.json --no-browser
    $ echo $?
    4   # EXIT_CODE_ACQUISITION_FAILURE -- no redirect arrived in time
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONFIG_ERROR = 3
"""The OAuth client configuration could not be loaded or failed validation."""

EXIT_CODE_ACQUISITION_FAILURE = 4
"""No authorization code was obtained (timeout, closed input, bind failure)."""

EXIT_TOKEN_FAILURE = 5
"""The token endpoint rejected the code or returned an unusable response."""

EXIT_CONNECTION_ERROR = 6
"""The token endpoint could not be reached (timeout, DNS, connection refused)."""

EXIT_INTERRUPTED = 130
"""The user cancelled with Ctrl-C."""
