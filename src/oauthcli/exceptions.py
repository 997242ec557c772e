"""Exception hierarchy for oauthcli.

All exceptions inherit from :class:`OAuthCliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oauthcli.exit_codes`.
:func:`oauthcli.app.main` catches ``OAuthCliError`` and exits with that code.
None of these errors is retried internally: each one ends the current flow.

Subclass hierarchy::

    OAuthCliError (exit 1)
    +-- InvalidUsageError               (exit 2)
    +-- ConfigError                     (exit 3)
    |   +-- InvalidConfigShapeError
    |   +-- ConfigValidationError
    +-- CodeAcquisitionError            (exit 4)
    |   +-- CodeTimeoutError
    |   +-- InputClosedError
    |   +-- ListenerBindError
    +-- TokenError                      (exit 5)
        +-- ExchangeRejectedError
        +-- MalformedTokenResponseError
        +-- TokenRequestError           (exit 6)
"""

from __future__ import annotations

from typing import Optional

from oauthcli.exit_codes import (
    EXIT_CODE_ACQUISITION_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TOKEN_FAILURE,
)


class OAuthCliError(Exception):
    """Base exception for all oauthcli errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OAuthCliError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


# --- Configuration ---


class ConfigError(OAuthCliError):
    """Raised when the client configuration cannot be loaded or used."""

    exit_code = EXIT_CONFIG_ERROR


class InvalidConfigShapeError(ConfigError):
    """Raised when the JSON matches none of the known config layouts."""


class ConfigValidationError(ConfigError):
    """Raised when a recognised config layout holds an invalid field.

    Attributes:
        field: Name of the first offending field (e.g. ``"redirect_url"``).
    """

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


# --- Code acquisition ---


class CodeAcquisitionError(OAuthCliError):
    """Raised when the authorization code could not be obtained."""

    exit_code = EXIT_CODE_ACQUISITION_FAILURE


class CodeTimeoutError(CodeAcquisitionError):
    """Raised when no redirect carrying a code arrived before the deadline."""


class InputClosedError(CodeAcquisitionError):
    """Raised when the console stream hit end-of-input before a code was read."""


class ListenerBindError(CodeAcquisitionError):
    """Raised when the local redirect listener cannot bind its port."""


# --- Token exchange ---


class TokenError(OAuthCliError):
    """Raised when exchanging the code for a token fails."""

    exit_code = EXIT_TOKEN_FAILURE


class ExchangeRejectedError(TokenError):
    """Raised when the token endpoint answers with a non-success status.

    Attributes:
        status_code: HTTP status returned by the token endpoint.
        error: The provider's ``error`` value, when the body carried one.
        error_description: The provider's ``error_description``, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.error_description = error_description


class MalformedTokenResponseError(TokenError):
    """Raised when a successful token response is not a valid token."""


class TokenRequestError(TokenError):
    """Raised on network-level failures talking to the token endpoint."""

    exit_code = EXIT_CONNECTION_ERROR
