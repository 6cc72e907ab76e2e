"""Exception hierarchy for modauth.

All exceptions inherit from :class:`ModauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`modauth.exit_codes`.
The CLI entry point :func:`modauth.app.main` catches ``ModauthError`` and
exits with the appropriate code.

The two domain errors of the auth subsystem are :class:`UnauthorizedError`
(the remote rejected the API key, token or security code) and
:class:`TokenRequiredError` (an operation needing a bearer token was
attempted without one). Transport and decoding failures are separate
branches of the hierarchy and propagate unchanged through the auth flow.

Subclass hierarchy::

    ModauthError (exit 1)
    +-- InvalidUsageError      (exit 2)
    |   +-- InvalidOptionsError
    +-- AuthError              (exit 3)
    |   +-- UnauthorizedError
    |   +-- TokenRequiredError
    |   +-- AlreadyConsumedError
    +-- NotFoundError          (exit 4)
    +-- ServerError            (exit 5)
    +-- ConnectionError_       (exit 6)
    +-- RequestError           (exit 7)
    |   +-- RateLimitError
    +-- ResponseDecodeError    (exit 8)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import Optional

from modauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_REQUEST_ERROR,
    EXIT_SERVER_ERROR,
)


class ModauthError(Exception):
    """Base exception for all modauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`modauth.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ModauthError):
    """Raised for invalid CLI arguments or library call arguments."""

    exit_code = EXIT_INVALID_USAGE


class InvalidOptionsError(InvalidUsageError):
    """Raised when provider or link options are missing mandatory values."""


class AuthError(ModauthError):
    """Raised when authentication or authorisation fails."""

    exit_code = EXIT_AUTH_FAILURE


class UnauthorizedError(AuthError):
    """API key, access token or security code is incorrect, revoked or expired."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class TokenRequiredError(AuthError):
    """An access token is required to perform the action."""

    def __init__(self, message: str = "Access token is required"):
        super().__init__(message)


class AlreadyConsumedError(AuthError):
    """An auth flow object was used again after performing its operation.

    Each :class:`~modauth.auth.flow.Auth` instance performs exactly one
    operation. Obtain a fresh one with :meth:`~modauth.client.AsyncClient.auth`.
    """

    def __init__(self, message: str = "Auth flow has already been used"):
        super().__init__(message)


class NotFoundError(ModauthError):
    """Raised when the API returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(ModauthError):
    """Raised when the API returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(ModauthError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RequestError(ModauthError):
    """Raised when the API rejects a request with a 4xx status.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code returned by the API.
    """

    exit_code = EXIT_REQUEST_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(RequestError):
    """Raised on HTTP 429. ``retry_after`` holds the server's hint in seconds."""

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ResponseDecodeError(ModauthError):
    """Raised when a response body is not valid JSON or has an unexpected shape."""

    exit_code = EXIT_DECODE_ERROR


class ConfigError(ModauthError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
