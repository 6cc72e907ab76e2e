"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~modauth.exceptions.ModauthError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ modauth auth exchange ABCDE
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the security code was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or options."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed or a token was required but missing."""

EXIT_NOT_FOUND = 4
"""The requested route was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_REQUEST_ERROR = 7
"""The remote API rejected the request (HTTP 4xx other than 401/403/404)."""

EXIT_DECODE_ERROR = 8
"""The remote API returned a payload that could not be decoded."""
