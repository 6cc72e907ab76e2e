"""Options for authenticating through external identity providers.

Each provider accepts a different set of form fields. The four option
builders in this module share one base class, :class:`ProviderOptions`,
which owns a key-unique field set and encodes it with
:func:`~modauth.auth.encoding.encode_query`:

=================  ====================================================
Builder            Fields
=================  ====================================================
``GalaxyOptions``  ``appdata``, ``email``?, ``date_expires``?
``ItchioOptions``  ``itchio_token``, ``email``?, ``date_expires``?
``OculusOptions``  ``nonce``, ``user_id``, ``auth_token``, ``email``?,
                   ``date_expires``?
``SteamOptions``   ``appdata``, ``email``?, ``date_expires``?
=================  ====================================================

Mandatory fields are passed to the constructor. The optional setters
return the builder so calls can be chained::

    opts = GalaxyOptions("ticket").email("foo@example.com")

:data:`AuthOptions` is the closed union of the four builders accepted by
:meth:`~modauth.auth.flow.Auth.external`; :func:`route_for` maps each of
them onto its route.
"""

from __future__ import annotations

import enum
from typing import ClassVar, Optional, TypeVar, Union

from modauth.auth.encoding import encode_query
from modauth.exceptions import InvalidOptionsError
from modauth.models import U64_MAX
from modauth.routing import Route

ONE_WEEK = 7 * 24 * 60 * 60
"""Default and maximum token validity for itch.io, in seconds."""

ONE_YEAR = 365 * 24 * 60 * 60
"""Default and maximum token validity for Galaxy, Oculus and Steam, in seconds."""

_O = TypeVar("_O", bound="ProviderOptions")


class Provider(str, enum.Enum):
    """External identity providers supported by mod.io."""

    GALAXY = "galaxy"
    ITCHIO = "itchio"
    OCULUS = "oculus"
    STEAM = "steam"


def require_text(name: str, value: Optional[str]) -> str:
    """Return *value* if it is a non-empty string.

    Only presence is checked; the content is passed through untouched.

    Raises:
        InvalidOptionsError: If *value* is missing, empty or not a string.
    """
    if not isinstance(value, str) or not value:
        raise InvalidOptionsError(f"'{name}' is required")
    return value


def to_unsigned(name: str, value: Union[int, str]) -> str:
    """Return the decimal string of an unsigned 64-bit integer.

    Accepts an ``int`` or a string of ASCII decimal digits.

    Raises:
        InvalidOptionsError: If *value* is not an integer in ``0..2**64-1``.
    """
    if isinstance(value, bool):
        raise InvalidOptionsError(f"'{name}' must be an integer, not a bool")
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise InvalidOptionsError(f"'{name}' must be a decimal integer: {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise InvalidOptionsError(
            f"'{name}' must be an integer, not {type(value).__name__}"
        )
    if value < 0 or value > U64_MAX:
        raise InvalidOptionsError(f"'{name}' is out of range: {value}")
    return str(value)


class ProviderOptions:
    """Base class for external provider options.

    Subclasses seed the field set with their mandatory values and set the
    :attr:`provider` tag used for routing.

    Attributes:
        provider: Identity provider these options authenticate against.
        max_validity: Longest token lifetime the provider grants, in
            seconds. Informational only: values passed to
            :meth:`expired_at` are not checked against it.
    """

    provider: ClassVar[Provider]
    max_validity: ClassVar[int] = ONE_YEAR

    def __init__(self, params: dict[str, str]) -> None:
        self._params: dict[str, str] = dict(params)

    def email(self: _O, email: str) -> _O:
        """Email address to associate with the authenticated account."""
        self._params["email"] = require_text("email", email)
        return self

    def expired_at(self: _O, timestamp: int) -> _O:
        """Unix timestamp at which the returned token will expire.

        The server refuses values beyond :attr:`max_validity` from now;
        this method does not check that.
        """
        self._params["date_expires"] = to_unsigned("expired_at", timestamp)
        return self

    @property
    def params(self) -> dict[str, str]:
        """A copy of the current field set."""
        return dict(self._params)

    def to_query_string(self) -> str:
        return encode_query(self._params)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fields={sorted(self._params)!r})"


class GalaxyOptions(ProviderOptions):
    """Authentication options for an encrypted GOG Galaxy app ticket.

    The returned token is valid for up to one common year.
    """

    provider = Provider.GALAXY

    def __init__(self, ticket: str) -> None:
        super().__init__({"appdata": require_text("ticket", ticket)})


class ItchioOptions(ProviderOptions):
    """Authentication options for an itch.io JWT token.

    The returned token is valid for up to one week.
    """

    provider = Provider.ITCHIO
    max_validity = ONE_WEEK

    def __init__(self, token: str) -> None:
        super().__init__({"itchio_token": require_text("token", token)})


class OculusOptions(ProviderOptions):
    """Authentication options for an Oculus user.

    ``user_id`` is the numeric Oculus user id; a decimal string is also
    accepted. The returned token is valid for up to one common year.
    """

    provider = Provider.OCULUS

    def __init__(self, nonce: str, user_id: Union[int, str], auth_token: str) -> None:
        super().__init__(
            {
                "nonce": require_text("nonce", nonce),
                "user_id": to_unsigned("user_id", user_id),
                "auth_token": require_text("auth_token", auth_token),
            }
        )


class SteamOptions(ProviderOptions):
    """Authentication options for an encrypted Steam app ticket.

    The returned token is valid for up to one common year.
    """

    provider = Provider.STEAM

    def __init__(self, ticket: str) -> None:
        super().__init__({"appdata": require_text("ticket", ticket)})


AuthOptions = Union[GalaxyOptions, ItchioOptions, OculusOptions, SteamOptions]
"""Any of the four provider option builders."""

_ROUTES: dict[Provider, Route] = {
    Provider.GALAXY: Route.AUTH_GALAXY,
    Provider.ITCHIO: Route.AUTH_ITCHIO,
    Provider.OCULUS: Route.AUTH_OCULUS,
    Provider.STEAM: Route.AUTH_STEAM,
}


def route_for(options: AuthOptions) -> Route:
    """Return the auth route for *options*.

    Raises:
        InvalidOptionsError: If *options* is not one of the provider builders.
    """
    if not isinstance(options, ProviderOptions):
        raise InvalidOptionsError(
            f"Expected provider options, got {type(options).__name__}"
        )
    return _ROUTES[options.provider]
