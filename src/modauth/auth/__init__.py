"""Authentication flows for mod.io.

This package turns email security codes and external provider tickets into
:class:`~modauth.models.Credentials`, and links external accounts.

The main entry points are:

- :class:`Auth` -- the single-use flow returned by
  :meth:`~modauth.client.AsyncClient.auth`.
- :class:`GalaxyOptions`, :class:`ItchioOptions`, :class:`OculusOptions`,
  :class:`SteamOptions` -- provider option builders accepted by
  :meth:`Auth.external`.
- :class:`LinkOptions` -- options for :meth:`Auth.link`.
- :func:`encode_query` -- the sorted form encoder all bodies go through.

Typical usage::

    from modauth.auth import ItchioOptions

    opts = ItchioOptions("jwt").expired_at(now + ONE_WEEK)
    creds = await client.auth().external(opts)
"""

from modauth.auth.encoding import encode_query
from modauth.auth.flow import Auth
from modauth.auth.link import LinkOptions, Service
from modauth.auth.options import (
    ONE_WEEK,
    ONE_YEAR,
    AuthOptions,
    GalaxyOptions,
    ItchioOptions,
    OculusOptions,
    Provider,
    ProviderOptions,
    SteamOptions,
    route_for,
)

__all__ = [
    "Auth",
    "AuthOptions",
    "GalaxyOptions",
    "ItchioOptions",
    "LinkOptions",
    "ONE_WEEK",
    "ONE_YEAR",
    "OculusOptions",
    "Provider",
    "ProviderOptions",
    "Service",
    "SteamOptions",
    "encode_query",
    "route_for",
]
