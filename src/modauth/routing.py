"""Fixed table of mod.io authentication routes.

Every auth request is a ``POST`` with a form-encoded body. A route also
declares whether it can only be called with an access token; the client
checks that before sending anything.
"""

from __future__ import annotations

import enum


class Route(enum.Enum):
    """Authentication routes as ``(method, path, token_required)`` triples."""

    AUTH_EMAIL_REQUEST = ("POST", "/oauth/emailrequest", False)
    AUTH_EMAIL_EXCHANGE = ("POST", "/oauth/emailexchange", False)
    AUTH_GALAXY = ("POST", "/external/galaxyauth", False)
    AUTH_ITCHIO = ("POST", "/external/itchioauth", False)
    AUTH_OCULUS = ("POST", "/external/oculusauth", False)
    AUTH_STEAM = ("POST", "/external/steamauth", False)
    LINK_ACCOUNT = ("POST", "/external/link", True)

    @property
    def method(self) -> str:
        return self.value[0]

    @property
    def path(self) -> str:
        return self.value[1]

    @property
    def token_required(self) -> bool:
        return self.value[2]
