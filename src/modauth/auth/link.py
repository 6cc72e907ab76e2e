"""Options for linking an external account to the authenticated user's email."""

from __future__ import annotations

import enum
from typing import Union

from modauth.auth.encoding import encode_query
from modauth.auth.options import require_text, to_unsigned
from modauth.exceptions import InvalidOptionsError


class Service(str, enum.Enum):
    """External services an account can be linked with; values are wire names."""

    STEAM = "steam"
    GOG = "gog"
    ITCHIO = "itch"


class LinkOptions:
    """Connect an external account id with an email address.

    Use one of the constructors named after the service::

        LinkOptions.steam("foo@example.com", 76561198000000000)

    Args:
        email: Email address of the mod.io account.
        service: Service the external id belongs to.
        service_id: Numeric account id on that service.
    """

    def __init__(
        self, email: str, service: Union[Service, str], service_id: Union[int, str]
    ) -> None:
        self.email = require_text("email", email)
        try:
            self.service = Service(service)
        except ValueError:
            valid = ", ".join(s.value for s in Service)
            raise InvalidOptionsError(
                f"Unknown service {service!r}. Expected one of: {valid}"
            ) from None
        self.service_id = int(to_unsigned("service_id", service_id))

    @classmethod
    def steam(cls, email: str, steam_id: Union[int, str]) -> LinkOptions:
        return cls(email, Service.STEAM, steam_id)

    @classmethod
    def gog(cls, email: str, gog_id: Union[int, str]) -> LinkOptions:
        return cls(email, Service.GOG, gog_id)

    @classmethod
    def itchio(cls, email: str, itchio_id: Union[int, str]) -> LinkOptions:
        return cls(email, Service.ITCHIO, itchio_id)

    def to_query_string(self) -> str:
        return encode_query(
            {
                "email": self.email,
                "service": self.service.value,
                "service_id": str(self.service_id),
            }
        )

    def __repr__(self) -> str:
        return f"LinkOptions(service={self.service.value!r}, service_id={self.service_id})"
