"""Authentication flow -- turn email codes and provider tickets into credentials.

:class:`Auth` performs the mod.io authentication operations against the
client it was obtained from. See the `mod.io authentication docs
<https://docs.mod.io/#authentication-2>`_ for the server side of each
flow.

Every instance is single-use: it performs one operation and is then
spent. Calling a second operation raises
:class:`~modauth.exceptions.AlreadyConsumedError` before any request is
made. Exchanges never modify the client's credentials; they return new
:class:`~modauth.models.Credentials` that the caller installs with
:meth:`~modauth.client.AsyncClient.with_credentials`::

    async with AsyncClient(Credentials.new("api-key")) as client:
        await client.auth().request_code("foo@example.com")
        creds = await client.auth().security_code(input("Code: "))
        authed = client.with_credentials(creds)

If any operation fails, the client's existing credentials stay valid.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from modauth.auth.encoding import encode_query
from modauth.auth.link import LinkOptions
from modauth.auth.options import AuthOptions, require_text, route_for
from modauth.exceptions import AlreadyConsumedError, InvalidOptionsError
from modauth.models import AccessToken, Credentials, Message
from modauth.routing import Route

if TYPE_CHECKING:
    from modauth.client.async_client import AsyncClient

logger = logging.getLogger(__name__)


class Auth:
    """Single-use authentication flow bound to an :class:`~modauth.client.AsyncClient`.

    Obtain instances with :meth:`AsyncClient.auth()
    <modauth.client.AsyncClient.auth>` rather than constructing them
    directly.
    """

    def __init__(self, client: AsyncClient) -> None:
        self._client = client
        self._consumed = False

    @property
    def consumed(self) -> bool:
        """Whether this flow has already performed its operation."""
        return self._consumed

    def _spend(self, operation: str) -> None:
        if self._consumed:
            raise AlreadyConsumedError(
                f"Auth flow has already been used; cannot run '{operation}'. "
                "Call client.auth() again."
            )
        self._consumed = True

    async def request_code(self, email: str) -> None:
        """Request a security code be sent to *email*. [required: apikey]"""
        self._spend("request_code")
        body = encode_query({"email": require_text("email", email)})
        message = await self._client.send(Route.AUTH_EMAIL_REQUEST, body, Message)
        logger.debug("Security code requested: %s", message.message)

    async def security_code(self, code: str) -> Credentials:
        """Exchange a security code for an access token. [required: apikey]

        Returns:
            New credentials with the client's API key and the issued token.

        Raises:
            UnauthorizedError: If the code is rejected by the server.
        """
        self._spend("security_code")
        body = encode_query({"security_code": require_text("security_code", code)})
        access = await self._client.send(Route.AUTH_EMAIL_EXCHANGE, body, AccessToken)
        return self._client.credentials.exchange(access.to_token())

    async def external(self, options: AuthOptions) -> Credentials:
        """Authenticate via an external service (GOG Galaxy, itch.io, Oculus, Steam).

        Example::

            creds = await client.auth().external(SteamOptions("ticket"))

            opts = GalaxyOptions("ticket").email("foo@example.com")
            creds = await client.auth().external(opts)

        Returns:
            New credentials with the client's API key and the issued token.

        Raises:
            InvalidOptionsError: If *options* is not a provider options object.
        """
        self._spend("external")
        route = route_for(options)
        logger.debug("Authenticating via %s", options.provider.value)
        access = await self._client.send(route, options.to_query_string(), AccessToken)
        return self._client.credentials.exchange(access.to_token())

    async def link(self, options: LinkOptions) -> None:
        """Link an external account with the authenticated user's email. [required: token]

        Raises:
            TokenRequiredError: If the client's credentials carry no token.
        """
        self._spend("link")
        if not isinstance(options, LinkOptions):
            raise InvalidOptionsError(
                f"Expected LinkOptions, got {type(options).__name__}"
            )
        await self._client.send(Route.LINK_ACCOUNT, options.to_query_string(), Message)
