"""Asynchronous HTTP client for mod.io auth routes.

This module provides :class:`AsyncClient`, which wraps
:class:`httpx.AsyncClient` and carries the active
:class:`~modauth.models.Credentials`. It injects those credentials into
each request, performs exactly one round trip per call, maps error status
codes onto the :mod:`modauth.exceptions` hierarchy, and validates the JSON
payload into the model the caller asks for.

No request is retried: a failed exchange surfaces immediately
and the caller's credentials remain valid.
"""

from __future__ import annotations

import logging
from typing import Optional, TypeVar, Union

import httpx
from pydantic import BaseModel

from modauth.auth.flow import Auth
from modauth.client.response import decode_payload, error_message, retry_after
from modauth.exceptions import (
    AuthError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    RateLimitError,
    RequestError,
    ServerError,
    TokenRequiredError,
    UnauthorizedError,
)
from modauth.models import ClientSettings, Credentials
from modauth.routing import Route

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class AsyncClient:
    """Asynchronous mod.io client for authentication requests.

    Must be used as an async context manager, which opens the underlying
    :class:`httpx.AsyncClient`. An existing ``httpx.AsyncClient`` may be
    passed in instead; the caller then remains responsible for closing it.

    Args:
        credentials: Active credentials, or anything accepted by
            :meth:`Credentials.coerce` (an API key or an
            ``(api_key, token)`` pair).
        settings: Base URL, timeout and TLS settings. Defaults to the
            production API.
        http_client: Optional pre-built ``httpx.AsyncClient`` to send
            requests through.

    Example::

        async with AsyncClient(Credentials.new("api-key")) as client:
            creds = await client.auth().security_code("ABCDE")
    """

    def __init__(
        self,
        credentials: Union[Credentials, str, tuple[str, str]],
        settings: Optional[ClientSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._credentials = Credentials.coerce(credentials)
        self._settings = settings or ClientSettings()
        self._client = http_client
        self._owns_client = False

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.resolved_base_url(),
                timeout=self._settings.timeout,
                verify=self._settings.verify_ssl,
                headers={"User-Agent": self._settings.user_agent},
            )
            self._owns_client = True
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    # ------------------------------------------------------------------ #
    # Credentials
    # ------------------------------------------------------------------ #

    @property
    def credentials(self) -> Credentials:
        """The credentials attached to every request made by this client."""
        return self._credentials

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def auth(self) -> Auth:
        """Return a fresh single-use :class:`~modauth.auth.flow.Auth` flow."""
        return Auth(self)

    def with_credentials(
        self, credentials: Union[Credentials, str, tuple[str, str]]
    ) -> AsyncClient:
        """Return a client using *credentials* that shares this client's connection pool.

        The returned client does not own the pool: closing it is a no-op,
        and it stops working once this client's context exits.
        """
        return AsyncClient(credentials, settings=self._settings, http_client=self._client)

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    async def send(self, route: Route, body: str, model: type[M]) -> M:
        """Send a form-encoded *body* to *route* and decode the response into *model*.

        Args:
            route: The auth route to call.
            body: An ``application/x-www-form-urlencoded`` body.
            model: Pydantic model the JSON response must match.

        Returns:
            The validated response model.

        Raises:
            TokenRequiredError: If *route* needs a token and the credentials
                carry none. Raised before any I/O.
            UnauthorizedError: On 401.
            AuthError: On 403.
            NotFoundError: On 404.
            RateLimitError: On 429.
            RequestError: On any other 4xx.
            ServerError: On 5xx.
            ConnectionError_: On network or timeout errors.
            ResponseDecodeError: If the payload does not match *model*.
        """
        if route.token_required and not self._credentials.has_token:
            raise TokenRequiredError(
                f"Access token is required for {route.method} {route.path}"
            )
        if self._client is None:
            raise InvalidUsageError(
                "Client not initialised -- use as async context manager"
            )

        headers, params = self._auth_headers()
        headers["Content-Type"] = FORM_CONTENT_TYPE
        headers["Accept"] = "application/json"

        try:
            response = await self._client.request(
                route.method,
                route.path,
                headers=headers,
                params=params,
                content=body,
            )
        except httpx.TimeoutException as exc:
            raise ConnectionError_(f"Request to {route.path} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Connection failed for {route.path}: {exc}") from exc

        logger.debug("%s %s -> %s", route.method, route.path, response.status_code)
        self._map_response_error(response)
        return decode_payload(response, model)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _auth_headers(self) -> tuple[dict[str, str], dict[str, str]]:
        """Bearer header when a token is present, ``api_key`` query param otherwise."""
        token = self._credentials.token
        if token is not None:
            return {"Authorization": f"Bearer {token.value}"}, {}
        return {}, {"api_key": self._credentials.api_key}

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        msg = error_message(response)
        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"

        if status == 401:
            raise UnauthorizedError(full_msg)
        if status == 403:
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        if status == 429:
            raise RateLimitError(full_msg, retry_after=retry_after(response))
        if status >= 500:
            raise ServerError(full_msg)
        raise RequestError(full_msg, status_code=status)

    def __repr__(self) -> str:
        return (
            f"AsyncClient(base_url={self._settings.resolved_base_url()!r}, "
            f"credentials={self._credentials!r})"
        )
