"""HTTP client module for modauth.

Provides :class:`AsyncClient`, a non-blocking client backed by
:class:`httpx.AsyncClient` that carries the active credentials, sends
form-encoded auth requests and decodes their JSON payloads.

Example::

    from modauth.client import AsyncClient

    async with AsyncClient("api-key") as client:
        await client.auth().request_code("foo@example.com")
"""

from modauth.client.async_client import AsyncClient

__all__ = ["AsyncClient"]
