"""modauth -- credential issuance and exchange for the mod.io REST API.

This package obtains and manages the authentication material used to talk
to mod.io: an API key plus an optional OAuth2 bearer token. Tokens are
obtained through the email security-code flow or by exchanging a ticket
from an external identity provider (GOG Galaxy, itch.io, Oculus, Steam).
Once authenticated, external accounts can be linked to the user's email.

Typical workflow::

    from modauth import AsyncClient, Credentials
    from modauth.auth import SteamOptions

    async with AsyncClient(Credentials.new("api-key")) as client:
        creds = await client.auth().external(SteamOptions("ticket"))
        authed = client.with_credentials(creds)

Credentials are immutable. Every successful exchange returns a *new*
:class:`Credentials` object carrying the original API key; the previous
object is left untouched.

Modules:
    app: Typer application and CLI entry point.
    auth: Provider options, link options, query encoding and the auth flow.
    client: The async HTTP client that performs auth requests.
    config: XDG-aware settings and credential source resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    models: Pydantic models for credentials, tokens and settings.
    output: stdout/stderr formatting system with Rich support.
    routing: The fixed table of auth routes.
"""

__version__ = "0.1.0"

from modauth.client import AsyncClient  # noqa: E402
from modauth.models import Credentials, Token  # noqa: E402

__all__ = ["AsyncClient", "Credentials", "Token", "__version__"]
