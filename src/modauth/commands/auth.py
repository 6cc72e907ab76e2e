"""Auth commands -- run mod.io authentication flows from the shell.

Provides the ``modauth auth`` sub-command group. Every command builds an
:class:`~modauth.client.AsyncClient` from the resolved settings and
credentials, runs one flow, and prints the result. Issued tokens go to
stdout and are never written to disk.

Typical workflow::

    modauth auth request-code foo@example.com
    modauth auth exchange ABCDE              # prints the access token
    export MODAUTH_TOKEN=...
    modauth auth link foo@example.com --service steam --id 76561198000000000
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from modauth.auth import (
    AuthOptions,
    GalaxyOptions,
    ItchioOptions,
    LinkOptions,
    OculusOptions,
    Service,
    SteamOptions,
)
from modauth.client import AsyncClient
from modauth.config import ENV_TOKEN, resolve_credentials, resolve_settings
from modauth.exceptions import ModauthError, ResponseDecodeError
from modauth.models import Credentials
from modauth.output import error, format_response, print_table, success, suggest

T = TypeVar("T")

auth_app = typer.Typer(no_args_is_help=True)

_EMAIL_OPTION = typer.Option(
    None, "--email", "-e", help="Email address to associate with the account."
)
_EXPIRES_OPTION = typer.Option(
    None, "--expires-at", help="Unix timestamp at which the token should expire."
)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _build_client(ctx: typer.Context) -> AsyncClient:
    """Resolve settings and credentials from CLI flags, env and config file."""
    obj = ctx.obj or {}
    settings = resolve_settings(
        cli_base_url=obj.get("base_url"),
        cli_test_env=obj.get("test_env"),
    )
    credentials = resolve_credentials(
        settings,
        cli_api_key=obj.get("api_key"),
        cli_token=obj.get("token"),
    )
    return AsyncClient(credentials, settings=settings.client)


def _run(ctx: typer.Context, flow: Callable[[AsyncClient], Awaitable[T]]) -> T:
    """Run *flow* against a fresh client, mapping errors to exit codes."""

    async def _go() -> T:
        async with _build_client(ctx) as client:
            return await flow(client)

    try:
        return asyncio.run(_go())
    except ModauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _emit_credentials(credentials: Credentials) -> None:
    """Print the issued token to stdout."""
    token = credentials.token
    if token is None:
        raise ResponseDecodeError("Server accepted the request but issued no access token")
    format_response({"access_token": token.value, "date_expires": token.expired_at})
    success("Authenticated.")
    suggest(f"Use it with: export {ENV_TOKEN}=<access_token>")


def _external(
    ctx: typer.Context,
    options: AuthOptions,
    email: Optional[str],
    expires_at: Optional[int],
) -> None:
    if email is not None:
        _options(lambda: options.email(email))
    if expires_at is not None:
        _options(lambda: options.expired_at(expires_at))
    credentials = _run(ctx, lambda client: client.auth().external(options))
    _emit_credentials(credentials)


def _options(factory: Callable[[], T]) -> T:
    """Build provider options, turning validation errors into usage errors."""
    try:
        return factory()
    except ModauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


# ------------------------------------------------------------------ #
# Email flow
# ------------------------------------------------------------------ #


@auth_app.command("request-code")
def request_code(
    ctx: typer.Context,
    email: str = typer.Argument(help="Email address to send the security code to."),
) -> None:
    """Request a security code be sent to EMAIL.

    Example::

        modauth auth request-code foo@example.com
    """
    _run(ctx, lambda client: client.auth().request_code(email))
    success(f"Security code sent to {email}.")
    suggest("Exchange it: modauth auth exchange <CODE>")


@auth_app.command("exchange")
def exchange(
    ctx: typer.Context,
    code: str = typer.Argument(help="Security code received by email."),
) -> None:
    """Exchange a security CODE for an access token."""
    credentials = _run(ctx, lambda client: client.auth().security_code(code))
    _emit_credentials(credentials)


# ------------------------------------------------------------------ #
# External providers
# ------------------------------------------------------------------ #


@auth_app.command("steam")
def steam(
    ctx: typer.Context,
    ticket: str = typer.Argument(help="Encrypted Steam app ticket."),
    email: Optional[str] = _EMAIL_OPTION,
    expires_at: Optional[int] = _EXPIRES_OPTION,
) -> None:
    """Authenticate with an encrypted Steam app TICKET."""
    _external(ctx, _options(lambda: SteamOptions(ticket)), email, expires_at)


@auth_app.command("galaxy")
def galaxy(
    ctx: typer.Context,
    ticket: str = typer.Argument(help="Encrypted GOG Galaxy app ticket."),
    email: Optional[str] = _EMAIL_OPTION,
    expires_at: Optional[int] = _EXPIRES_OPTION,
) -> None:
    """Authenticate with an encrypted GOG Galaxy app TICKET."""
    _external(ctx, _options(lambda: GalaxyOptions(ticket)), email, expires_at)


@auth_app.command("itchio")
def itchio(
    ctx: typer.Context,
    token: str = typer.Argument(help="itch.io JWT token."),
    email: Optional[str] = _EMAIL_OPTION,
    expires_at: Optional[int] = _EXPIRES_OPTION,
) -> None:
    """Authenticate with an itch.io JWT TOKEN."""
    _external(ctx, _options(lambda: ItchioOptions(token)), email, expires_at)


@auth_app.command("oculus")
def oculus(
    ctx: typer.Context,
    nonce: str = typer.Argument(help="Nonce provided by the Oculus platform."),
    user_id: int = typer.Argument(help="Numeric Oculus user id."),
    auth_token: str = typer.Argument(help="Oculus user access token."),
    email: Optional[str] = _EMAIL_OPTION,
    expires_at: Optional[int] = _EXPIRES_OPTION,
) -> None:
    """Authenticate an Oculus user."""
    _external(
        ctx,
        _options(lambda: OculusOptions(nonce, user_id, auth_token)),
        email,
        expires_at,
    )


# ------------------------------------------------------------------ #
# Linking and status
# ------------------------------------------------------------------ #


@auth_app.command("link")
def link(
    ctx: typer.Context,
    email: str = typer.Argument(help="Email address of the mod.io account."),
    service: Service = typer.Option(..., "--service", "-s", help="External service."),
    service_id: int = typer.Option(..., "--id", help="Account id on the external service."),
) -> None:
    """Link an external account to EMAIL. Requires an access token.

    Example::

        modauth --token "$TOKEN" auth link foo@example.com --service steam --id 42
    """
    options = _options(lambda: LinkOptions(email, service, service_id))
    _run(ctx, lambda client: client.auth().link(options))
    success(f"Linked {service.value} account {service_id} to {email}.")


@auth_app.command("whoami")
def whoami(ctx: typer.Context) -> None:
    """Show which credentials would be used, without revealing them."""
    try:
        client = _build_client(ctx)
    except ModauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    credentials = client.credentials
    token = credentials.token
    expiry = ""
    if token is not None and token.expired_at is not None:
        expiry = str(token.expired_at)
    print_table(
        ["credentials", "base_url", "expires"],
        [
            [
                repr(credentials),
                client.settings.resolved_base_url(),
                expiry,
            ]
        ],
    )
