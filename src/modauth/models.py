"""Canonical Pydantic models shared across all modauth modules.

The models fall into three groups:

**Credential models** -- immutable values produced and consumed by every
auth flow:
    :class:`Token` and :class:`Credentials`.

**Response models** -- shapes of the JSON payloads returned by mod.io auth
routes:
    :class:`AccessToken` and :class:`Message`.

**Configuration models** -- serialised as JSON in the user's config
directory:
    :class:`ClientSettings` and :class:`Settings`.

Credential models are frozen: a :class:`Credentials` object never changes
after construction. Exchanging a security code or an external ticket
produces a new object (see :meth:`Credentials.exchange`), so a handle held
before the exchange keeps describing the pre-exchange state.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from modauth import __version__
from modauth.exceptions import InvalidUsageError

U64_MAX = 2**64 - 1
"""Largest value accepted for Unix timestamps and external account ids."""

DEFAULT_HOST = "https://api.mod.io/v1"
"""Production API base URL."""

TEST_HOST = "https://api.test.mod.io/v1"
"""Test environment API base URL."""


# --- Credentials ---


class Token(BaseModel):
    """OAuth2 access token with an optional Unix expiry timestamp.

    ``expired_at`` is opaque data passed through from the server or the
    caller. It is never compared against the current time.
    """

    model_config = ConfigDict(frozen=True)

    value: str
    expired_at: Optional[int] = Field(default=None, ge=0, le=U64_MAX)

    def __repr__(self) -> str:
        return f"Token(value=***, expired_at={self.expired_at!r})"

    __str__ = __repr__


class Credentials(BaseModel):
    """mod.io credentials: an API key with an optional access token.

    The textual representation only reveals whether a token is present::

        >>> Credentials.with_token("key", "secret")
        Credentials(apikey+token)

    Instances are frozen. Use :meth:`exchange` to derive new credentials
    from a freshly issued :class:`Token`.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str
    token: Optional[Token] = None

    @classmethod
    def new(cls, api_key: str) -> Credentials:
        """Create credentials holding only an API key."""
        return cls(api_key=api_key)

    @classmethod
    def with_token(cls, api_key: str, token: str) -> Credentials:
        """Create credentials holding an API key and an access token without expiry."""
        return cls(api_key=api_key, token=Token(value=token))

    @classmethod
    def coerce(cls, value: Union[Credentials, str, tuple[str, str]]) -> Credentials:
        """Build credentials from an API key, an ``(api_key, token)`` pair, or themselves.

        Raises:
            InvalidUsageError: If *value* is none of the accepted shapes.
        """
        if isinstance(value, Credentials):
            return value
        if isinstance(value, str):
            return cls.new(value)
        if isinstance(value, tuple) and len(value) == 2:
            api_key, token = value
            return cls.with_token(api_key, token)
        raise InvalidUsageError(
            f"Cannot build credentials from {type(value).__name__}"
        )

    @property
    def has_token(self) -> bool:
        return self.token is not None

    def exchange(self, token: Token) -> Credentials:
        """Return new credentials with this API key and *token*."""
        return Credentials(api_key=self.api_key, token=token)

    def __repr__(self) -> str:
        if self.token is not None:
            return "Credentials(apikey+token)"
        return "Credentials(apikey)"

    __str__ = __repr__


# --- Responses ---


class AccessToken(BaseModel):
    """Payload returned by the email exchange and external auth routes."""

    access_token: str
    date_expires: Optional[int] = Field(default=None, ge=0, le=U64_MAX)

    def to_token(self) -> Token:
        return Token(value=self.access_token, expired_at=self.date_expires)

    def __repr__(self) -> str:
        return f"AccessToken(access_token=***, date_expires={self.date_expires!r})"


class Message(BaseModel):
    """Acknowledgment payload (``{"code": 200, "message": "..."}``)."""

    code: int
    message: str


# --- Configuration ---


class ClientSettings(BaseModel):
    """HTTP settings applied to every auth request.

    ``base_url`` overrides the host selected by ``test_env``.
    """

    base_url: Optional[str] = Field(
        default=None, description="Override the API base URL"
    )
    test_env: bool = Field(
        default=False, description="Use the mod.io test environment"
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    user_agent: str = Field(default=f"modauth/{__version__}")

    def resolved_base_url(self) -> str:
        """Return the base URL requests are sent to, without a trailing slash."""
        if self.base_url:
            return self.base_url.rstrip("/")
        return TEST_HOST if self.test_env else DEFAULT_HOST


class Settings(BaseModel):
    """User-wide configuration persisted at ``~/.config/modauth/config.json``.

    Loaded and saved by :func:`~modauth.config.load_settings` and
    :func:`~modauth.config.save_settings`. Credential fields hold *source
    descriptors* (``env:VAR``, ``file:/path``, ``prompt``), never secrets.
    See :func:`~modauth.config.resolve_settings` for the precedence chain.
    """

    model_config = ConfigDict(extra="allow")

    api_key_source: Optional[str] = Field(
        default=None,
        description="Credential source for the API key: env:VAR, file:/path, prompt",
    )
    token_source: Optional[str] = Field(
        default=None,
        description="Credential source for an existing access token",
    )
    client: ClientSettings = Field(default_factory=ClientSettings)
