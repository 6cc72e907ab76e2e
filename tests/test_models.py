"""Tests for credential, response and settings models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modauth.exceptions import InvalidUsageError
from modauth.models import (
    DEFAULT_HOST,
    TEST_HOST,
    U64_MAX,
    AccessToken,
    ClientSettings,
    Credentials,
    Settings,
    Token,
)


class TestToken:
    def test_expiry_optional(self) -> None:
        assert Token(value="t").expired_at is None

    def test_expiry_bounds(self) -> None:
        assert Token(value="t", expired_at=U64_MAX).expired_at == U64_MAX
        with pytest.raises(ValidationError):
            Token(value="t", expired_at=-1)
        with pytest.raises(ValidationError):
            Token(value="t", expired_at=U64_MAX + 1)

    def test_repr_hides_value(self) -> None:
        token = Token(value="secret", expired_at=5)
        assert repr(token) == "Token(value=***, expired_at=5)"
        assert "secret" not in str(token)

    def test_frozen(self) -> None:
        token = Token(value="t")
        with pytest.raises(ValidationError):
            token.value = "other"  # type: ignore[misc]


class TestCredentials:
    def test_new(self) -> None:
        creds = Credentials.new("key")
        assert creds.api_key == "key"
        assert creds.token is None
        assert not creds.has_token

    def test_with_token(self) -> None:
        creds = Credentials.with_token("key", "tok")
        assert creds.token == Token(value="tok")
        assert creds.has_token

    def test_repr_api_key_only(self) -> None:
        creds = Credentials.new("secret-key")
        assert repr(creds) == "Credentials(apikey)"
        assert str(creds) == "Credentials(apikey)"

    def test_repr_with_token(self) -> None:
        creds = Credentials.with_token("secret-key", "secret-token")
        assert repr(creds) == "Credentials(apikey+token)"
        assert "secret" not in f"{creds}"

    def test_equality(self) -> None:
        assert Credentials.new("k") == Credentials.new("k")
        assert Credentials.new("k") != Credentials.new("other")
        assert Credentials.with_token("k", "t") != Credentials.new("k")

    def test_exchange_returns_new_object(self) -> None:
        original = Credentials.new("k")
        exchanged = original.exchange(Token(value="t", expired_at=9))
        assert exchanged is not original
        assert exchanged.api_key == "k"
        assert exchanged.token == Token(value="t", expired_at=9)
        assert original.token is None

    def test_exchange_replaces_existing_token(self) -> None:
        original = Credentials.with_token("k", "old")
        assert original.exchange(Token(value="new")).token == Token(value="new")
        assert original.token == Token(value="old")

    def test_frozen(self) -> None:
        creds = Credentials.new("k")
        with pytest.raises(ValidationError):
            creds.api_key = "other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("k", Credentials.new("k")),
            (("k", "t"), Credentials.with_token("k", "t")),
            (Credentials.new("x"), Credentials.new("x")),
        ],
    )
    def test_coerce(self, value, expected) -> None:
        assert Credentials.coerce(value) == expected

    @pytest.mark.parametrize("value", [None, 1, ("k",), ["k", "t"]])
    def test_coerce_rejects(self, value) -> None:
        with pytest.raises(InvalidUsageError):
            Credentials.coerce(value)


class TestAccessToken:
    def test_to_token(self) -> None:
        access = AccessToken(access_token="t", date_expires=100)
        assert access.to_token() == Token(value="t", expired_at=100)

    def test_repr_hides_token(self) -> None:
        assert "secret" not in repr(AccessToken(access_token="secret"))


class TestClientSettings:
    def test_defaults(self) -> None:
        settings = ClientSettings()
        assert settings.resolved_base_url() == DEFAULT_HOST
        assert settings.timeout == 30.0
        assert settings.verify_ssl is True
        assert settings.user_agent.startswith("modauth/")

    def test_test_env(self) -> None:
        assert ClientSettings(test_env=True).resolved_base_url() == TEST_HOST

    def test_base_url_wins_and_is_stripped(self) -> None:
        settings = ClientSettings(base_url="https://proxy.local/v1/", test_env=True)
        assert settings.resolved_base_url() == "https://proxy.local/v1"

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ClientSettings(timeout=0)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.api_key_source is None
        assert settings.token_source is None
        assert settings.client == ClientSettings()

    def test_round_trip_keeps_unknown_keys(self) -> None:
        settings = Settings.model_validate(
            {"api_key_source": "env:KEY", "client": {"test_env": True}, "extra": 1}
        )
        dumped = settings.model_dump(mode="json")
        assert dumped["extra"] == 1
        assert dumped["client"]["test_env"] is True
