"""Shared test fixtures for modauth.

Provides fixtures for building clients on top of :class:`httpx.MockTransport`,
isolating configuration directories and environment variables, and
resetting the global output manager between tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional, Union
from urllib.parse import parse_qsl

import httpx
import pytest

from modauth.client import AsyncClient
from modauth.models import ClientSettings, Credentials
from modauth.output import OutputFormat, OutputManager, reset_output, set_output

BASE_URL = "https://api.test.example/v1"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the streams.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Mock transport
# ---------------------------------------------------------------------------


class RecordingHandler:
    """MockTransport handler that records every request it answers."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def last_body(self) -> str:
        return self.last.content.decode("utf-8")

    def last_form(self) -> dict[str, str]:
        return dict(parse_qsl(self.last_body()))


def json_responder(
    data: Any, status_code: int = 200, headers: Optional[dict[str, str]] = None
) -> Callable[[httpx.Request], httpx.Response]:
    """A responder returning the same JSON payload for every request."""

    def _respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=json.dumps(data).encode("utf-8"),
            headers={"content-type": "application/json", **(headers or {})},
        )

    return _respond


@pytest.fixture
def make_client() -> Callable[..., tuple[AsyncClient, RecordingHandler]]:
    """Factory building an :class:`AsyncClient` backed by a recording MockTransport.

    *payload* is either a JSON-serialisable body returned for every request
    or a callable ``(httpx.Request) -> httpx.Response``.

    Usage::

        client, handler = make_client({"code": 200, "message": "ok"})
        async with client:
            ...
    """

    def _make(
        payload: Any,
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
        credentials: Union[Credentials, str, tuple[str, str]] = "api-key",
    ) -> tuple[AsyncClient, RecordingHandler]:
        responder = payload if callable(payload) else json_responder(payload, status_code, headers)
        handler = RecordingHandler(responder)
        http_client = httpx.AsyncClient(
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler),
        )
        client = AsyncClient(
            credentials,
            settings=ClientSettings(base_url=BASE_URL),
            http_client=http_client,
        )
        return client, handler

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path and clears
    all MODAUTH_* environment variables.
    """
    monkeypatch.setattr("modauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "MODAUTH_API_KEY",
        "MODAUTH_TOKEN",
        "MODAUTH_BASE_URL",
        "MODAUTH_TEST_ENV",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
