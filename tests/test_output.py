"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode
- format_response and print_table in each format
- The logging handler bridge
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from modauth import output as output_module
from modauth.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)

TOKEN_DATA = {"access_token": "tok", "date_expires": None}


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("modauth.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("modauth.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    @pytest.mark.parametrize("method", ["success", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic" in captured.err

    def test_format_response_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response(TOKEN_DATA)
        captured = capfd.readouterr()
        assert json.loads(captured.out) == TOKEN_DATA
        assert captured.err == ""

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).error("boom")
        assert capfd.readouterr().err == "Error: boom\n"


class TestQuietMode:
    def test_quiet_suppresses_success_and_suggest(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.success("done")
        mgr.suggest("next")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors_and_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.error("bad")
        mgr.print_data("data")
        captured = capfd.readouterr()
        assert "bad" in captured.err
        assert captured.out == "data\n"


# ------------------------------------------------------------------ #
# Data formats
# ------------------------------------------------------------------ #


class TestFormatResponse:
    def test_plain_dict_is_tab_separated(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(TOKEN_DATA)
        assert capfd.readouterr().out == "access_token\ttok\ndate_expires\t\n"

    def test_plain_scalar(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(42)
        assert capfd.readouterr().out == "42\n"

    def test_rich_produces_output(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response(TOKEN_DATA)
        assert "access_token" in capfd.readouterr().out


class TestPrintTable:
    def test_table_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["api_key", "token"], [["set", "not set"]])
        assert json.loads(capfd.readouterr().out) == [{"api_key": "set", "token": "not set"}]

    def test_table_plain_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["api_key", "token"], [["set", "set"]])
        assert capfd.readouterr().out == "api_key\ttoken\nset\tset\n"

    def test_table_rich_mode_keeps_cells_whole(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(
            ["credentials", "base_url", "expires"],
            [["Credentials(apikey+token)", "https://api.test.mod.io/v1", "1700000000"]],
        )
        out = capfd.readouterr().out
        assert "credentials" in out
        assert "Credentials(apikey+token)" in out
        assert "https://api.test.mod.io/v1" in out


# ------------------------------------------------------------------ #
# Logging bridge
# ------------------------------------------------------------------ #


class TestLoggingHandler:
    def test_rich_handler_when_color(self, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        handler = OutputManager(format=OutputFormat.PLAIN).logging_handler()
        assert isinstance(handler, RichHandler)

    def test_stream_handler_when_no_color(self, capfd, non_tty):
        handler = OutputManager(no_color=True).logging_handler()
        assert not isinstance(handler, RichHandler)

        logger = logging.getLogger("modauth.test_output")
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        try:
            logger.debug("hello %s", "log")
        finally:
            logger.removeHandler(handler)

        assert capfd.readouterr().err == "[DEBUG] modauth.test_output: hello log\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_output_installs_instance(self):
        mgr = OutputManager(no_color=True)
        set_output(mgr)
        assert get_output() is mgr

    def test_convenience_functions_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.success("ok")
        output_module.format_response({"a": 1})
        captured = capfd.readouterr()
        assert captured.err == "ok\n"
        assert captured.out == "a\t1\n"
