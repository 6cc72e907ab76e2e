"""Typer application factory and CLI entry point for modauth.

This module wires together the top-level Typer application and registers
the ``auth`` sub-command group. The :func:`main` function is the
console-script entry point declared in ``pyproject.toml``. It installs a
SIGINT handler, invokes the Typer app, converts
:class:`~modauth.exceptions.ModauthError` into its exit code, and writes a
crash log for anything unexpected.

See Also:
    :mod:`modauth.config`: Settings and credential resolution.
    :mod:`modauth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from modauth import __version__
from modauth.commands.auth import auth_app
from modauth.exit_codes import EXIT_GENERIC_FAILURE
from modauth.output import OutputFormat, OutputManager, set_output

app = typer.Typer(
    name="modauth",
    help="Obtain and manage mod.io access tokens.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(auth_app, name="auth", help="Authentication flows.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"modauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", "-k", help="mod.io API key (overrides MODAUTH_API_KEY)."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", help="Existing access token (overrides MODAUTH_TOKEN)."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the API base URL."
    ),
    test_env: Optional[bool] = typer.Option(
        None, "--test-env/--live", help="Use the mod.io test environment."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~modauth.output.OutputManager`, configures
    logging, and stores connection options in ``ctx.obj`` for the
    sub-commands.
    """
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet)
    set_output(output)
    _configure_logging(output, verbose)

    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["token"] = token
    ctx.obj["base_url"] = base_url
    ctx.obj["test_env"] = test_env


def _configure_logging(output: OutputManager, verbose: bool) -> None:
    """Route ``modauth`` log records through the output manager's stderr console."""
    logger = logging.getLogger("modauth")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(output.logging_handler())
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from modauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``modauth`` console script.

    Unhandled :class:`~modauth.exceptions.ModauthError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from modauth.exceptions import ModauthError
        from modauth.output import error

        if isinstance(exc, ModauthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
