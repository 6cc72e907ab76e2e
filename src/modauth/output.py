"""Terminal output for the ``modauth`` CLI.

Issued tokens and credential status are data and go to stdout, so they
can be captured with ``$(modauth ...)`` or piped to ``jq``. Everything
else (confirmations, next-step hints, errors and log records) goes to
stderr.

Three renderings are available for data: ``json`` for scripts, ``plain``
(tab-separated ``key<TAB>value`` lines) for shells, and ``rich`` for an
interactive colour terminal. ``auto`` picks ``rich`` on a colour TTY and
``plain`` otherwise. ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all
turn colour off.

The :class:`OutputManager` built by :func:`~modauth.app.main_callback` is
installed with :func:`set_output`; commands use the module-level
functions below.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How data written to stdout is rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders command results on stdout and diagnostics on stderr.

    Args:
        format: Rendering for data. ``AUTO`` is resolved once, here.
        no_color: Strip colour and markup from everything.
        quiet: Drop confirmations and hints; errors and data still print.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Write a result (usually the issued token) to stdout."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.PLAIN:
            self._print_plain(data)
        else:
            self._stdout.print(Syntax(_to_json(data), "json", word_wrap=True))

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Write rows to stdout: JSON records, TSV lines, or a Rich table."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return
        table = Table(header_style="bold cyan")
        for header in headers:
            table.add_column(header, no_wrap=True)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # --- stderr ---

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message, "green")

    def suggest(self, message: str) -> None:
        """Hint at the next command to run. Hidden by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"→ {message}", "dim")

    def error(self, message: str) -> None:
        """Report a failure. Printed even with ``--quiet``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def logging_handler(self) -> logging.Handler:
        """Handler that writes :mod:`logging` records to this manager's stderr."""
        if self._no_color:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
            return handler
        return RichHandler(console=self._stderr, show_path=False, show_time=False)

    # --- helpers ---

    def _diagnostic(self, plain: str, markup: str, style: Optional[str] = None) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        elif style is not None:
            self._stderr.print(markup, style=style)
        else:
            self._stderr.print(markup)

    def _print_plain(self, data: Any) -> None:
        if not isinstance(data, dict):
            self.print_data(str(data))
            return
        for key, value in data.items():
            self.print_data(f"{key}\t{'' if value is None else value}")


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# --- global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    get_output().print_table(headers, rows)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def error(message: str) -> None:
    get_output().error(message)
