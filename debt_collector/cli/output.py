"""CLI output with color and quiet mode support.

Honors the NO_COLOR convention (https://no-color.org/), ``--no-color`` and
quiet mode, with plain-text symbol fallbacks.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import TextIO

import click


def should_use_color(
    explicit_flag: bool | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Decide on color: explicit flag, then NO_COLOR/FORCE_COLOR, then TTY."""
    if explicit_flag is not None:
        return explicit_flag
    if "NO_COLOR" in os.environ:
        return False
    if "FORCE_COLOR" in os.environ:
        return True

    stream = stream or sys.stdout
    return bool(hasattr(stream, "isatty") and stream.isatty())


@dataclass
class OutputConfig:
    use_color: bool = True
    quiet: bool = False
    verbose: bool = False
    stream: TextIO | None = None
    err_stream: TextIO | None = None

    @classmethod
    def from_flags(
        cls,
        verbose: bool = False,
        quiet: bool = False,
        no_color: bool = False,
    ) -> OutputConfig:
        use_color = should_use_color(explicit_flag=False if no_color else None)
        return cls(use_color=use_color, quiet=quiet, verbose=verbose)


class OutputManager:
    """Consistent CLI output.

    Example:
        >>> output = OutputManager(OutputConfig(use_color=False))
        >>> output.success("Report written")
        [OK] Report written
    """

    COLORS = {
        "green": "\033[92m",
        "red": "\033[91m",
        "yellow": "\033[93m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "reset": "\033[0m",
    }

    SYMBOLS = {
        "success": {"color": "\033[92m✓\033[0m", "plain": "[OK]"},
        "error": {"color": "\033[91m✗\033[0m", "plain": "[FAIL]"},
        "warning": {"color": "\033[93m⚠\033[0m", "plain": "[WARN]"},
        "info": {"color": "\033[94mℹ\033[0m", "plain": "[INFO]"},
    }

    # Risk bucket -> color
    LEVEL_COLORS = {
        "Critical": "red",
        "High": "red",
        "Medium": "yellow",
        "Low": "green",
    }

    def __init__(self, config: OutputConfig | None = None):
        self.config = config or OutputConfig()

    def _get_symbol(self, symbol_type: str) -> str:
        symbol_data = self.SYMBOLS.get(symbol_type, self.SYMBOLS["info"])
        return symbol_data["color"] if self.config.use_color else symbol_data["plain"]

    def _colorize(self, text: str, color: str) -> str:
        if not self.config.use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def _output(
        self,
        message: str,
        symbol_type: str | None = None,
        err: bool = False,
        force: bool = False,
    ) -> None:
        if self.config.quiet and not err and not force:
            return

        line = f"{self._get_symbol(symbol_type)} {message}" if symbol_type else message
        stream = self.config.err_stream if err else self.config.stream
        click.echo(line, file=stream, err=err)

    def success(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="success", force=force)

    def error(self, message: str) -> None:
        """Always shown, even in quiet mode."""
        self._output(message, symbol_type="error", err=True, force=True)

    def warning(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="warning", force=force)

    def info(self, message: str) -> None:
        self._output(message, symbol_type="info")

    def plain(self, message: str, force: bool = False) -> None:
        self._output(message, force=force)

    def risk_summary(
        self, total: int, critical: int, high: int, medium: int, low: int
    ) -> None:
        """Per-bucket counts, one line each."""
        self._output(f"Total Items: {total}")
        for label, count in (
            ("Critical", critical),
            ("High", high),
            ("Medium", medium),
            ("Low", low),
        ):
            padded = f"{label}:".ljust(10)
            colored = self._colorize(padded, self.LEVEL_COLORS[label])
            self._output(f"  {colored} {count}")
