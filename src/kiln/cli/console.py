"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.

Diagnostics and progress go to stderr through :data:`console`; the
output a command exists to produce (package lists, trees, preludes)
goes to stdout through :data:`stdout_console`.
"""

from __future__ import annotations

import sys
from typing import Any

from kiln.exceptions import EnvironmentError

_colour: bool = True


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def configure_console(colour: bool) -> None:
    """Set once at startup from ``KILN_LOG_NOCOLOUR``."""
    global _colour
    _colour = colour


def get_rich_console(stderr: bool = True) -> Any:
    """Create a Rich console instance targeting stderr (or stdout)."""
    console_class = _load_rich_console_class()
    return console_class(stderr=stderr, no_color=not _colour)


def escape(text: str) -> str:
    """Escape Rich markup in user-supplied *text*."""
    try:
        from rich.markup import escape as rich_escape
    except ModuleNotFoundError:
        return text
    return rich_escape(text)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def __init__(self, *, stderr: bool = True) -> None:
        self._stderr = stderr

    @property
    def _stream(self) -> Any:
        return sys.stderr if self._stderr else sys.stdout

    def print(self, *objects: object, **kwargs: Any) -> None:
        """Render with Rich when available, else plain print."""
        try:
            rich_console = get_rich_console(stderr=self._stderr)
        except EnvironmentError:
            print(*objects, file=self._stream)
            return
        rich_console.print(*objects, **kwargs)

    def out(self, text: str) -> None:
        """Write *text* verbatim: no markup, no highlighting, no wrapping."""
        try:
            rich_console = get_rich_console(stderr=self._stderr)
        except EnvironmentError:
            print(text, file=self._stream)
            return
        rich_console.out(text, highlight=False)


console = _ConsoleProxy()
stdout_console = _ConsoleProxy(stderr=False)
