"""Rich-based progress reporting for build pipelines.

:class:`RichTelemetry` is the visible :class:`~kiln.core.protocols.Telemetry`
sink: each event becomes one status line on stderr with a right-aligned,
coloured verb, e.g.::

      Resolving versions
    Downloading kiln_stdlib
      Compiling my_app
       Compiled in 0.41s

The silent sink is :class:`~kiln.core.telemetry.NullTelemetry`.
"""

from __future__ import annotations

import time

from kiln.cli.console import _ConsoleProxy, console, escape
from kiln.core.protocols import Telemetry
from kiln.core.telemetry import NullTelemetry


def _elapsed(start: float) -> str:
    return f"{time.monotonic() - start:.2f}s"


class RichTelemetry:
    """Visible progress sink writing to stderr."""

    def __init__(self, output: _ConsoleProxy | None = None) -> None:
        self._output = output or console

    def _status(self, verb: str, detail: str) -> None:
        self._output.print(f"[bold magenta]{verb:>11}[/] {escape(detail)}", soft_wrap=True)

    # ------------------------------------------------------------------
    # Telemetry protocol
    # ------------------------------------------------------------------

    def waiting_for_build_directory_lock(self) -> None:
        self._status("Waiting", "for build directory lock")

    def resolving_package_versions(self) -> None:
        self._status("Resolving", "versions")

    def downloading_package(self, name: str) -> None:
        self._status("Downloading", name)

    def packages_downloaded(self, start: float, count: int) -> None:
        noun = "package" if count == 1 else "packages"
        self._status("Downloaded", f"{count} {noun} in {_elapsed(start)}")

    def compiling_package(self, name: str) -> None:
        self._status("Compiling", name)

    def checking_package(self, name: str) -> None:
        self._status("Checking", name)

    def compiled(self, start: float) -> None:
        self._status("Compiled", f"in {_elapsed(start)}")

    def running(self, module: str) -> None:
        self._status("Running", f"{module}.main")


def select_telemetry(no_print_progress: bool) -> Telemetry:
    """Pick the sink for this invocation; chosen once, passed everywhere."""
    if no_print_progress:
        return NullTelemetry()
    return RichTelemetry()
