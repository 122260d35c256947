"""Silent telemetry sink.

The visible counterpart lives in :mod:`kiln.cli.progress` because it
renders to the terminal.
"""

from __future__ import annotations


class NullTelemetry:
    """A :class:`~kiln.core.protocols.Telemetry` that discards every event."""

    def waiting_for_build_directory_lock(self) -> None:
        pass

    def resolving_package_versions(self) -> None:
        pass

    def downloading_package(self, name: str) -> None:
        pass

    def packages_downloaded(self, start: float, count: int) -> None:
        pass

    def compiling_package(self, name: str) -> None:
        pass

    def checking_package(self, name: str) -> None:
        pass

    def compiled(self, start: float) -> None:
        pass

    def running(self, module: str) -> None:
        pass
