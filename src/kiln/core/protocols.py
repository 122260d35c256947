"""Protocols (interfaces) consumed by the core layer.

These define the contracts that toolchain collaborators must satisfy.
Core code depends ONLY on these protocols: never on concrete
implementations.  Every collaborator call is blocking and either
returns its result or raises a :class:`~kiln.exceptions.KilnError`
subclass; anything else escaping is wrapped by the pipeline.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from kiln.core.models import (
    BuildArtifacts,
    DependencyManagerConfig,
    Manifest,
    OutdatedPackage,
    Options,
    PackageRequirement,
    ProjectPaths,
    RetirementReason,
    Runtime,
    Target,
    Which,
)

if TYPE_CHECKING:
    from kiln.core.commands import CompilePackage, New


class Telemetry(Protocol):
    """Sink for progress events.

    Exactly two implementations exist: a visible reporter and a silent
    one.  Stages receive the sink as a parameter and must never check
    which variant they were given.
    """

    def waiting_for_build_directory_lock(self) -> None: ...

    def resolving_package_versions(self) -> None: ...

    def downloading_package(self, name: str) -> None: ...

    def packages_downloaded(self, start: float, count: int) -> None: ...

    def compiling_package(self, name: str) -> None: ...

    def checking_package(self, name: str) -> None: ...

    def compiled(self, start: float) -> None: ...

    def running(self, module: str) -> None: ...


class DependencyResolver(Protocol):
    """Resolves, locks and downloads dependency packages.

    Owns the parsing and writing of ``manifest.toml`` and the
    dependency tables of ``kiln.toml``.
    """

    def resolve_and_download(
        self,
        paths: ProjectPaths,
        telemetry: Telemetry,
        overrides: Manifest | None,
        excluded: Sequence[str],
        config: DependencyManagerConfig,
    ) -> Manifest:
        """Return the locked manifest, downloading missing packages.

        Raises
        ------
        DependencyError
            When resolution or download fails.
        """
        ...  # pragma: no cover

    def add(
        self,
        paths: ProjectPaths,
        packages: Sequence[PackageRequirement],
        dev: bool,
    ) -> None: ...

    def remove(self, paths: ProjectPaths, packages: Sequence[str]) -> None: ...

    def update(self, paths: ProjectPaths, packages: Sequence[str]) -> None:
        """Re-resolve *packages* (all when empty) to their newest versions."""
        ...  # pragma: no cover

    def outdated(self, paths: ProjectPaths) -> Sequence[OutdatedPackage]: ...


class CompilationPipeline(Protocol):
    def compile(
        self,
        paths: ProjectPaths,
        options: Options,
        manifest: Manifest,
        telemetry: Telemetry,
    ) -> BuildArtifacts:
        """Compile the project and its dependencies.

        Raises
        ------
        CompileError
            When any module fails to compile, or emits warnings while
            ``options.warnings_as_errors`` is set.
        """
        ...  # pragma: no cover

    def compile_package(self, command: CompilePackage) -> None: ...


class EntryPointRunner(Protocol):
    def run(
        self,
        paths: ProjectPaths,
        arguments: Sequence[str],
        target: Target,
        runtime: Runtime | None,
        module: str | None,
        which: Which,
        quiet: bool,
    ) -> None:
        """Execute an entry point of the compiled project.

        Raises
        ------
        EntryPointNotFoundError
            When the entry-point module was not compiled.
        EntryPointFailedError
            When the program exits unsuccessfully.
        """
        ...  # pragma: no cover

    def shell(self, paths: ProjectPaths) -> None: ...


class Exporter(Protocol):
    def erlang_shipment(self, paths: ProjectPaths, artifacts: BuildArtifacts) -> Path: ...

    def hex_tarball(self, paths: ProjectPaths, artifacts: BuildArtifacts) -> Path: ...

    def javascript_prelude(self) -> str: ...

    def typescript_prelude(self) -> str: ...

    def package_interface(
        self, paths: ProjectPaths, artifacts: BuildArtifacts, output: Path,
    ) -> None: ...


class DocsRenderer(Protocol):
    def render(self, paths: ProjectPaths, artifacts: BuildArtifacts) -> Path:
        """Render HTML docs and return the output directory."""
        ...  # pragma: no cover


class RegistryClient(Protocol):
    """Package registry operations.  ``api_key`` may be ``None``."""

    def publish(
        self,
        paths: ProjectPaths,
        artifacts: BuildArtifacts,
        replace: bool,
        api_key: str | None,
    ) -> None: ...

    def publish_docs(
        self, paths: ProjectPaths, docs_directory: Path, api_key: str | None,
    ) -> None: ...

    def remove_docs(self, package: str, version: str, api_key: str | None) -> None: ...

    def retire(
        self,
        package: str,
        version: str,
        reason: RetirementReason,
        message: str | None,
        api_key: str | None,
    ) -> None: ...

    def unretire(self, package: str, version: str, api_key: str | None) -> None: ...

    def revert(self, package: str, version: str, api_key: str | None) -> None: ...

    def transfer_owner(
        self, package: str, new_owner: str, api_key: str | None,
    ) -> None: ...

    def authenticate(self, username: str, password: str) -> None: ...


class SourceTools(Protocol):
    def format(self, files: Sequence[str], stdin: bool, check: bool) -> None:
        """Format *files* in place, or only verify them when *check*.

        Raises
        ------
        FormatError
            In check mode, when any input is not formatted.
        """
        ...  # pragma: no cover

    def fix(self, paths: ProjectPaths) -> None: ...


class LanguageServer(Protocol):
    def serve(self) -> None: ...


class ProjectScaffolder(Protocol):
    def create(self, command: New, version: str) -> Path: ...
