"""The bundle of collaborators a dispatcher works with."""

from __future__ import annotations

from dataclasses import dataclass, fields

from kiln.core.protocols import (
    CompilationPipeline,
    DependencyResolver,
    DocsRenderer,
    EntryPointRunner,
    Exporter,
    LanguageServer,
    ProjectScaffolder,
    RegistryClient,
    SourceTools,
)


@dataclass(frozen=True, slots=True)
class Toolchain:
    """One implementation per collaborator role.

    Field names double as the role names used for plugin discovery.
    """

    resolver: DependencyResolver
    compiler: CompilationPipeline
    runner: EntryPointRunner
    exporter: Exporter
    docs: DocsRenderer
    registry: RegistryClient
    source_tools: SourceTools
    language_server: LanguageServer
    scaffolder: ProjectScaffolder


ROLES: tuple[str, ...] = tuple(f.name for f in fields(Toolchain))
