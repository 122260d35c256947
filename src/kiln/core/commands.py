"""Command variants: the closed set of intents kiln can execute.

Each variant is a frozen dataclass carrying only its own, already
validated fields.  :data:`Command` is the tagged union of all variants;
exactly one is produced per invocation by the CLI parser and consumed
by the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from kiln.core.models import PackageRequirement, RetirementReason, Runtime, Target, Template


# ---------------------------------------------------------------------------
# Shared option groups
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExecutionOptions:
    """Options shared by ``run``, ``test`` and ``dev``."""

    target: Target | None = None
    runtime: Runtime | None = None
    arguments: tuple[str, ...] = ()
    """Pass-through arguments, forwarded verbatim to the entry point."""


# ---------------------------------------------------------------------------
# Build and execution
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Build:
    target: Target | None = None
    warnings_as_errors: bool = False
    no_print_progress: bool = False


@dataclass(frozen=True, slots=True)
class Check:
    target: Target | None = None


@dataclass(frozen=True, slots=True)
class Run:
    execution: ExecutionOptions = ExecutionOptions()
    module: str | None = None
    no_print_progress: bool = False


@dataclass(frozen=True, slots=True)
class Test:
    execution: ExecutionOptions = ExecutionOptions()


@dataclass(frozen=True, slots=True)
class Dev:
    execution: ExecutionOptions = ExecutionOptions()


@dataclass(frozen=True, slots=True)
class CompilePackage:
    """Low-level single-package compilation used by other build tools."""

    target: Target
    package_directory: Path
    output_directory: Path
    libraries_directory: Path
    javascript_prelude: Path | None = None
    skip_beam_compilation: bool = False


@dataclass(frozen=True, slots=True)
class Shell:
    pass


# ---------------------------------------------------------------------------
# Source tools
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Format:
    files: tuple[str, ...] = (".",)
    stdin: bool = False
    check: bool = False


@dataclass(frozen=True, slots=True)
class Fix:
    pass


@dataclass(frozen=True, slots=True)
class LanguageServer:
    pass


# ---------------------------------------------------------------------------
# Project management
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class New:
    project_root: Path
    name: str | None = None
    template: Template = Template.ERLANG
    skip_git: bool = False
    skip_github: bool = False


@dataclass(frozen=True, slots=True)
class Clean:
    pass


@dataclass(frozen=True, slots=True)
class PrintConfig:
    pass


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Add:
    packages: tuple[PackageRequirement, ...]
    dev: bool = False


@dataclass(frozen=True, slots=True)
class Remove:
    packages: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Update:
    packages: tuple[str, ...] = ()
    """Packages to update; empty means all of them."""


@dataclass(frozen=True, slots=True)
class DepsList:
    pass


@dataclass(frozen=True, slots=True)
class DepsDownload:
    pass


@dataclass(frozen=True, slots=True)
class DepsOutdated:
    pass


@dataclass(frozen=True, slots=True)
class DepsUpdate:
    packages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DepsTree:
    """Dependency tree view.  ``package`` and ``invert`` never both set."""

    package: str | None = None
    invert: str | None = None


# ---------------------------------------------------------------------------
# Documentation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DocsBuild:
    open: bool = False
    target: Target | None = None


@dataclass(frozen=True, slots=True)
class DocsPublish:
    pass


@dataclass(frozen=True, slots=True)
class DocsRemove:
    package: str
    version: str


# ---------------------------------------------------------------------------
# Package registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Publish:
    replace: bool = False
    yes: bool = False


@dataclass(frozen=True, slots=True)
class HexRetire:
    package: str
    version: str
    reason: RetirementReason
    message: str | None = None


@dataclass(frozen=True, slots=True)
class HexUnretire:
    package: str
    version: str


@dataclass(frozen=True, slots=True)
class HexRevert:
    package: str | None = None
    version: str | None = None


@dataclass(frozen=True, slots=True)
class HexOwnerTransfer:
    package: str
    new_owner: str
    """Username or email of the new owner."""


@dataclass(frozen=True, slots=True)
class HexAuthenticate:
    pass


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExportErlangShipment:
    pass


@dataclass(frozen=True, slots=True)
class ExportHexTarball:
    pass


@dataclass(frozen=True, slots=True)
class ExportJavascriptPrelude:
    pass


@dataclass(frozen=True, slots=True)
class ExportTypescriptPrelude:
    pass


@dataclass(frozen=True, slots=True)
class ExportPackageInterface:
    output: Path


@dataclass(frozen=True, slots=True)
class ExportPackageInformation:
    output: Path


Command = Union[
    Build, Check, Run, Test, Dev, CompilePackage, Shell,
    Format, Fix, LanguageServer,
    New, Clean, PrintConfig,
    Add, Remove, Update,
    DepsList, DepsDownload, DepsOutdated, DepsUpdate, DepsTree,
    DocsBuild, DocsPublish, DocsRemove,
    Publish, HexRetire, HexUnretire, HexRevert, HexOwnerTransfer, HexAuthenticate,
    ExportErlangShipment, ExportHexTarball, ExportJavascriptPrelude,
    ExportTypescriptPrelude, ExportPackageInterface, ExportPackageInformation,
]

# Variants that operate without a project on disk.
PROJECT_INDEPENDENT: frozenset[type] = frozenset({
    New,
    Format,
    LanguageServer,
    CompilePackage,
    DocsRemove,
    HexRetire,
    HexUnretire,
    HexOwnerTransfer,
    HexAuthenticate,
    ExportJavascriptPrelude,
    ExportTypescriptPrelude,
})


def requires_project(command: Command) -> bool:
    """Return whether *command* needs the enclosing project located."""
    return type(command) not in PROJECT_INDEPENDENT
