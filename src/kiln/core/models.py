"""Domain models for kiln.

All models are **frozen** dataclasses or closed enumerations: immutable
value objects with no behaviour beyond data access and parsing.  They
carry zero I/O and must remain pure across the entire lifecycle.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from kiln.exceptions import InvalidChoiceError, UsageError

_ChoiceT = TypeVar("_ChoiceT", bound="_Choice")


# ---------------------------------------------------------------------------
# Closed enumerations
# ---------------------------------------------------------------------------

class _Choice(str, Enum):
    """Base for enumerations with a canonical lowercase string form.

    The canonical value is used both for command-line parsing and for
    display.
    """

    def __str__(self) -> str:
        return self.value

    @classmethod
    def choices(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls: type[_ChoiceT], text: str) -> _ChoiceT:
        """Parse *text* case-insensitively.

        Raises
        ------
        InvalidChoiceError
            If *text* names no member; the message lists valid choices.
        """
        key = text.strip().lower()
        key = _ALIASES.get(cls.__name__, {}).get(key, key)
        for member in cls:
            if member.value == key:
                return member
        raise InvalidChoiceError(_kind_label(cls.__name__), text, cls.choices())


def _kind_label(class_name: str) -> str:
    """``"RetirementReason"`` → ``"retirement reason"``."""
    return re.sub(r"(?<!^)(?=[A-Z])", " ", class_name).lower()


class Target(_Choice):
    """Compilation target platform."""

    ERLANG = "erlang"
    JAVASCRIPT = "javascript"


class Runtime(_Choice):
    """JavaScript execution runtime."""

    NODEJS = "nodejs"
    DENO = "deno"
    BUN = "bun"


class Which(_Choice):
    """Entry-point category for execution commands."""

    SRC = "src"
    TEST = "test"
    DEV = "dev"


class Codegen(_Choice):
    ALL = "all"
    DEPENDENCIES_ONLY = "dependencies-only"
    NONE = "none"


class Compile(_Choice):
    ALL = "all"
    DEPENDENCIES_ONLY = "dependencies-only"


class Mode(_Choice):
    DEV = "dev"
    PROD = "prod"
    LSP = "lsp"


class TargetSupport(_Choice):
    ENFORCED = "enforced"
    NOT_ENFORCED = "not-enforced"


class Template(_Choice):
    """Project template used by ``kiln new``."""

    LIB = "lib"
    ERLANG = "erlang"
    JAVASCRIPT = "javascript"


class RetirementReason(_Choice):
    OTHER = "other"
    INVALID = "invalid"
    SECURITY = "security"
    DEPRECATED = "deprecated"
    RENAMED = "renamed"


_ALIASES: dict[str, dict[str, str]] = {
    "Target": {"erl": "erlang", "js": "javascript"},
    "Runtime": {"node": "nodejs"},
}


# ---------------------------------------------------------------------------
# Project location
# ---------------------------------------------------------------------------

ROOT_CONFIG_FILENAME: str = "kiln.toml"
MANIFEST_FILENAME: str = "manifest.toml"


@dataclass(frozen=True, slots=True)
class ProjectPaths:
    """Root directory of a project and the locations derived from it."""

    root: Path

    @property
    def root_config(self) -> Path:
        return self.root / ROOT_CONFIG_FILENAME

    @property
    def manifest(self) -> Path:
        """The lock file holding resolved dependency versions."""
        return self.root / MANIFEST_FILENAME

    @property
    def src_directory(self) -> Path:
        return self.root / "src"

    @property
    def test_directory(self) -> Path:
        return self.root / "test"

    @property
    def dev_directory(self) -> Path:
        return self.root / "dev"

    @property
    def build_directory(self) -> Path:
        return self.root / "build"

    @property
    def build_packages_directory(self) -> Path:
        return self.build_directory / "packages"

    def build_directory_for_target(self, mode: Mode, target: Target) -> Path:
        return self.build_directory / mode.value / target.value

    def build_directory_for_package(
        self, mode: Mode, target: Target, package: str,
    ) -> Path:
        return self.build_directory_for_target(mode, target) / package


# ---------------------------------------------------------------------------
# Compilation options
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Options:
    """Immutable configuration consumed by the compilation pipeline."""

    root_target_support: TargetSupport
    warnings_as_errors: bool
    codegen: Codegen
    compile: Compile
    mode: Mode
    target: Target | None
    """Override of the configured target; ``None`` uses ``kiln.toml``."""

    no_print_progress: bool


@dataclass(frozen=True, slots=True)
class DependencyManagerConfig:
    use_manifest: bool = True
    """Honour an existing lock file instead of re-resolving."""

    check_major_versions: bool = False


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(r"^\d+(\.\d+){0,2}$")


@dataclass(frozen=True, slots=True)
class PackageRequirement:
    """A package named on the command line, optionally with a version."""

    name: str
    version_range: str | None = None
    """``None`` selects the newest compatible version."""

    @classmethod
    def parse(cls, text: str) -> PackageRequirement:
        """Parse ``name`` or ``name@version``.

        ``wibble@2`` requires ``>= 2.0.0 and < 3.0.0``; ``wibble@2.5.1``
        requires ``>= 2.5.1 and < 3.0.0``.

        Raises
        ------
        UsageError
            If the name is empty or the version is not 1–3 numeric parts.
        """
        name, sep, version = text.partition("@")
        name = name.strip()
        if not name:
            raise UsageError(f"Invalid package requirement '{text}'.")
        if not sep:
            return cls(name=name)
        if not _VERSION_RE.match(version):
            raise UsageError(
                f"Invalid version '{version}' for package '{name}'.",
                hint="Use a version like 2, 2.5 or 2.5.1.",
            )
        parts = [int(part) for part in version.split(".")]
        parts.extend([0] * (3 - len(parts)))
        lower = ".".join(str(part) for part in parts)
        upper = f"{parts[0] + 1}.0.0"
        return cls(name=name, version_range=f">= {lower} and < {upper}")


@dataclass(frozen=True, slots=True)
class ManifestPackage:
    """One resolved package in the lock file."""

    name: str
    version: str
    build_tools: tuple[str, ...] = ()
    requirements: tuple[str, ...] = ()
    """Names of the packages this one depends on."""

    source: str = "hex"


@dataclass(frozen=True, slots=True)
class Manifest:
    """The resolved, locked set of dependency packages."""

    requirements: tuple[PackageRequirement, ...]
    packages: tuple[ManifestPackage, ...]

    def __len__(self) -> int:
        return len(self.packages)

    def find(self, name: str) -> ManifestPackage | None:
        return next((pkg for pkg in self.packages if pkg.name == name), None)


@dataclass(frozen=True, slots=True)
class OutdatedPackage:
    name: str
    current_version: str
    latest_version: str


@dataclass(frozen=True, slots=True)
class BuildArtifacts:
    """What a successful compilation produced."""

    output_directory: Path
    modules: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PackageConfig:
    """Parsed view of ``kiln.toml``."""

    name: str
    version: str = "0.1.0"
    target: Target = Target.ERLANG
    javascript_runtime: Runtime = Runtime.NODEJS
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    """The raw TOML document."""

    def defaults(self) -> ProjectDefaults:
        return ProjectDefaults(
            name=self.name,
            target=self.target,
            runtime=self.javascript_runtime,
        )


@dataclass(frozen=True, slots=True)
class ProjectDefaults:
    """Environment defaults the configuration assembler may consult."""

    name: str
    target: Target = Target.ERLANG
    runtime: Runtime = Runtime.NODEJS
