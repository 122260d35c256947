"""Custom exception hierarchy for kiln.

All exceptions that cross layer boundaries must inherit from
:class:`KilnError`.  Raw OS, TOML or subprocess exceptions must NEVER
propagate beyond the infrastructure layer: they are caught there and
re-raised as a typed subclass defined here.

Hierarchy
---------
KilnError
├── UsageError
│   └── InvalidChoiceError
├── ProjectNotFoundError
├── ConfigError
├── FileIOError
├── ProjectExistsError
├── InvalidProjectNameError
├── InvalidRuntimeError
├── ToolchainUnavailableError
├── EnvironmentError
│   └── RuntimeNotFoundError
└── StageError
    ├── DependencyError
    │   └── PackageNotFoundError
    ├── CompileError
    ├── EntryPointError
    │   ├── EntryPointNotFoundError
    │   └── EntryPointFailedError
    ├── ExportError
    ├── PublishError
    ├── DocsError
    ├── RegistryError
    └── FormatError
"""

from __future__ import annotations

from collections.abc import Iterable


class KilnError(Exception):
    """Base exception for all kiln errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ----------------------------------------------------------

class UsageError(KilnError):
    """Raised when the command line cannot be parsed or validated."""


class InvalidChoiceError(UsageError, ValueError):
    """Raised when text does not name a member of a closed enumeration."""

    def __init__(self, kind: str, value: str, choices: Iterable[str]) -> None:
        self.kind: str = kind
        self.value: str = value
        self.choices: tuple[str, ...] = tuple(choices)
        super().__init__(
            f"Invalid {kind} '{value}'. Valid choices: {', '.join(self.choices)}",
        )


# --- Project location and configuration ------------------------------------

class ProjectNotFoundError(KilnError):
    """Raised when no ``kiln.toml`` exists in the directory or its ancestors."""


class ConfigError(KilnError):
    """Raised when ``kiln.toml`` is unreadable or malformed."""


class FileIOError(KilnError):
    """Raised when a filesystem operation fails."""


class ProjectExistsError(KilnError):
    """Raised when ``kiln new`` targets a non-empty directory."""


class InvalidProjectNameError(KilnError):
    """Raised when a project name violates the naming rules."""


class InvalidRuntimeError(KilnError):
    """Raised when a runtime is requested for a target that cannot use it."""


# --- Environment / tooling -------------------------------------------------

class ToolchainUnavailableError(KilnError):
    """Raised when no installed plugin provides a required collaborator."""


class EnvironmentError(KilnError):
    """Raised when a required runtime dependency is not available."""


class RuntimeNotFoundError(EnvironmentError):
    """Raised when a runtime executable cannot be located on PATH."""


# --- Pipeline stages -------------------------------------------------------

class StageError(KilnError):
    """Base class for failures raised while a pipeline stage runs."""


class DependencyError(StageError):
    """Raised when dependency resolution or download fails."""


class PackageNotFoundError(DependencyError):
    """Raised when a named package is absent from the manifest."""


class CompileError(StageError):
    """Raised when compilation fails."""


class EntryPointError(StageError):
    """Raised when an entry point cannot be executed."""


class EntryPointNotFoundError(EntryPointError):
    """Raised when the compiled entry-point module does not exist."""


class EntryPointFailedError(EntryPointError):
    """Raised when the entry point exits with a non-zero status."""

    def __init__(
        self, message: str, *, exit_status: int, hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.exit_status: int = exit_status


class ExportError(StageError):
    """Raised when exporting an artifact fails."""


class PublishError(StageError):
    """Raised when publishing a package fails."""


class DocsError(StageError):
    """Raised when rendering or publishing documentation fails."""


class RegistryError(StageError):
    """Raised when a package registry operation fails."""


class FormatError(StageError):
    """Raised when formatting or fixing source files fails."""


def append_api_key_suggestion(hint: str | None) -> str:
    """Append registry authentication guidance to an existing hint.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Set HEXPM_API_KEY"
    suggestion = f"{marker} or run `kiln hex authenticate`."
    if hint is None:
        return suggestion
    if marker in hint:
        return hint
    return "\n".join((hint, suggestion))
