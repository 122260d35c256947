"""Build configuration assembler.

Maps a command variant plus project defaults onto the immutable
:class:`~kiln.core.models.Options` record the compilation pipeline
consumes.  Every policy decision about *how* a command compiles lives
here; the result is fully determined by its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from kiln.core.commands import Build, Check, Dev, Run, Test
from kiln.core.models import (
    Codegen,
    Compile,
    Mode,
    Options,
    ProjectDefaults,
    Runtime,
    Target,
    TargetSupport,
    Which,
)
from kiln.exceptions import InvalidRuntimeError

ExecutionCommand = Union[Run, Test, Dev]


@dataclass(frozen=True, slots=True)
class ExecutionPlan:
    """Everything needed to compile and then execute an entry point."""

    options: Options
    which: Which
    target: Target
    runtime: Runtime | None
    module: str
    arguments: tuple[str, ...]
    quiet: bool


def default_entry_module(project_name: str, which: Which) -> str:
    """``app`` → ``app``, ``app_test`` or ``app_dev``."""
    if which is Which.SRC:
        return project_name
    return f"{project_name}_{which.value}"


# ---------------------------------------------------------------------------
# Build / check
# ---------------------------------------------------------------------------

def check_options(command: Check) -> Options:
    """Type-check only: dependency codegen, warnings never fatal."""
    return Options(
        root_target_support=TargetSupport.ENFORCED,
        warnings_as_errors=False,
        codegen=Codegen.DEPENDENCIES_ONLY,
        compile=Compile.ALL,
        mode=Mode.DEV,
        target=command.target,
        no_print_progress=False,
    )


def build_options(command: Build) -> Options:
    return Options(
        root_target_support=TargetSupport.ENFORCED,
        warnings_as_errors=command.warnings_as_errors,
        codegen=Codegen.ALL,
        compile=Compile.ALL,
        mode=Mode.DEV,
        target=command.target,
        no_print_progress=command.no_print_progress,
    )


# ---------------------------------------------------------------------------
# Run / test / dev
# ---------------------------------------------------------------------------

_WHICH: dict[type, Which] = {Run: Which.SRC, Test: Which.TEST, Dev: Which.DEV}


def execution_plan(command: ExecutionCommand, defaults: ProjectDefaults) -> ExecutionPlan:
    """Assemble the plan shared by ``run``, ``test`` and ``dev``.

    Raises
    ------
    InvalidRuntimeError
        If a runtime is requested for a non-JavaScript target.
    """
    execution = command.execution
    target = execution.target or defaults.target
    runtime = resolve_runtime(target, execution.runtime, defaults)

    which = _WHICH[type(command)]
    if isinstance(command, Run):
        module = command.module or default_entry_module(defaults.name, which)
        quiet = command.no_print_progress
    else:
        module = default_entry_module(defaults.name, which)
        quiet = False

    options = Options(
        root_target_support=TargetSupport.ENFORCED,
        warnings_as_errors=False,
        codegen=Codegen.ALL,
        compile=Compile.ALL,
        mode=Mode.DEV,
        target=target,
        no_print_progress=quiet,
    )
    return ExecutionPlan(
        options=options,
        which=which,
        target=target,
        runtime=runtime,
        module=module,
        arguments=execution.arguments,
        quiet=quiet,
    )


def resolve_runtime(
    target: Target,
    requested: Runtime | None,
    defaults: ProjectDefaults,
) -> Runtime | None:
    """Pick the runtime for *target*; Erlang has none."""
    if target is Target.JAVASCRIPT:
        return requested or defaults.runtime
    if requested is not None:
        raise InvalidRuntimeError(
            f"Cannot use the {requested} runtime with the {target} target.",
            hint="Runtimes only apply to the javascript target.",
        )
    return None


# ---------------------------------------------------------------------------
# Other compiling commands
# ---------------------------------------------------------------------------

def docs_options(target: Target | None) -> Options:
    return Options(
        root_target_support=TargetSupport.NOT_ENFORCED,
        warnings_as_errors=False,
        codegen=Codegen.DEPENDENCIES_ONLY,
        compile=Compile.ALL,
        mode=Mode.DEV,
        target=target,
        no_print_progress=False,
    )


def export_options(target: Target | None) -> Options:
    """Production build with full code generation, e.g. a shipment."""
    return Options(
        root_target_support=TargetSupport.ENFORCED,
        warnings_as_errors=False,
        codegen=Codegen.ALL,
        compile=Compile.ALL,
        mode=Mode.PROD,
        target=target,
        no_print_progress=False,
    )


def package_interface_options() -> Options:
    return Options(
        root_target_support=TargetSupport.NOT_ENFORCED,
        warnings_as_errors=False,
        codegen=Codegen.ALL,
        compile=Compile.ALL,
        mode=Mode.PROD,
        target=None,
        no_print_progress=False,
    )


def publish_options() -> Options:
    return export_options(None)


def shell_options() -> Options:
    return Options(
        root_target_support=TargetSupport.ENFORCED,
        warnings_as_errors=False,
        codegen=Codegen.ALL,
        compile=Compile.ALL,
        mode=Mode.DEV,
        target=Target.ERLANG,
        no_print_progress=False,
    )
