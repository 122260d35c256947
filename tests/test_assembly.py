"""Tests for the build configuration assembler (core/assembly.py).

Coverage:
* ``check`` never generates full output and never fails on warnings.
* ``build`` honours its flags.
* ``run``/``test``/``dev`` share target/runtime resolution and differ
  only in the entry point they select.
* Assembly is deterministic.
"""

from __future__ import annotations

import pytest

from kiln.core import assembly
from kiln.core import commands as cmd
from kiln.core.models import (
    Codegen,
    Compile,
    Mode,
    ProjectDefaults,
    Runtime,
    Target,
    TargetSupport,
    Which,
)
from kiln.exceptions import InvalidRuntimeError

DEFAULTS = ProjectDefaults(name="my_app", target=Target.ERLANG, runtime=Runtime.NODEJS)
JS_DEFAULTS = ProjectDefaults(name="my_app", target=Target.JAVASCRIPT, runtime=Runtime.BUN)


# ---------------------------------------------------------------------------
# check / build
# ---------------------------------------------------------------------------

class TestCheckOptions:
    @pytest.mark.parametrize("target", [None, Target.ERLANG, Target.JAVASCRIPT])
    def test_dependency_only_codegen(self, target: Target | None) -> None:
        options = assembly.check_options(cmd.Check(target=target))

        assert options.codegen is Codegen.DEPENDENCIES_ONLY
        assert options.warnings_as_errors is False
        assert options.compile is Compile.ALL
        assert options.mode is Mode.DEV
        assert options.target is target


class TestBuildOptions:
    def test_defaults(self) -> None:
        options = assembly.build_options(cmd.Build())

        assert options.codegen is Codegen.ALL
        assert options.compile is Compile.ALL
        assert options.warnings_as_errors is False
        assert options.root_target_support is TargetSupport.ENFORCED
        assert options.target is None

    def test_flags_are_honoured(self) -> None:
        options = assembly.build_options(
            cmd.Build(target=Target.JAVASCRIPT, warnings_as_errors=True, no_print_progress=True),
        )

        assert options.warnings_as_errors is True
        assert options.no_print_progress is True
        assert options.target is Target.JAVASCRIPT

    def test_deterministic(self) -> None:
        command = cmd.Build(target=Target.ERLANG)
        assert assembly.build_options(command) == assembly.build_options(command)


# ---------------------------------------------------------------------------
# run / test / dev
# ---------------------------------------------------------------------------

class TestExecutionPlan:
    @pytest.mark.parametrize(
        ("command", "which", "module"),
        [
            (cmd.Run(), Which.SRC, "my_app"),
            (cmd.Test(), Which.TEST, "my_app_test"),
            (cmd.Dev(), Which.DEV, "my_app_dev"),
        ],
    )
    def test_which_and_default_module(
        self, command: assembly.ExecutionCommand, which: Which, module: str,
    ) -> None:
        plan = assembly.execution_plan(command, DEFAULTS)

        assert plan.which is which
        assert plan.module == module
        assert plan.options.codegen is Codegen.ALL

    def test_target_defaults_to_project(self) -> None:
        plan = assembly.execution_plan(cmd.Test(), JS_DEFAULTS)

        assert plan.target is Target.JAVASCRIPT
        assert plan.options.target is Target.JAVASCRIPT
        assert plan.runtime is Runtime.BUN

    def test_explicit_target_and_runtime(self) -> None:
        execution = cmd.ExecutionOptions(target=Target.JAVASCRIPT, runtime=Runtime.DENO)
        plan = assembly.execution_plan(cmd.Dev(execution=execution), DEFAULTS)

        assert plan.target is Target.JAVASCRIPT
        assert plan.runtime is Runtime.DENO

    def test_erlang_has_no_runtime(self) -> None:
        assert assembly.execution_plan(cmd.Run(), DEFAULTS).runtime is None

    def test_runtime_with_erlang_is_rejected(self) -> None:
        execution = cmd.ExecutionOptions(target=Target.ERLANG, runtime=Runtime.DENO)
        with pytest.raises(InvalidRuntimeError):
            assembly.execution_plan(cmd.Test(execution=execution), DEFAULTS)

    def test_run_module_and_quiet(self) -> None:
        plan = assembly.execution_plan(
            cmd.Run(module="my_app/cli", no_print_progress=True), DEFAULTS,
        )

        assert plan.module == "my_app/cli"
        assert plan.quiet is True
        assert plan.options.no_print_progress is True

    def test_arguments_pass_through(self) -> None:
        execution = cmd.ExecutionOptions(arguments=("--seed", "42"))
        plan = assembly.execution_plan(cmd.Test(execution=execution), DEFAULTS)
        assert plan.arguments == ("--seed", "42")

    def test_variants_share_assembly(self) -> None:
        execution = cmd.ExecutionOptions(target=Target.JAVASCRIPT)
        plans = [
            assembly.execution_plan(variant, DEFAULTS)
            for variant in (cmd.Run(execution=execution), cmd.Test(execution=execution), cmd.Dev(execution=execution))
        ]
        assert len({plan.options for plan in plans}) == 1


# ---------------------------------------------------------------------------
# Other compiling commands
# ---------------------------------------------------------------------------

class TestOtherOptions:
    def test_export_is_production(self) -> None:
        options = assembly.export_options(Target.ERLANG)
        assert options.mode is Mode.PROD
        assert options.codegen is Codegen.ALL

    def test_publish_is_export_without_target(self) -> None:
        assert assembly.publish_options() == assembly.export_options(None)

    def test_docs_do_not_enforce_target(self) -> None:
        options = assembly.docs_options(None)
        assert options.root_target_support is TargetSupport.NOT_ENFORCED
        assert options.codegen is Codegen.DEPENDENCIES_ONLY

    def test_package_interface(self) -> None:
        options = assembly.package_interface_options()
        assert options.mode is Mode.PROD
        assert options.root_target_support is TargetSupport.NOT_ENFORCED

    def test_shell_targets_erlang(self) -> None:
        assert assembly.shell_options().target is Target.ERLANG
