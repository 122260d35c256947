"""Built-in :class:`~kiln.core.protocols.EntryPointRunner` using subprocesses.

Runs the ``main`` function of a compiled module with the runtime that
matches the target: ``erl`` for Erlang, or ``node``/``deno``/``bun``
for JavaScript.  Pass-through arguments are forwarded verbatim.

All OS-level failures are mapped to
:class:`~kiln.exceptions.EntryPointError` subclasses; nothing raw
escapes this module.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from kiln.core.assembly import default_entry_module
from kiln.core.models import Mode, ProjectPaths, Runtime, Target, Which
from kiln.exceptions import EntryPointError, EntryPointFailedError, EntryPointNotFoundError
from kiln.infra.config_loader import load_package_config
from kiln.infra.fs import write_text
from kiln.infra.runtime_detector import ERLANG_EXECUTABLE, executable_for, require_executable

logger = logging.getLogger(__name__)

JAVASCRIPT_ENTRY_FILENAME: str = "kiln.main.mjs"


class SubprocessRunner:
    """Runs compiled entry points in a child process.

    Satisfies :class:`~kiln.core.protocols.EntryPointRunner`
    structurally, no explicit inheritance required.
    """

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

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
        """Execute ``<module>.main`` with *arguments*.

        Raises
        ------
        EntryPointNotFoundError
            When the module was not produced by compilation.
        RuntimeNotFoundError
            When the runtime executable is not on PATH.
        EntryPointFailedError
            When the program exits with a non-zero status.
        """
        config = load_package_config(paths)
        module = module or default_entry_module(config.name, which)
        package_directory = paths.build_directory_for_package(Mode.DEV, target, config.name)

        if target is Target.ERLANG:
            self._require_module(package_directory / "ebin" / f"{_erlang_module(module)}.beam", module, which)
            command = [
                str(require_executable(ERLANG_EXECUTABLE)),
                *_erlang_code_path(paths, Mode.DEV),
                "-noshell",
                "-eval",
                f"'{_erlang_module(module)}':main(), erlang:halt(0)",
                "-extra",
                *arguments,
            ]
        else:
            self._require_module(package_directory / f"{module}.mjs", module, which)
            entry = self._write_javascript_entry(package_directory, module)
            command = [
                str(require_executable(executable_for(target, runtime))),
                *_javascript_runtime_flags(runtime),
                str(entry),
                *arguments,
            ]

        logger.log(logging.DEBUG if quiet else logging.INFO, "Running %s", " ".join(command))
        self._execute(command, paths.root, module)

    def shell(self, paths: ProjectPaths) -> None:
        """Start an interactive Erlang shell with the project loaded."""
        command = [str(require_executable(ERLANG_EXECUTABLE)), *_erlang_code_path(paths, Mode.DEV)]
        self._execute(command, paths.root, "shell")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _require_module(compiled: Path, module: str, which: Which) -> None:
        if compiled.is_file():
            return
        source_directory = {Which.SRC: "src", Which.TEST: "test", Which.DEV: "dev"}[which]
        raise EntryPointNotFoundError(
            f"Module '{module}' was not found.",
            hint=f"Create {source_directory}/{module}.kn with a public `main` function.",
        )

    @staticmethod
    def _write_javascript_entry(package_directory: Path, module: str) -> Path:
        entry = package_directory / JAVASCRIPT_ENTRY_FILENAME
        write_text(entry, f'import {{ main }} from "./{module}.mjs";\nmain();\n')
        return entry

    @staticmethod
    def _execute(command: Sequence[str], cwd: Path, label: str) -> None:
        try:
            completed = subprocess.run(list(command), cwd=cwd, check=False)
        except OSError as exc:
            raise EntryPointError(f"Unable to start {command[0]}: {exc}") from exc
        if completed.returncode != 0:
            raise EntryPointFailedError(
                f"{label} exited with status {completed.returncode}.",
                exit_status=completed.returncode,
            )


def _erlang_module(module: str) -> str:
    """Nested modules ``a/b`` compile to the Erlang module ``a@b``."""
    return module.replace("/", "@")


def _erlang_code_path(paths: ProjectPaths, mode: Mode) -> list[str]:
    """``-pa <ebin>`` pairs for every compiled package."""
    root = paths.build_directory_for_target(mode, Target.ERLANG)
    ebins = sorted(root.glob("*/ebin")) if root.is_dir() else []
    return [flag for ebin in ebins for flag in ("-pa", str(ebin))]


def _javascript_runtime_flags(runtime: Runtime | None) -> list[str]:
    if runtime is Runtime.DENO:
        return ["run", "--allow-all"]
    if runtime is Runtime.BUN:
        return ["run"]
    return ["--enable-source-maps"]
