"""Command dispatch: one handler per :data:`~kiln.core.commands.Command` variant.

The dispatcher is the composition root for a single invocation.  It
locates the project when the variant needs one, assembles
:class:`~kiln.core.models.Options`, picks the telemetry sink once, and
runs the resulting :class:`~kiln.core.pipeline.Pipeline`.  Every stage
failure is re-raised unchanged for :func:`kiln.cli.app.run`.

Rules
-----
* No compilation, resolution or registry logic here; collaborators in
  the :class:`~kiln.core.toolchain.Toolchain` do the work.
* Handlers never catch a :class:`~kiln.exceptions.KilnError`.
"""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from pathlib import Path
from typing import Any

from kiln.cli import exit_codes, prompts, render
from kiln.cli.console import console, escape
from kiln.cli.progress import select_telemetry
from kiln.core import assembly
from kiln.core import commands as cmd
from kiln.core.commands import Command, requires_project
from kiln.core.dependency_tree import TreeNode, inverted_tree, package_tree, project_tree
from kiln.core.models import BuildArtifacts, Manifest, Options, PackageConfig, ProjectPaths, Target
from kiln.core.pipeline import BuildOrchestrator, Pipeline, PipelineResult, Stage
from kiln.core.protocols import Telemetry
from kiln.core.toolchain import Toolchain
from kiln.exceptions import (
    CompileError,
    DependencyError,
    DocsError,
    EntryPointError,
    ExportError,
    FormatError,
    PublishError,
    RegistryError,
    StageError,
    append_api_key_suggestion,
)
from kiln.infra.config_loader import load_package_config
from kiln.infra.fs import delete_directory, write_json
from kiln.infra.project_locator import find_project_paths
from kiln.settings import Settings
from kiln.version import __version__

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes a parsed command to its handler.

    Parameters
    ----------
    toolchain:
        The collaborators to delegate to.
    settings:
        Environment settings; only the API key is consulted here.
    locate_project:
        Finds the enclosing project.  Injected for tests.
    load_config:
        Reads ``kiln.toml``.  Injected for tests.
    telemetry_factory:
        Picks the progress sink from a ``no_print_progress`` flag.
    """

    def __init__(
        self,
        toolchain: Toolchain,
        settings: Settings,
        *,
        locate_project: Callable[[], ProjectPaths] = find_project_paths,
        load_config: Callable[[ProjectPaths], PackageConfig] = load_package_config,
        telemetry_factory: Callable[[bool], Telemetry] = select_telemetry,
    ) -> None:
        self._toolchain = toolchain
        self._settings = settings
        self._locate_project = locate_project
        self._load_config = load_config
        self._telemetry_factory = telemetry_factory
        self._handlers: dict[type, Callable[..., None]] = {
            cmd.Build: self._build,
            cmd.Check: self._check,
            cmd.Run: self._execute,
            cmd.Test: self._execute,
            cmd.Dev: self._execute,
            cmd.CompilePackage: self._compile_package,
            cmd.Shell: self._shell,
            cmd.Format: self._format,
            cmd.Fix: self._fix,
            cmd.LanguageServer: self._language_server,
            cmd.New: self._new,
            cmd.Clean: self._clean,
            cmd.PrintConfig: self._print_config,
            cmd.Add: self._add,
            cmd.Remove: self._remove,
            cmd.Update: self._update,
            cmd.DepsList: self._deps_list,
            cmd.DepsDownload: self._deps_download,
            cmd.DepsOutdated: self._deps_outdated,
            cmd.DepsUpdate: self._update,
            cmd.DepsTree: self._deps_tree,
            cmd.DocsBuild: self._docs_build,
            cmd.DocsPublish: self._docs_publish,
            cmd.DocsRemove: self._docs_remove,
            cmd.Publish: self._publish,
            cmd.HexRetire: self._hex_retire,
            cmd.HexUnretire: self._hex_unretire,
            cmd.HexRevert: self._hex_revert,
            cmd.HexOwnerTransfer: self._hex_owner_transfer,
            cmd.HexAuthenticate: self._hex_authenticate,
            cmd.ExportErlangShipment: self._export_erlang_shipment,
            cmd.ExportHexTarball: self._export_hex_tarball,
            cmd.ExportJavascriptPrelude: self._export_javascript_prelude,
            cmd.ExportTypescriptPrelude: self._export_typescript_prelude,
            cmd.ExportPackageInterface: self._export_package_interface,
            cmd.ExportPackageInformation: self._export_package_information,
        }

    def dispatch(self, command: Command) -> int:
        """Run *command* and return the process exit code.

        Raises
        ------
        KilnError
            Whatever the failing step raised, unchanged.
        """
        handler = self._handlers[type(command)]
        logger.debug("Dispatching %s", command)
        if requires_project(command):
            handler(command, self._locate_project())
        else:
            handler(command)
        return exit_codes.SUCCESS

    # ------------------------------------------------------------------
    # Pipeline helpers
    # ------------------------------------------------------------------

    def _orchestrator(self, no_print_progress: bool = False) -> tuple[BuildOrchestrator, Telemetry]:
        telemetry = self._telemetry_factory(no_print_progress)
        orchestrator = BuildOrchestrator(
            self._toolchain.resolver,
            self._toolchain.compiler,
            telemetry,
        )
        return orchestrator, telemetry

    def _compile(self, paths: ProjectPaths, options: Options) -> BuildArtifacts:
        orchestrator, _ = self._orchestrator(options.no_print_progress)
        return orchestrator.compile(paths, options).run().unwrap()

    def _compile_then(
        self,
        paths: ProjectPaths,
        options: Options,
        action_name: str,
        action: Callable[[BuildArtifacts], Any],
        failure: type[StageError],
    ) -> Any:
        orchestrator, _ = self._orchestrator(options.no_print_progress)
        return orchestrator.compile_then(paths, options, action_name, action, failure).run().unwrap()

    @staticmethod
    def _single(name: str, action: Callable[[], Any], failure: type[StageError] = StageError) -> Any:
        """Run one collaborator call as a one-stage pipeline."""
        return Pipeline([Stage(name, lambda _: action(), failure)]).run().unwrap()

    def _unwrap_registry(self, result: PipelineResult) -> Any:
        """Like ``unwrap``, with an API-key hint on registry failures."""
        error = result.error
        if isinstance(error, (RegistryError, PublishError)) and self._settings.api_key is None:
            error.hint = append_api_key_suggestion(error.hint)
        return result.unwrap()

    def _registry(self, name: str, action: Callable[[], Any]) -> Any:
        result = Pipeline([Stage(name, lambda _: action(), RegistryError)]).run()
        return self._unwrap_registry(result)

    # ------------------------------------------------------------------
    # Build and execution
    # ------------------------------------------------------------------

    def _build(self, command: cmd.Build, paths: ProjectPaths) -> None:
        self._compile(paths, assembly.build_options(command))

    def _check(self, command: cmd.Check, paths: ProjectPaths) -> None:
        self._compile(paths, assembly.check_options(command))

    def _execute(self, command: cmd.Run | cmd.Test | cmd.Dev, paths: ProjectPaths) -> None:
        config = self._load_config(paths)
        plan = assembly.execution_plan(command, config.defaults())
        orchestrator, telemetry = self._orchestrator(plan.quiet)

        def run_entry_point(_: BuildArtifacts) -> None:
            telemetry.running(plan.module)
            self._toolchain.runner.run(
                paths,
                plan.arguments,
                plan.target,
                plan.runtime,
                plan.module,
                plan.which,
                plan.quiet,
            )

        orchestrator.compile_then(
            paths, plan.options, "run", run_entry_point, EntryPointError,
        ).run().unwrap()

    def _compile_package(self, command: cmd.CompilePackage) -> None:
        self._single(
            "compile-package",
            lambda: self._toolchain.compiler.compile_package(command),
            CompileError,
        )

    def _shell(self, command: cmd.Shell, paths: ProjectPaths) -> None:
        self._compile_then(
            paths,
            assembly.shell_options(),
            "shell",
            lambda _: self._toolchain.runner.shell(paths),
            EntryPointError,
        )

    # ------------------------------------------------------------------
    # Source tools
    # ------------------------------------------------------------------

    def _format(self, command: cmd.Format) -> None:
        self._single(
            "format",
            lambda: self._toolchain.source_tools.format(command.files, command.stdin, command.check),
            FormatError,
        )

    def _fix(self, command: cmd.Fix, paths: ProjectPaths) -> None:
        self._single("fix", lambda: self._toolchain.source_tools.fix(paths), FormatError)

    def _language_server(self, command: cmd.LanguageServer) -> None:
        self._single("language-server", self._toolchain.language_server.serve)

    # ------------------------------------------------------------------
    # Project management
    # ------------------------------------------------------------------

    def _new(self, command: cmd.New) -> None:
        root: Path = self._single(
            "new", lambda: self._toolchain.scaffolder.create(command, __version__),
        )
        console.print(
            f"Your kiln project [bold]{escape(root.name)}[/bold] has been successfully created.\n"
            "The project can be compiled and tested by running these commands:\n\n"
            f"\tcd {escape(str(command.project_root))}\n"
            "\tkiln test\n",
            soft_wrap=True,
        )

    def _clean(self, command: cmd.Clean, paths: ProjectPaths) -> None:
        delete_directory(paths.build_directory)

    def _print_config(self, command: cmd.PrintConfig, paths: ProjectPaths) -> None:
        render.print_config(self._load_config(paths))

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def _add(self, command: cmd.Add, paths: ProjectPaths) -> None:
        self._single(
            "add",
            lambda: self._toolchain.resolver.add(paths, command.packages, command.dev),
            DependencyError,
        )

    def _remove(self, command: cmd.Remove, paths: ProjectPaths) -> None:
        self._single(
            "remove",
            lambda: self._toolchain.resolver.remove(paths, command.packages),
            DependencyError,
        )

    def _update(self, command: cmd.Update | cmd.DepsUpdate, paths: ProjectPaths) -> None:
        self._single(
            "update",
            lambda: self._toolchain.resolver.update(paths, command.packages),
            DependencyError,
        )

    def _deps_download(self, command: cmd.DepsDownload, paths: ProjectPaths) -> None:
        orchestrator, _ = self._orchestrator()
        orchestrator.acquire(paths).run().unwrap()

    def _deps_list(self, command: cmd.DepsList, paths: ProjectPaths) -> None:
        orchestrator, _ = self._orchestrator()
        manifest: Manifest = orchestrator.acquire(paths).run().unwrap()
        render.print_packages(manifest)

    def _deps_outdated(self, command: cmd.DepsOutdated, paths: ProjectPaths) -> None:
        outdated = self._single(
            "outdated", lambda: self._toolchain.resolver.outdated(paths), DependencyError,
        )
        render.print_outdated(outdated)

    def _deps_tree(self, command: cmd.DepsTree, paths: ProjectPaths) -> None:
        config = self._load_config(paths)

        def build_tree(manifest: Manifest) -> TreeNode:
            if command.invert is not None:
                return inverted_tree(manifest, command.invert, config.name, config.version)
            if command.package is not None:
                return package_tree(manifest, command.package)
            return project_tree(manifest, config.name, config.version)

        orchestrator, _ = self._orchestrator()
        tree: TreeNode = orchestrator.acquire(paths).then(
            Stage("tree", build_tree, DependencyError),
        ).run().unwrap()
        render.print_tree(tree)

    # ------------------------------------------------------------------
    # Documentation
    # ------------------------------------------------------------------

    def _docs_build(self, command: cmd.DocsBuild, paths: ProjectPaths) -> None:
        directory: Path = self._compile_then(
            paths,
            assembly.docs_options(command.target),
            "docs",
            lambda artifacts: self._toolchain.docs.render(paths, artifacts),
            DocsError,
        )
        index = directory / "index.html"
        console.print(f"[bold green]Generated[/bold green] docs in {escape(str(directory))}", soft_wrap=True)
        if command.open:
            logger.info("Opening %s", index)
            webbrowser.open(index.resolve().as_uri())

    def _docs_publish(self, command: cmd.DocsPublish, paths: ProjectPaths) -> None:
        orchestrator, _ = self._orchestrator()
        api_key = self._settings.api_key
        pipeline = orchestrator.compile_then(
            paths,
            assembly.docs_options(None),
            "docs",
            lambda artifacts: self._toolchain.docs.render(paths, artifacts),
            DocsError,
        ).then(Stage(
            "publish-docs",
            lambda directory: self._toolchain.registry.publish_docs(paths, directory, api_key),
            RegistryError,
        ))
        self._unwrap_registry(pipeline.run())

    def _docs_remove(self, command: cmd.DocsRemove) -> None:
        self._registry(
            "remove-docs",
            lambda: self._toolchain.registry.remove_docs(
                command.package, command.version, self._settings.api_key,
            ),
        )

    # ------------------------------------------------------------------
    # Package registry
    # ------------------------------------------------------------------

    def _publish(self, command: cmd.Publish, paths: ProjectPaths) -> None:
        config = self._load_config(paths)
        orchestrator, _ = self._orchestrator()

        def publish(artifacts: BuildArtifacts) -> bool:
            if not command.yes and not prompts.confirm(
                f"Publish {config.name} v{config.version} to the registry?",
            ):
                return False
            self._toolchain.registry.publish(
                paths, artifacts, command.replace, self._settings.api_key,
            )
            return True

        published = self._unwrap_registry(orchestrator.compile_then(
            paths, assembly.publish_options(), "publish", publish, PublishError,
        ).run())
        if published:
            console.print(f"[bold green]Published[/bold green] {escape(config.name)} v{config.version}")
        else:
            console.print("[yellow]Publishing cancelled.[/yellow]")

    def _hex_retire(self, command: cmd.HexRetire) -> None:
        self._registry(
            "retire",
            lambda: self._toolchain.registry.retire(
                command.package,
                command.version,
                command.reason,
                command.message,
                self._settings.api_key,
            ),
        )
        console.print(f"[bold green]Retired[/bold green] {escape(command.package)} v{command.version}")

    def _hex_unretire(self, command: cmd.HexUnretire) -> None:
        self._registry(
            "unretire",
            lambda: self._toolchain.registry.unretire(
                command.package, command.version, self._settings.api_key,
            ),
        )
        console.print(f"[bold green]Unretired[/bold green] {escape(command.package)} v{command.version}")

    def _hex_revert(self, command: cmd.HexRevert, paths: ProjectPaths) -> None:
        package, version = command.package, command.version
        if package is None or version is None:
            config = self._load_config(paths)
            package = package or config.name
            version = version or config.version

        if not prompts.confirm(f"Revert {package} v{version}?"):
            console.print("[yellow]Revert cancelled.[/yellow]")
            return
        self._registry(
            "revert",
            lambda: self._toolchain.registry.revert(package, version, self._settings.api_key),
        )
        console.print(f"[bold green]Reverted[/bold green] {escape(package)} v{version}")

    def _hex_owner_transfer(self, command: cmd.HexOwnerTransfer) -> None:
        self._registry(
            "owner-transfer",
            lambda: self._toolchain.registry.transfer_owner(
                command.package, command.new_owner, self._settings.api_key,
            ),
        )

    def _hex_authenticate(self, command: cmd.HexAuthenticate) -> None:
        username = prompts.ask_text("Username:")
        password = prompts.ask_password("Password:")
        self._single(
            "authenticate",
            lambda: self._toolchain.registry.authenticate(username, password),
            RegistryError,
        )

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def _exported(self, path: Path) -> None:
        console.print(f"[bold green]Exported[/bold green] {escape(str(path))}", soft_wrap=True)

    def _export_erlang_shipment(self, command: cmd.ExportErlangShipment, paths: ProjectPaths) -> None:
        path = self._compile_then(
            paths,
            assembly.export_options(Target.ERLANG),
            "export",
            lambda artifacts: self._toolchain.exporter.erlang_shipment(paths, artifacts),
            ExportError,
        )
        self._exported(path)

    def _export_hex_tarball(self, command: cmd.ExportHexTarball, paths: ProjectPaths) -> None:
        path = self._compile_then(
            paths,
            assembly.export_options(None),
            "export",
            lambda artifacts: self._toolchain.exporter.hex_tarball(paths, artifacts),
            ExportError,
        )
        self._exported(path)

    def _export_javascript_prelude(self, command: cmd.ExportJavascriptPrelude) -> None:
        render.print_text(self._single("export", self._toolchain.exporter.javascript_prelude, ExportError))

    def _export_typescript_prelude(self, command: cmd.ExportTypescriptPrelude) -> None:
        render.print_text(self._single("export", self._toolchain.exporter.typescript_prelude, ExportError))

    def _export_package_interface(self, command: cmd.ExportPackageInterface, paths: ProjectPaths) -> None:
        self._compile_then(
            paths,
            assembly.package_interface_options(),
            "export",
            lambda artifacts: self._toolchain.exporter.package_interface(paths, artifacts, command.output),
            ExportError,
        )
        self._exported(command.output)

    def _export_package_information(self, command: cmd.ExportPackageInformation, paths: ProjectPaths) -> None:
        config = self._load_config(paths)
        write_json(command.output, config.data)
        self._exported(command.output)
