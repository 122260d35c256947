"""Command-line parser: argv → one :data:`~kiln.core.commands.Command`.

Every subcommand registers a ``factory`` default that turns its
validated :class:`argparse.Namespace` into the matching frozen command
variant.  Nothing here touches the filesystem, so a rejected command
line never has side effects.

Usage errors raise :class:`~kiln.exceptions.UsageError` instead of
exiting with argparse's status 2, so they reach the same error boundary
(and the same exit status 1) as every other failure.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, NoReturn

from kiln.core import commands as cmd
from kiln.core.commands import Command, ExecutionOptions
from kiln.core.models import (
    PackageRequirement,
    RetirementReason,
    Runtime,
    Target,
    Template,
    _Choice,
)
from kiln.exceptions import InvalidChoiceError, UsageError
from kiln.version import __version__

PROG: str = "kiln"


class _Parser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises instead of exiting on bad input."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(
            f"{self.prog}: {message}",
            hint=f"Run `{self.prog} --help` for usage.",
        )


# ---------------------------------------------------------------------------
# Argument value types
# ---------------------------------------------------------------------------

def _choice(enum_class: type[_Choice]) -> Callable[[str], Any]:
    """argparse ``type=`` for a case-insensitive enumeration."""

    def parse(text: str) -> Any:
        try:
            return enum_class.parse(text)
        except InvalidChoiceError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    parse.__name__ = enum_class.__name__.lower()
    return parse


def _requirement(text: str) -> PackageRequirement:
    try:
        return PackageRequirement.parse(text)
    except UsageError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _pass_through(arguments: Sequence[str]) -> tuple[str, ...]:
    """Trailing entry-point arguments, minus a leading ``--`` separator."""
    if arguments and arguments[0] == "--":
        arguments = arguments[1:]
    return tuple(arguments)


def _execution(ns: argparse.Namespace) -> ExecutionOptions:
    return ExecutionOptions(
        target=ns.target,
        runtime=ns.runtime,
        arguments=_pass_through(ns.arguments),
    )


def _add_target(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t",
        "--target",
        type=_choice(Target),
        default=None,
        help=f"Which compilation target to use ({', '.join(Target.choices())}).",
    )


def _add_execution(parser: argparse.ArgumentParser) -> None:
    _add_target(parser)
    parser.add_argument(
        "--runtime",
        type=_choice(Runtime),
        default=None,
        help=f"Which JavaScript runtime to use ({', '.join(Runtime.choices())}).",
    )


def _add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "arguments",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the entry point unchanged.",
    )


def _compile_package(ns: argparse.Namespace) -> cmd.CompilePackage:
    if ns.target is Target.JAVASCRIPT and ns.javascript_prelude is None:
        raise UsageError(
            "--javascript-prelude is required when compiling to JavaScript.",
        )
    return cmd.CompilePackage(
        target=ns.target,
        package_directory=ns.package,
        output_directory=ns.out,
        libraries_directory=ns.lib,
        javascript_prelude=ns.javascript_prelude,
        skip_beam_compilation=ns.no_beam,
    )


# ---------------------------------------------------------------------------
# Subcommand groups
# ---------------------------------------------------------------------------

def _add_build_commands(sub: Any) -> None:
    build = sub.add_parser("build", help="Build the project.")
    _add_target(build)
    build.add_argument(
        "--warnings-as-errors",
        action="store_true",
        help="Consider the build failed if the package contains any warnings.",
    )
    build.add_argument("--no-print-progress", action="store_true", help="Don't print progress information.")
    build.set_defaults(factory=lambda ns: cmd.Build(
        target=ns.target,
        warnings_as_errors=ns.warnings_as_errors,
        no_print_progress=ns.no_print_progress,
    ))

    check = sub.add_parser("check", help="Type check the project.")
    _add_target(check)
    check.set_defaults(factory=lambda ns: cmd.Check(target=ns.target))

    run = sub.add_parser("run", help="Run the project.")
    _add_execution(run)
    run.add_argument("-m", "--module", default=None, help="The module to run.")
    run.add_argument("--no-print-progress", action="store_true", help="Don't print progress information.")
    _add_arguments(run)
    run.set_defaults(factory=lambda ns: cmd.Run(
        execution=_execution(ns),
        module=ns.module,
        no_print_progress=ns.no_print_progress,
    ))

    test = sub.add_parser("test", help="Run the project tests.")
    _add_execution(test)
    _add_arguments(test)
    test.set_defaults(factory=lambda ns: cmd.Test(execution=_execution(ns)))

    dev = sub.add_parser("dev", help="Run the project development entrypoint.")
    _add_execution(dev)
    _add_arguments(dev)
    dev.set_defaults(factory=lambda ns: cmd.Dev(execution=_execution(ns)))

    shell = sub.add_parser("shell", help="Start an Erlang shell with the project loaded.")
    shell.set_defaults(factory=lambda ns: cmd.Shell())

    compile_package = sub.add_parser(
        "compile-package",
        help="A low-level API for compiling a single package, used by other build tools.",
    )
    compile_package.add_argument("--target", type=_choice(Target), required=True)
    compile_package.add_argument("--package", type=Path, required=True, help="The directory of the package.")
    compile_package.add_argument("--out", type=Path, required=True, help="A directory to write the compiled package to.")
    compile_package.add_argument("--lib", type=Path, required=True, help="A directory of precompiled packages.")
    compile_package.add_argument(
        "--javascript-prelude",
        type=Path,
        default=None,
        help="Location of the JavaScript prelude module, relative to --out. Required for JavaScript.",
    )
    compile_package.add_argument("--no-beam", action="store_true", help="Skip Erlang to BEAM bytecode compilation.")
    compile_package.set_defaults(factory=_compile_package)


def _add_source_commands(sub: Any) -> None:
    fmt = sub.add_parser("format", help="Format source code.")
    fmt.add_argument("files", nargs="*", help="The files or directories to format.")
    fmt.add_argument("--stdin", action="store_true", help="Read source from standard input.")
    fmt.add_argument(
        "--check",
        action="store_true",
        help="Only check if inputs are formatted correctly, erroring if they are not.",
    )
    fmt.set_defaults(factory=lambda ns: cmd.Format(
        files=tuple(ns.files) or (".",),
        stdin=ns.stdin,
        check=ns.check,
    ))

    fix = sub.add_parser("fix", help="Rewrite deprecated code.")
    fix.set_defaults(factory=lambda ns: cmd.Fix())

    lsp = sub.add_parser("lsp", help="Run the language server, to be used by editors.")
    lsp.set_defaults(factory=lambda ns: cmd.LanguageServer())


def _add_project_commands(sub: Any) -> None:
    new = sub.add_parser("new", help="Create a new project.")
    new.add_argument("project_root", type=Path, help="Location of the project root.")
    new.add_argument("--name", default=None, help="Name of the project.")
    new.add_argument(
        "--template",
        type=_choice(Template),
        default=Template.ERLANG,
        help=f"The template to use ({', '.join(Template.choices())}).",
    )
    new.add_argument(
        "--skip-git",
        action="store_true",
        help="Skip git initialisation and creation of .gitignore, .git/* and .github/* files.",
    )
    new.add_argument("--skip-github", action="store_true", help="Skip creation of .github/* files.")
    new.set_defaults(factory=lambda ns: cmd.New(
        project_root=ns.project_root,
        name=ns.name,
        template=ns.template,
        skip_git=ns.skip_git,
        skip_github=ns.skip_github,
    ))

    clean = sub.add_parser("clean", help="Delete any build artifacts for this project.")
    clean.set_defaults(factory=lambda ns: cmd.Clean())

    print_config = sub.add_parser("print-config", help="Read and print kiln.toml for debugging.")
    print_config.set_defaults(factory=lambda ns: cmd.PrintConfig())

    add = sub.add_parser("add", help="Add new dependencies.")
    add.add_argument(
        "packages",
        nargs="+",
        type=_requirement,
        help="Packages to add, as NAME or NAME@VERSION.",
    )
    add.add_argument("--dev", action="store_true", help="Add the packages as dev-only dependencies.")
    add.set_defaults(factory=lambda ns: cmd.Add(packages=tuple(ns.packages), dev=ns.dev))

    remove = sub.add_parser("remove", help="Remove project dependencies.")
    remove.add_argument("packages", nargs="+", help="The names of packages to remove.")
    remove.set_defaults(factory=lambda ns: cmd.Remove(packages=tuple(ns.packages)))

    update = sub.add_parser("update", help="Update dependency packages to their latest versions.")
    update.add_argument("packages", nargs="*", help="Packages to update; all when omitted.")
    update.set_defaults(factory=lambda ns: cmd.Update(packages=tuple(ns.packages)))

    publish = sub.add_parser("publish", help="Publish the project to the package registry.")
    publish.add_argument("--replace", action="store_true", help="Replace an existing release of this version.")
    publish.add_argument("-y", "--yes", action="store_true", help="Don't ask for confirmation.")
    publish.set_defaults(factory=lambda ns: cmd.Publish(replace=ns.replace, yes=ns.yes))


def _add_deps_commands(sub: Any) -> None:
    deps = sub.add_parser("deps", help="Work with dependency packages.")
    deps_sub = deps.add_subparsers(dest="deps_command", metavar="COMMAND", required=True)

    deps_sub.add_parser("list", help="List all dependency packages.").set_defaults(
        factory=lambda ns: cmd.DepsList(),
    )
    deps_sub.add_parser("download", help="Download all dependency packages.").set_defaults(
        factory=lambda ns: cmd.DepsDownload(),
    )
    deps_sub.add_parser("outdated", help="List all outdated dependencies.").set_defaults(
        factory=lambda ns: cmd.DepsOutdated(),
    )

    update = deps_sub.add_parser("update", help="Update dependency packages to their latest versions.")
    update.add_argument("packages", nargs="*", help="Packages to update; all when omitted.")
    update.set_defaults(factory=lambda ns: cmd.DepsUpdate(packages=tuple(ns.packages)))

    tree = deps_sub.add_parser("tree", help="Tree of all the dependency packages.")
    root = tree.add_mutually_exclusive_group()
    root.add_argument("-p", "--package", default=None, help="Package to be used as the root of the tree.")
    root.add_argument(
        "-i",
        "--invert",
        default=None,
        metavar="PACKAGE",
        help="Invert the tree direction and focus on the given package.",
    )
    tree.set_defaults(factory=lambda ns: cmd.DepsTree(package=ns.package, invert=ns.invert))


def _add_docs_commands(sub: Any) -> None:
    docs = sub.add_parser("docs", help="Render HTML documentation.")
    docs_sub = docs.add_subparsers(dest="docs_command", metavar="COMMAND", required=True)

    build = docs_sub.add_parser("build", help="Render HTML docs locally.")
    build.add_argument("--open", action="store_true", help="Open the docs in a browser after rendering.")
    _add_target(build)
    build.set_defaults(factory=lambda ns: cmd.DocsBuild(open=ns.open, target=ns.target))

    docs_sub.add_parser("publish", help="Publish HTML docs to the registry.").set_defaults(
        factory=lambda ns: cmd.DocsPublish(),
    )

    remove = docs_sub.add_parser("remove", help="Remove published HTML docs.")
    remove.add_argument("--package", required=True, help="The name of the package.")
    remove.add_argument("--version", required=True, help="The version of the docs to remove.")
    remove.set_defaults(factory=lambda ns: cmd.DocsRemove(package=ns.package, version=ns.version))


def _add_hex_commands(sub: Any) -> None:
    hex_parser = sub.add_parser("hex", help="Work with the package registry.")
    hex_sub = hex_parser.add_subparsers(dest="hex_command", metavar="COMMAND", required=True)

    retire = hex_sub.add_parser("retire", help="Retire a release.")
    retire.add_argument("package")
    retire.add_argument("version")
    retire.add_argument(
        "reason",
        type=_choice(RetirementReason),
        help=f"One of: {', '.join(RetirementReason.choices())}.",
    )
    retire.add_argument("message", nargs="?", default=None)
    retire.set_defaults(factory=lambda ns: cmd.HexRetire(
        package=ns.package,
        version=ns.version,
        reason=ns.reason,
        message=ns.message,
    ))

    unretire = hex_sub.add_parser("unretire", help="Un-retire a release.")
    unretire.add_argument("package")
    unretire.add_argument("version")
    unretire.set_defaults(factory=lambda ns: cmd.HexUnretire(package=ns.package, version=ns.version))

    revert = hex_sub.add_parser("revert", help="Revert a release.")
    revert.add_argument("--package", default=None)
    revert.add_argument("--version", default=None)
    revert.set_defaults(factory=lambda ns: cmd.HexRevert(package=ns.package, version=ns.version))

    owner = hex_sub.add_parser("owner", help="Deal with package ownership.")
    owner_sub = owner.add_subparsers(dest="owner_command", metavar="COMMAND", required=True)
    transfer = owner_sub.add_parser("transfer", help="Transfer ownership of a package to a new user.")
    transfer.add_argument("package")
    transfer.add_argument(
        "--to",
        dest="new_owner",
        required=True,
        help="The username or email of the new owner.",
    )
    transfer.set_defaults(factory=lambda ns: cmd.HexOwnerTransfer(package=ns.package, new_owner=ns.new_owner))

    hex_sub.add_parser("authenticate", help="Authenticate with the registry.").set_defaults(
        factory=lambda ns: cmd.HexAuthenticate(),
    )


def _add_export_commands(sub: Any) -> None:
    export = sub.add_parser("export", help="Export something useful from the project.")
    export_sub = export.add_subparsers(dest="export_command", metavar="COMMAND", required=True)

    export_sub.add_parser("erlang-shipment", help="Precompiled Erlang, suitable for deployment.").set_defaults(
        factory=lambda ns: cmd.ExportErlangShipment(),
    )
    export_sub.add_parser("hex-tarball", help="The package bundled into a tarball for publishing.").set_defaults(
        factory=lambda ns: cmd.ExportHexTarball(),
    )
    export_sub.add_parser("javascript-prelude", help="The JavaScript prelude module.").set_defaults(
        factory=lambda ns: cmd.ExportJavascriptPrelude(),
    )
    export_sub.add_parser("typescript-prelude", help="The TypeScript prelude module.").set_defaults(
        factory=lambda ns: cmd.ExportTypescriptPrelude(),
    )

    interface = export_sub.add_parser(
        "package-interface",
        help="Modules, functions and types of the project in JSON format.",
    )
    interface.add_argument("--out", type=Path, required=True, help="The path to write the JSON file to.")
    interface.set_defaults(factory=lambda ns: cmd.ExportPackageInterface(output=ns.out))

    information = export_sub.add_parser("package-information", help="kiln.toml in JSON format.")
    information.add_argument("--out", type=Path, required=True, help="The path to write the JSON file to.")
    information.set_defaults(factory=lambda ns: cmd.ExportPackageInformation(output=ns.out))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser."""
    parser = _Parser(
        prog=PROG,
        description="Build, run, test and publish kiln projects.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND", title="commands")
    _add_build_commands(sub)
    _add_source_commands(sub)
    _add_project_commands(sub)
    _add_deps_commands(sub)
    _add_docs_commands(sub)
    _add_hex_commands(sub)
    _add_export_commands(sub)
    return parser


def parse_command(argv: Sequence[str] | None = None) -> Command | None:
    """Parse *argv* into a command variant.

    Returns
    -------
    Command | None
        ``None`` when no subcommand was given.

    Raises
    ------
    UsageError
        For unknown subcommands or flags, conflicting flags, invalid
        enumeration values and missing required arguments.
    """
    args = build_parser().parse_args(argv)
    factory = getattr(args, "factory", None)
    if factory is None:
        return None
    return factory(args)
