"""CLI application entry point and error boundary for kiln.

This module is the **sole error boundary** for the entire application.
It catches :class:`~kiln.exceptions.KilnError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here. Parsing is delegated to
  :mod:`kiln.cli.parser` and execution to :mod:`kiln.cli.dispatch`.
* Every invocation ends in exactly one of two outcomes: success
  (exit 0) or a single formatted diagnostic on stderr (exit 1, or 130
  when interrupted).
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from kiln.cli import exit_codes
from kiln.cli.console import configure_console, console, escape
from kiln.cli.logging_setup import initialise_logger
from kiln.core.toolchain import Toolchain
from kiln.exceptions import KilnError
from kiln.settings import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    settings: Settings | None = None,
    toolchain: Toolchain | None = None,
) -> int:
    """Parse *argv* and dispatch the resulting command.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    settings:
        Environment settings; read from ``os.environ`` when omitted.
    toolchain:
        Collaborators; discovered from installed plugins when omitted.

    Returns
    -------
    int
        OS process exit code.

    Raises
    ------
    KilnError
        Any failure, for :func:`run` to report.
    """
    from kiln.cli.dispatch import Dispatcher
    from kiln.cli.parser import build_parser, parse_command
    from kiln.infra.plugins import load_toolchain

    try:
        command = parse_command(argv)
    except SystemExit as exc:
        # --help and --version print and exit; nothing else does.
        return exc.code if isinstance(exc.code, int) else exit_codes.SUCCESS

    if command is None:
        build_parser().print_help()
        return exit_codes.SUCCESS

    dispatcher = Dispatcher(
        toolchain or load_toolchain(),
        settings or Settings.from_environ(),
    )
    return dispatcher.dispatch(command)


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

def _report(exc: KilnError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
    if exc.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}", soft_wrap=True)


def run(argv: Sequence[str] | None = None, *, settings: Settings | None = None) -> int:
    """Run :func:`main` and map every outcome to an exit code."""
    try:
        code = main(argv, settings=settings)
    except KilnError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        _report(exc)
        return exit_codes.GENERAL_ERROR
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        return exit_codes.KEYBOARD_INTERRUPT
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error")
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}",
            soft_wrap=True,
        )
        return exit_codes.GENERAL_ERROR

    logger.info("Successfully completed")
    return code


def cli() -> None:
    """Top-level entry point invoked by the console script.

    Reads the environment once, configures the console and logging
    once, then exits with the status :func:`run` returns.
    """
    settings = Settings.from_environ()
    configure_console(settings.colour)
    initialise_logger(settings)
    sys.exit(run(settings=settings))
