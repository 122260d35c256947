"""Regression tests for optional CLI UI dependencies (rich/questionary).

These tests verify bootstrap commands are resilient when optional UI
packages are missing, and that commands fail cleanly only when a UI
path that needs them is actually exercised.
"""

from __future__ import annotations

import logging
import sys
from unittest.mock import MagicMock, patch

import pytest

from kiln.cli import exit_codes, prompts
from kiln.cli.app import main
from kiln.cli.console import console, escape, stdout_console
from kiln.cli.logging_setup import initialise_logger
from kiln.core.models import Manifest, ManifestPackage, OutdatedPackage, ProjectPaths
from kiln.core.toolchain import Toolchain
from kiln.exceptions import EnvironmentError
from kiln.settings import Settings


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    for module in ("rich", "rich.console", "rich.markup", "rich.table", "rich.tree", "rich.pretty", "rich.logging"):
        monkeypatch.setitem(sys.modules, module, None)


def _hide_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "questionary", None)


def test_help_works_without_rich_or_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_questionary(monkeypatch)

    assert main(["--help"]) == exit_codes.SUCCESS


def test_version_works_without_rich_or_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_questionary(monkeypatch)

    assert main(["--version"]) == exit_codes.SUCCESS


def test_console_falls_back_to_print(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _hide_rich(monkeypatch)

    console.print("diagnostic")
    stdout_console.out("[not markup]")

    captured = capsys.readouterr()
    assert captured.err == "diagnostic\n"
    assert captured.out == "[not markup]\n"
    assert escape("[x]") == "[x]"


def test_logging_falls_back_to_stream_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    logger = initialise_logger(Settings(log_level=logging.INFO, colour=False, api_key=None))
    try:
        assert type(logger.handlers[0]) is logging.StreamHandler
    finally:
        initialise_logger(Settings(log_level=None, colour=False, api_key=None))


def test_deps_list_works_without_rich(
    monkeypatch: pytest.MonkeyPatch,
    project: ProjectPaths,
    toolchain: Toolchain,
    settings: Settings,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _hide_rich(monkeypatch)
    monkeypatch.chdir(project.root)
    toolchain.resolver.resolve_and_download.return_value = Manifest(
        requirements=(), packages=(ManifestPackage("wisp", "1.1.0"),),
    )

    assert main(["deps", "list"], settings=settings, toolchain=toolchain) == 0
    assert "wisp 1.1.0" in capsys.readouterr().out


def test_outdated_table_errors_cleanly_when_rich_missing(
    monkeypatch: pytest.MonkeyPatch,
    project: ProjectPaths,
    toolchain: Toolchain,
    settings: Settings,
) -> None:
    _hide_rich(monkeypatch)
    monkeypatch.chdir(project.root)
    toolchain.resolver.outdated.return_value = [OutdatedPackage("wisp", "1.0.0", "2.0.0")]

    with pytest.raises(EnvironmentError, match="rich is not installed"):
        main(["deps", "outdated"], settings=settings, toolchain=toolchain)


def test_publish_errors_cleanly_when_questionary_missing(
    monkeypatch: pytest.MonkeyPatch,
    project: ProjectPaths,
    toolchain: Toolchain,
    settings: Settings,
) -> None:
    _hide_questionary(monkeypatch)
    monkeypatch.chdir(project.root)

    with pytest.raises(EnvironmentError, match="questionary is not installed"):
        main(["publish"], settings=settings, toolchain=toolchain)

    toolchain.registry.publish.assert_not_called()


@patch.dict(sys.modules, {"questionary": MagicMock()})
def test_cancelled_prompt_aborts() -> None:
    sys.modules["questionary"].confirm.return_value.ask.return_value = None

    with pytest.raises(KeyboardInterrupt):
        prompts.confirm("Continue?")
