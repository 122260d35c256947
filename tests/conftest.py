"""Shared pytest fixtures and configuration for the kiln test suite.

Guidelines
----------
* No network access and no real toolchain in any test.
* Collaborators are mocked at the :class:`~kiln.core.toolchain.Toolchain`
  boundary.
* Core tests must be pure, no side effects.
* Filesystem tests use ``tmp_path`` only.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from kiln.core.models import ProjectPaths
from kiln.core.telemetry import NullTelemetry
from kiln.core.toolchain import ROLES, Toolchain
from kiln.settings import Settings

KILN_TOML = """\
name = "my_app"
version = "1.2.3"
target = "erlang"

[dependencies]
kiln_stdlib = ">= 0.40.0 and < 2.0.0"

[dev-dependencies]
kilnunit = ">= 1.0.0 and < 2.0.0"
"""


@pytest.fixture()
def project(tmp_path: Path) -> ProjectPaths:
    """A minimal project on disk."""
    root = tmp_path / "my_app"
    root.mkdir()
    (root / "kiln.toml").write_text(KILN_TOML, encoding="utf-8")
    return ProjectPaths(root=root)


@pytest.fixture()
def toolchain() -> Toolchain:
    """A toolchain whose every collaborator is a ``MagicMock``."""
    return Toolchain(**{role: MagicMock(name=role) for role in ROLES})


@pytest.fixture()
def settings() -> Settings:
    return Settings(log_level=None, colour=False, api_key=None)


@pytest.fixture()
def telemetry() -> NullTelemetry:
    return NullTelemetry()
