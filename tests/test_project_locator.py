"""Tests for project location (infra/project_locator.py)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from kiln.core.models import ProjectPaths
from kiln.exceptions import FileIOError, ProjectNotFoundError
from kiln.infra.project_locator import find_project_paths, find_project_root, get_current_directory


class TestFindProjectRoot:
    def test_in_root(self, project: ProjectPaths) -> None:
        assert find_project_root(project.root) == project.root.resolve()

    def test_from_nested_directory(self, project: ProjectPaths) -> None:
        nested = project.root / "src" / "deep"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == project.root.resolve()

    def test_nearest_wins(self, project: ProjectPaths) -> None:
        inner = project.root / "packages" / "inner"
        inner.mkdir(parents=True)
        (inner / "kiln.toml").write_text('name = "inner"\n', encoding="utf-8")

        assert find_project_root(inner / ".") == inner.resolve()

    def test_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ProjectNotFoundError, match="No kiln.toml found") as exc_info:
            find_project_root(tmp_path)
        assert "kiln new" in (exc_info.value.hint or "")

    def test_directory_named_kiln_toml_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "kiln.toml").mkdir()
        with pytest.raises(ProjectNotFoundError):
            find_project_root(tmp_path)

    def test_does_not_write(self, tmp_path: Path) -> None:
        with pytest.raises(ProjectNotFoundError):
            find_project_root(tmp_path)
        assert list(tmp_path.iterdir()) == []


class TestFindProjectPaths:
    def test_uses_working_directory(self, project: ProjectPaths, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(project.root)
        assert find_project_paths() == ProjectPaths(root=project.root.resolve())

    def test_explicit_start(self, project: ProjectPaths) -> None:
        assert find_project_paths(project.root).root == project.root.resolve()

    def test_getcwd_failure(self) -> None:
        with patch("kiln.infra.project_locator.os.getcwd", side_effect=FileNotFoundError("gone")):
            with pytest.raises(FileIOError, match="current directory"):
                get_current_directory()
