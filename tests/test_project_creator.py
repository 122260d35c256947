"""Tests for the built-in project scaffolder (infra/scaffold.py)."""

from __future__ import annotations

import tomllib
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from kiln.core.commands import New
from kiln.core.models import Template
from kiln.exceptions import FileIOError, InvalidProjectNameError, ProjectExistsError
from kiln.infra.runtime_detector import RuntimeStatus
from kiln.infra.scaffold import ProjectCreator

_NO_GIT = RuntimeStatus(executable="git", found=False, path=None, install_commands=())


class TestCreate:
    def test_creates_layout(self, tmp_path: Path) -> None:
        root = ProjectCreator().create(New(project_root=tmp_path / "hello", skip_git=True), "1.4.0")

        assert root == (tmp_path / "hello").resolve()
        assert (root / "kiln.toml").is_file()
        assert (root / "README.md").is_file()
        assert "pub fn main()" in (root / "src" / "hello.kn").read_text(encoding="utf-8")
        assert (root / "test" / "hello_test.kn").is_file()
        assert not (root / ".gitignore").exists()
        assert not (root / ".github").exists()

    def test_config_is_valid_toml(self, tmp_path: Path) -> None:
        root = ProjectCreator().create(New(project_root=tmp_path / "hello", skip_git=True), "1.4.0")

        data = tomllib.loads((root / "kiln.toml").read_text(encoding="utf-8"))
        assert data["name"] == "hello"
        assert data["target"] == "erlang"
        assert "kiln_stdlib" in data["dependencies"]

    def test_lib_template_omits_target(self, tmp_path: Path) -> None:
        command = New(project_root=tmp_path / "hello", template=Template.LIB, skip_git=True)
        root = ProjectCreator().create(command, "1.4.0")

        data = tomllib.loads((root / "kiln.toml").read_text(encoding="utf-8"))
        assert "target" not in data

    def test_explicit_name(self, tmp_path: Path) -> None:
        command = New(project_root=tmp_path / "some-dir", name="widget", skip_git=True)
        root = ProjectCreator().create(command, "1.4.0")

        assert (root / "src" / "widget.kn").is_file()

    def test_empty_existing_directory_is_fine(self, tmp_path: Path) -> None:
        (tmp_path / "hello").mkdir()
        ProjectCreator().create(New(project_root=tmp_path / "hello", skip_git=True), "1.4.0")
        assert (tmp_path / "hello" / "kiln.toml").is_file()


class TestCreateErrors:
    def test_non_empty_directory(self, tmp_path: Path) -> None:
        (tmp_path / "hello").mkdir()
        (tmp_path / "hello" / "notes.txt").write_text("x", encoding="utf-8")

        with pytest.raises(ProjectExistsError):
            ProjectCreator().create(New(project_root=tmp_path / "hello"), "1.4.0")

        assert not (tmp_path / "hello" / "kiln.toml").exists()

    def test_invalid_name(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidProjectNameError):
            ProjectCreator().create(New(project_root=tmp_path / "Hello-World"), "1.4.0")

        assert not (tmp_path / "Hello-World").exists()


class TestGit:
    @patch("kiln.infra.scaffold.detect_executable", return_value=_NO_GIT)
    def test_workflow_written(self, _detect: MagicMock, tmp_path: Path) -> None:
        root = ProjectCreator().create(New(project_root=tmp_path / "hello"), "1.4.0")

        workflow = (root / ".github" / "workflows" / "test.yml").read_text(encoding="utf-8")
        assert "pip install kiln==1.4.0" in workflow
        assert (root / ".gitignore").is_file()

    @patch("kiln.infra.scaffold.detect_executable", return_value=_NO_GIT)
    def test_skip_github(self, _detect: MagicMock, tmp_path: Path) -> None:
        root = ProjectCreator().create(New(project_root=tmp_path / "hello", skip_github=True), "1.4.0")

        assert (root / ".gitignore").is_file()
        assert not (root / ".github").exists()

    @patch("kiln.infra.scaffold.subprocess.run")
    @patch("kiln.infra.scaffold.detect_executable", return_value=_NO_GIT)
    def test_missing_git_only_warns(
        self, _detect: MagicMock, mock_run: MagicMock, tmp_path: Path,
    ) -> None:
        ProjectCreator().create(New(project_root=tmp_path / "hello"), "1.4.0")
        mock_run.assert_not_called()

    @patch("kiln.infra.scaffold.subprocess.run")
    @patch("kiln.infra.scaffold.detect_executable")
    def test_git_init(self, mock_detect: MagicMock, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_detect.return_value = RuntimeStatus(
            executable="git", found=True, path=Path("/usr/bin/git"), install_commands=(),
        )
        root = ProjectCreator().create(New(project_root=tmp_path / "hello"), "1.4.0")

        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == ["/usr/bin/git", "init", "--quiet"]
        assert mock_run.call_args.kwargs["cwd"] == root

    @patch("kiln.infra.scaffold.subprocess.run", side_effect=OSError("boom"))
    @patch("kiln.infra.scaffold.detect_executable")
    def test_git_failure(self, mock_detect: MagicMock, _run: MagicMock, tmp_path: Path) -> None:
        mock_detect.return_value = RuntimeStatus(
            executable="git", found=True, path=Path("/usr/bin/git"), install_commands=(),
        )
        with pytest.raises(FileIOError, match="git repository"):
            ProjectCreator().create(New(project_root=tmp_path / "hello"), "1.4.0")
