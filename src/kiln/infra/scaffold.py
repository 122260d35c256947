"""Built-in :class:`~kiln.core.protocols.ProjectScaffolder` for ``kiln new``.

Creates the directory layout and starter files of a new project, and
initialises a git repository when git is available.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from kiln.core.commands import New
from kiln.core.models import ROOT_CONFIG_FILENAME, Template
from kiln.core.naming import validate_project_name
from kiln.exceptions import FileIOError, ProjectExistsError
from kiln.infra.fs import is_empty_directory, write_text
from kiln.infra.runtime_detector import detect_executable

logger = logging.getLogger(__name__)

_GITIGNORE = """\
*.beam
*.ez
/build
erl_crash.dump
"""

_WORKFLOW = """\
name: test

on:
  push:
    branches:
      - master
      - main
  pull_request:

jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - uses: actions/setup-python@v5
        with:
          python-version: "3.12"
      - run: pip install kiln=={version}
      - run: kiln deps download
      - run: kiln test
      - run: kiln format --check src test
"""


class ProjectCreator:
    """Writes a new project to disk."""

    def create(self, command: New, version: str) -> Path:
        """Create the project described by *command*.

        Returns
        -------
        Path
            The project root.

        Raises
        ------
        InvalidProjectNameError
            If the (possibly derived) name is not valid.
        ProjectExistsError
            If the target directory exists and is not empty.
        FileIOError
            If any file cannot be written.
        """
        root = command.project_root.resolve()
        name = validate_project_name(command.name or root.name)

        if root.exists() and not is_empty_directory(root):
            raise ProjectExistsError(
                f"{root} already exists and is not empty.",
                hint="Choose a new directory name.",
            )

        for relative, content in self._files(name, command, version).items():
            write_text(root / relative, content)

        if not command.skip_git:
            self._git_init(root)

        logger.info("Created project %s at %s", name, root)
        return root

    # ------------------------------------------------------------------
    # File contents
    # ------------------------------------------------------------------

    @staticmethod
    def _files(name: str, command: New, version: str) -> dict[str, str]:
        files: dict[str, str] = {
            ROOT_CONFIG_FILENAME: _root_config(name, command.template),
            "README.md": _readme(name),
            f"src/{name}.kn": (
                "import kiln/io\n\n"
                "pub fn main() {\n"
                f'  io.println("Hello from {name}!")\n'
                "}\n"
            ),
            f"test/{name}_test.kn": (
                "import kilnunit\n"
                "import kilnunit/should\n\n"
                "pub fn main() {\n"
                "  kilnunit.main()\n"
                "}\n\n"
                "pub fn hello_world_test() {\n"
                "  1\n"
                "  |> should.equal(1)\n"
                "}\n"
            ),
        }
        if not command.skip_git:
            files[".gitignore"] = _GITIGNORE
            if not command.skip_github:
                files[".github/workflows/test.yml"] = _WORKFLOW.format(version=version)
        return files

    # ------------------------------------------------------------------
    # git
    # ------------------------------------------------------------------

    @staticmethod
    def _git_init(root: Path) -> None:
        status = detect_executable("git")
        if not status.found or status.path is None:
            logger.warning("git not found; skipping repository initialisation")
            return
        try:
            subprocess.run(
                [str(status.path), "init", "--quiet"],
                cwd=root,
                check=True,
                capture_output=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise FileIOError(f"Unable to initialise a git repository in {root}: {exc}") from exc


def _root_config(name: str, template: Template) -> str:
    lines = [f'name = "{name}"', 'version = "1.0.0"']
    if template is not Template.LIB:
        lines.append(f'target = "{template.value}"')
    lines.extend([
        "",
        "# Fill out these fields if you intend to publish the package.",
        '# description = ""',
        '# licences = ["Apache-2.0"]',
        '# repository = { type = "github", user = "", repo = "" }',
        "",
        "[dependencies]",
        'kiln_stdlib = ">= 0.40.0 and < 2.0.0"',
        "",
        "[dev-dependencies]",
        'kilnunit = ">= 1.0.0 and < 2.0.0"',
        "",
    ])
    return "\n".join(lines)


def _readme(name: str) -> str:
    return (
        f"# {name}\n\n"
        "## Development\n\n"
        "```sh\n"
        "kiln run   # Run the project\n"
        "kiln test  # Run the tests\n"
        "```\n"
    )
