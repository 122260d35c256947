"""Infrastructure: locate the enclosing project.

Walks upward from the working directory looking for ``kiln.toml``.

Rules
-----
* Read-only: never creates or modifies anything.
* The filesystem root itself is checked before giving up.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from kiln.core.models import ROOT_CONFIG_FILENAME, ProjectPaths
from kiln.exceptions import FileIOError, ProjectNotFoundError

logger = logging.getLogger(__name__)


def get_current_directory() -> Path:
    """Return the working directory or raise :class:`FileIOError`."""
    try:
        return Path(os.getcwd())
    except OSError as exc:
        raise FileIOError(
            f"Unable to determine the current directory: {exc}",
        ) from exc


def find_project_root(start: Path) -> Path:
    """Return the nearest ancestor of *start* (inclusive) holding ``kiln.toml``.

    Raises
    ------
    ProjectNotFoundError
        If neither *start* nor any ancestor contains the marker.
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        if (directory / ROOT_CONFIG_FILENAME).is_file():
            logger.debug("Found project root at %s", directory)
            return directory
    raise ProjectNotFoundError(
        f"No {ROOT_CONFIG_FILENAME} found in {start} or any parent directory.",
        hint="Run this command inside a kiln project, or create one with `kiln new`.",
    )


def find_project_paths(start: Path | None = None) -> ProjectPaths:
    """Locate the project for *start* (default: the working directory)."""
    directory = start if start is not None else get_current_directory()
    return ProjectPaths(root=find_project_root(directory))
