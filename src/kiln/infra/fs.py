"""Infrastructure: filesystem writes.

Every :class:`OSError` is re-raised as
:class:`~kiln.exceptions.FileIOError` naming the path involved.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from kiln.exceptions import FileIOError

logger = logging.getLogger(__name__)


def delete_directory(path: Path) -> None:
    """Recursively delete *path*; a missing directory is not an error."""
    if not path.exists():
        logger.debug("Nothing to delete at %s", path)
        return
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise FileIOError(f"Unable to delete {path}: {exc}") from exc
    logger.info("Deleted %s", path)


def write_text(path: Path, content: str) -> None:
    """Write *content* to *path*, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FileIOError(f"Unable to write {path}: {exc}") from exc


def write_json(path: Path, data: Any) -> None:
    write_text(path, json.dumps(data, indent=2, sort_keys=True, default=str) + "\n")


def is_empty_directory(path: Path) -> bool:
    try:
        return path.is_dir() and not any(path.iterdir())
    except OSError as exc:
        raise FileIOError(f"Unable to read {path}: {exc}") from exc
