"""Infrastructure: assemble the :class:`~kiln.core.toolchain.Toolchain`.

Collaborators other than the built-in runner and scaffolder come from
installed distributions that register factories in the
``kiln.toolchain`` entry-point group, one entry point per role::

    [project.entry-points."kiln.toolchain"]
    compiler = "kiln_erlang:Compiler"
    resolver = "kiln_hex:Resolver"

A role nobody provides is filled by :class:`UnavailableCollaborator`,
which fails with :class:`~kiln.exceptions.ToolchainUnavailableError`
only when a command actually needs it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from importlib import metadata
from typing import Any, NoReturn

from kiln.core.toolchain import ROLES, Toolchain
from kiln.exceptions import ToolchainUnavailableError
from kiln.infra.scaffold import ProjectCreator
from kiln.infra.subprocess_runner import SubprocessRunner

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP: str = "kiln.toolchain"


class UnavailableCollaborator:
    """Placeholder for a role no installed plugin provides."""

    def __init__(self, role: str) -> None:
        self._role = role

    def __getattr__(self, name: str) -> Callable[..., NoReturn]:
        if name.startswith("__"):
            raise AttributeError(name)

        def unavailable(*_args: Any, **_kwargs: Any) -> NoReturn:
            raise ToolchainUnavailableError(
                f"No {self._role} is installed; cannot run `{name}`.",
                hint=(
                    "Install a kiln toolchain plugin that registers "
                    f"'{self._role}' in the '{ENTRY_POINT_GROUP}' entry-point group."
                ),
            )

        return unavailable

    def __repr__(self) -> str:
        return f"UnavailableCollaborator({self._role!r})"


def builtin_collaborators() -> dict[str, Any]:
    return {"runner": SubprocessRunner(), "scaffolder": ProjectCreator()}


def discover_collaborators() -> dict[str, Any]:
    """Instantiate every registered toolchain plugin, keyed by role.

    Raises
    ------
    ToolchainUnavailableError
        If a registered plugin fails to import or construct.
    """
    found: dict[str, Any] = {}
    for entry_point in metadata.entry_points(group=ENTRY_POINT_GROUP):
        if entry_point.name not in ROLES:
            logger.warning("Ignoring toolchain plugin with unknown role '%s'", entry_point.name)
            continue
        try:
            factory = entry_point.load()
            found[entry_point.name] = factory()
        except Exception as exc:
            raise ToolchainUnavailableError(
                f"Failed to load the '{entry_point.name}' toolchain plugin "
                f"({entry_point.value}): {exc}",
            ) from exc
        logger.debug("Loaded %s from %s", entry_point.name, entry_point.value)
    return found


def load_toolchain() -> Toolchain:
    """Built-ins, overridden by plugins, with placeholders for the rest."""
    provided = {**builtin_collaborators(), **discover_collaborators()}
    return Toolchain(**{
        role: provided.get(role) or UnavailableCollaborator(role) for role in ROLES
    })
