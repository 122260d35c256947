"""Project name rules used by ``kiln new``."""

from __future__ import annotations

import re

from kiln.exceptions import InvalidProjectNameError

_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")

RESERVED_NAMES: frozenset[str] = frozenset({
    # Language keywords
    "as", "assert", "auto", "case", "const", "delegate", "derive", "echo",
    "else", "fn", "if", "implement", "import", "let", "macro", "opaque",
    "panic", "pub", "test", "todo", "type", "use",
    # Clashes with the tool or the runtimes
    "kiln", "erlang", "javascript", "elixir", "node",
})


def validate_project_name(name: str) -> str:
    """Return *name* if it is a valid project name.

    Raises
    ------
    InvalidProjectNameError
        If the name is malformed, reserved, or uses the ``kiln_`` prefix.
    """
    if name.startswith("kiln_"):
        raise InvalidProjectNameError(
            f"Project name '{name}' uses the reserved 'kiln_' prefix.",
        )
    if name in RESERVED_NAMES:
        raise InvalidProjectNameError(
            f"Project name '{name}' is a reserved word.",
            hint=f"Try '{name}_app' instead.",
        )
    if not _NAME_RE.match(name):
        suggestion = suggest_project_name(name)
        raise InvalidProjectNameError(
            f"Project name '{name}' is not valid.",
            hint=(
                "Names must start with a lowercase letter and contain only "
                "lowercase letters, numbers and underscores."
                + (f" Try '{suggestion}'." if suggestion else "")
            ),
        )
    return name


def suggest_project_name(name: str) -> str | None:
    """Best-effort valid spelling of *name*, or ``None``."""
    candidate = re.sub(r"[^a-z0-9_]+", "_", name.lower()).strip("_")
    candidate = re.sub(r"^[0-9_]+", "", candidate)
    if candidate and _NAME_RE.match(candidate) and candidate != name:
        return candidate
    return None
