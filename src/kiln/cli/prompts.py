"""Interactive prompts for the CLI layer (questionary).

Every prompt treats a ``None`` answer (Ctrl+C / Esc) as an abort and
raises :class:`KeyboardInterrupt`, which the error boundary turns into
exit code 130.
"""

from __future__ import annotations

from typing import Any

from kiln.exceptions import EnvironmentError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _answered(answer: Any) -> Any:
    if answer is None:
        raise KeyboardInterrupt
    return answer


def confirm(message: str, *, default: bool = False) -> bool:
    questionary = _import_questionary()
    return bool(_answered(questionary.confirm(message, default=default).ask()))


def ask_text(message: str) -> str:
    questionary = _import_questionary()
    return str(_answered(questionary.text(message).ask()))


def ask_password(message: str) -> str:
    questionary = _import_questionary()
    return str(_answered(questionary.password(message).ask()))
