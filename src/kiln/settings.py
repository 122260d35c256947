"""Process-wide settings read from the environment.

Read exactly once by the CLI entry point and passed down explicitly.
Nothing else in the package consults :data:`os.environ`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

LOG_ENV_VAR: str = "KILN_LOG"
NO_COLOUR_ENV_VAR: str = "KILN_LOG_NOCOLOUR"
API_KEY_ENV_VAR: str = "HEXPM_API_KEY"

# ``None`` means logging is switched off entirely.
_LOG_LEVELS: dict[str, int | None] = {
    "off": None,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def parse_log_level(value: str | None) -> int | None:
    """Map a ``KILN_LOG`` value to a :mod:`logging` level.

    Matching is case-insensitive.  Unknown or empty values mean *off*.
    """
    if value is None:
        return None
    return _LOG_LEVELS.get(value.strip().lower())


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable snapshot of the environment-driven settings."""

    log_level: int | None
    """Logging threshold, or ``None`` when logging is disabled."""

    colour: bool
    """Whether log output may use ANSI colours."""

    api_key: str | None
    """Registry API key, consumed only by registry-facing commands."""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        api_key = env.get(API_KEY_ENV_VAR) or None
        return cls(
            log_level=parse_log_level(env.get(LOG_ENV_VAR)),
            colour=NO_COLOUR_ENV_VAR not in env,
            api_key=api_key,
        )
