"""Infrastructure: runtime executable detection and platform guidance.

Locates the executables that run compiled code (``erl``, ``node``,
``deno``, ``bun``) and ``git`` on the system PATH, and offers
platform-specific installation guidance when one is missing.

Rules
-----
* Detection via :func:`shutil.which` only, no subprocess.
* No automatic installation.
* No terminal output; callers decide how to report.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from kiln.core.models import Runtime, Target
from kiln.exceptions import RuntimeNotFoundError

ERLANG_EXECUTABLE: str = "erl"

_RUNTIME_EXECUTABLES: dict[Runtime, str] = {
    Runtime.NODEJS: "node",
    Runtime.DENO: "deno",
    Runtime.BUN: "bun",
}

_INSTALL_COMMANDS: dict[str, dict[str, tuple[str, ...]]] = {
    "erl": {
        "windows": ("winget install Erlang.ErlangOTP", "choco install erlang"),
        "linux": ("sudo apt install erlang", "sudo dnf install erlang", "sudo pacman -S erlang"),
        "darwin": ("brew install erlang",),
    },
    "node": {
        "windows": ("winget install OpenJS.NodeJS", "choco install nodejs"),
        "linux": ("sudo apt install nodejs", "sudo dnf install nodejs", "sudo pacman -S nodejs"),
        "darwin": ("brew install node",),
    },
    "deno": {
        "windows": ("winget install DenoLand.Deno",),
        "linux": ("curl -fsSL https://deno.land/install.sh | sh",),
        "darwin": ("brew install deno",),
    },
    "bun": {
        "windows": ('powershell -c "irm bun.sh/install.ps1 | iex"',),
        "linux": ("curl -fsSL https://bun.sh/install | bash",),
        "darwin": ("brew install oven-sh/bun/bun",),
    },
}


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RuntimeStatus:
    """Result of an executable detection probe.

    Attributes
    ----------
    executable : str
        The executable name that was searched for.
    found : bool
        Whether it was located on PATH.
    path : Path | None
        Absolute path to the executable, or ``None``.
    install_commands : tuple[str, ...]
        Suggested install commands for the current platform.  Empty
        when the executable is already present.
    """

    executable: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def executable_for(target: Target, runtime: Runtime | None) -> str:
    """Name of the executable that runs code for *target* / *runtime*."""
    if target is Target.ERLANG:
        return ERLANG_EXECUTABLE
    return _RUNTIME_EXECUTABLES[runtime or Runtime.NODEJS]


def detect_executable(executable: str) -> RuntimeStatus:
    """Probe PATH for *executable*.

    Returns a :class:`RuntimeStatus` whether or not it is present; the
    caller decides whether to abort or merely warn.
    """
    result = shutil.which(executable)
    if result is not None:
        return RuntimeStatus(
            executable=executable,
            found=True,
            path=Path(result).resolve(),
            install_commands=(),
        )
    return RuntimeStatus(
        executable=executable,
        found=False,
        path=None,
        install_commands=_platform_install_commands(executable),
    )


def require_executable(executable: str) -> Path:
    """Locate *executable* or raise :class:`RuntimeNotFoundError`."""
    status = detect_executable(executable)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append(f"Install {executable} using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise RuntimeNotFoundError(
            f"{executable} is not installed or not on PATH.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands(executable: str) -> tuple[str, ...]:
    """Return install commands for *executable* on the current OS."""
    by_platform = _INSTALL_COMMANDS.get(executable)
    if by_platform is None:
        return ()
    system = platform.system().lower()
    return by_platform.get(system, (f"Please install {executable} and add it to PATH.",))
