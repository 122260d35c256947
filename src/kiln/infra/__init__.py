"""Infrastructure layer: filesystem, process and plugin integration.

Every raw OS, TOML or subprocess exception must be caught here and
re-raised as a :class:`~kiln.exceptions.KilnError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Concrete collaborators satisfy :mod:`kiln.core.protocols` structurally.
"""

from kiln.infra.config_loader import load_package_config
from kiln.infra.plugins import load_toolchain
from kiln.infra.project_locator import find_project_paths
from kiln.infra.runtime_detector import RuntimeStatus, detect_executable, require_executable
from kiln.infra.scaffold import ProjectCreator
from kiln.infra.subprocess_runner import SubprocessRunner

__all__: list[str] = [
    "ProjectCreator",
    "RuntimeStatus",
    "SubprocessRunner",
    "detect_executable",
    "find_project_paths",
    "load_package_config",
    "load_toolchain",
    "require_executable",
]
