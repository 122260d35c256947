"""kiln: build tool command dispatch and build orchestration.

Turns a command line into a validated command, locates the project,
assembles build options and drives the dependency → compile → action
pipeline through pluggable toolchain collaborators.
"""

from kiln.version import __version__

__all__: list[str] = ["__version__"]
