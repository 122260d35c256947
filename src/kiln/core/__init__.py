"""Core / service layer: pure business logic and orchestration.

Rules
-----
* No terminal output.
* No filesystem, network or subprocess I/O.
* No imports from ``cli`` or ``infra``.
* Collaborators are reached only through :mod:`kiln.core.protocols`.
"""

from kiln.core.models import (
    BuildArtifacts,
    Manifest,
    Options,
    ProjectDefaults,
    ProjectPaths,
    Runtime,
    Target,
    Which,
)
from kiln.core.pipeline import BuildOrchestrator, Pipeline, PipelineResult, Stage
from kiln.core.telemetry import NullTelemetry
from kiln.core.toolchain import Toolchain

__all__: list[str] = [
    "BuildArtifacts",
    "BuildOrchestrator",
    "Manifest",
    "NullTelemetry",
    "Options",
    "Pipeline",
    "PipelineResult",
    "ProjectDefaults",
    "ProjectPaths",
    "Runtime",
    "Stage",
    "Target",
    "Toolchain",
    "Which",
]
