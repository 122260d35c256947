"""Pipeline orchestrator: ordered, fail-fast stage execution.

A :class:`Pipeline` is a linear list of named stages.  Each stage
receives the output of the previous one, so a stage can only start
once everything before it has succeeded.  The first failure stops the
run; the error is carried in the :class:`PipelineResult` unchanged and
later stages are never invoked.

Guarantees
----------
* No terminal output, no filesystem access.
* :class:`~kiln.exceptions.KilnError` subclasses pass through untouched.
* Any other exception is wrapped in the failing stage's error class,
  chained via ``__cause__``.
* No retries at this layer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from kiln.core.models import BuildArtifacts, DependencyManagerConfig, Manifest, Options, ProjectPaths
from kiln.core.protocols import CompilationPipeline, DependencyResolver, Telemetry
from kiln.exceptions import CompileError, DependencyError, KilnError, StageError

logger = logging.getLogger(__name__)

DEPENDENCIES = "dependencies"
COMPILE = "compile"


@dataclass(frozen=True, slots=True)
class Stage:
    """One step of a pipeline.

    ``run`` receives the previous stage's output (``None`` for the first
    stage) and returns the input for the next one.
    """

    name: str
    run: Callable[[Any], Any]
    failure: type[StageError] = StageError
    """Error class used to wrap non-kiln exceptions from ``run``."""


@dataclass(frozen=True, slots=True)
class PipelineResult:
    completed: tuple[str, ...]
    """Names of the stages that finished, in order."""

    value: Any = None
    """Output of the last stage when every stage succeeded."""

    failed_stage: str | None = None
    error: KilnError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the final value or raise the recorded error unchanged."""
        if self.error is not None:
            raise self.error
        return self.value


class Pipeline:
    """Executes stages strictly in order and stops at the first failure."""

    def __init__(self, stages: Sequence[Stage]) -> None:
        self._stages: tuple[Stage, ...] = tuple(stages)

    @property
    def stage_names(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self._stages)

    def then(self, stage: Stage) -> Pipeline:
        """Return a new pipeline with *stage* appended."""
        return Pipeline((*self._stages, stage))

    def run(self) -> PipelineResult:
        completed: list[str] = []
        value: Any = None
        for stage in self._stages:
            logger.debug("Starting stage %s", stage.name)
            try:
                value = stage.run(value)
            except KilnError as exc:
                return self._failed(completed, stage, exc)
            except Exception as exc:
                error = stage.failure(f"Unexpected error during {stage.name}: {exc}")
                error.__cause__ = exc
                return self._failed(completed, stage, error)
            completed.append(stage.name)
        return PipelineResult(completed=tuple(completed), value=value)

    @staticmethod
    def _failed(completed: list[str], stage: Stage, error: KilnError) -> PipelineResult:
        logger.debug("Stage %s failed: %s", stage.name, error)
        return PipelineResult(
            completed=tuple(completed),
            failed_stage=stage.name,
            error=error,
        )


class BuildOrchestrator:
    """Builds the standard acquire → compile → action pipelines.

    Parameters
    ----------
    resolver:
        Dependency resolution collaborator.
    compiler:
        Compilation collaborator.
    telemetry:
        The single progress sink handed to every stage.
    """

    def __init__(
        self,
        resolver: DependencyResolver,
        compiler: CompilationPipeline,
        telemetry: Telemetry,
        *,
        config: DependencyManagerConfig | None = None,
    ) -> None:
        self._resolver = resolver
        self._compiler = compiler
        self._telemetry = telemetry
        self._config = config or DependencyManagerConfig()

    def acquire(self, paths: ProjectPaths) -> Pipeline:
        """Pipeline that only produces the dependency :class:`Manifest`."""

        def acquire_dependencies(_: None) -> Manifest:
            return self._resolver.resolve_and_download(
                paths, self._telemetry, None, (), self._config,
            )

        return Pipeline([Stage(DEPENDENCIES, acquire_dependencies, DependencyError)])

    def compile(self, paths: ProjectPaths, options: Options) -> Pipeline:
        """Acquire dependencies, then compile; yields :class:`BuildArtifacts`."""

        def compile_project(manifest: Manifest) -> BuildArtifacts:
            start = time.monotonic()
            artifacts = self._compiler.compile(paths, options, manifest, self._telemetry)
            self._telemetry.compiled(start)
            return artifacts

        return self.acquire(paths).then(Stage(COMPILE, compile_project, CompileError))

    def compile_then(
        self,
        paths: ProjectPaths,
        options: Options,
        action_name: str,
        action: Callable[[BuildArtifacts], Any],
        failure: type[StageError] = StageError,
    ) -> Pipeline:
        """Compile, then hand the build output to a downstream action."""
        return self.compile(paths, options).then(Stage(action_name, action, failure))
