"""Infrastructure: read ``kiln.toml``.

Uses the standard-library :mod:`tomllib` parser.  Every read or parse
failure is re-raised as :class:`~kiln.exceptions.ConfigError`.
"""

from __future__ import annotations

import tomllib
from typing import Any

from kiln.core.models import PackageConfig, ProjectPaths, Runtime, Target
from kiln.exceptions import ConfigError, InvalidChoiceError


def load_package_config(paths: ProjectPaths) -> PackageConfig:
    """Read and validate the project's ``kiln.toml``.

    Raises
    ------
    ConfigError
        When the file is missing, unreadable, not valid TOML, or has
        invalid values.
    """
    path = paths.root_config
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"{path} does not exist.") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"{path} is not valid TOML: {exc}",
            hint="Check the file for syntax errors.",
        ) from exc
    return parse_package_config(data, source=str(path))


def parse_package_config(data: dict[str, Any], *, source: str = "kiln.toml") -> PackageConfig:
    """Build a :class:`PackageConfig` from an already-parsed TOML mapping."""
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(f"{source} must set a `name`.")

    version = data.get("version", "0.1.0")
    if not isinstance(version, str):
        raise ConfigError(f"{source}: `version` must be a string.")

    javascript = data.get("javascript", {})
    if not isinstance(javascript, dict):
        raise ConfigError(f"{source}: `[javascript]` must be a table.")

    try:
        target = Target.parse(str(data.get("target", Target.ERLANG.value)))
        runtime = Runtime.parse(str(javascript.get("runtime", Runtime.NODEJS.value)))
    except InvalidChoiceError as exc:
        raise ConfigError(f"{source}: {exc}") from exc

    return PackageConfig(
        name=name,
        version=version,
        target=target,
        javascript_runtime=runtime,
        dependencies=_requirements(data, "dependencies", source),
        dev_dependencies=_requirements(
            data, "dev-dependencies", source, fallback="dev_dependencies",
        ),
        data=data,
    )


def _requirements(
    data: dict[str, Any], key: str, source: str, *, fallback: str | None = None,
) -> dict[str, str]:
    raw = data.get(key)
    if raw is None and fallback is not None:
        raw = data.get(fallback)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: `[{key}]` must be a table.")
    # Git and path dependencies are tables; show them by their source.
    return {
        str(name): value if isinstance(value, str) else _describe_source(value)
        for name, value in raw.items()
    }


def _describe_source(value: object) -> str:
    if isinstance(value, dict):
        for kind in ("git", "path"):
            if kind in value:
                return f"{kind} {value[kind]}"
    return str(value)
