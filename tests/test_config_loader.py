"""Tests for reading ``kiln.toml`` (infra/config_loader.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from kiln.core.models import ProjectPaths, Runtime, Target
from kiln.exceptions import ConfigError
from kiln.infra.config_loader import load_package_config, parse_package_config


class TestLoadPackageConfig:
    def test_reads_project(self, project: ProjectPaths) -> None:
        config = load_package_config(project)

        assert config.name == "my_app"
        assert config.version == "1.2.3"
        assert config.target is Target.ERLANG
        assert config.dependencies == {"kiln_stdlib": ">= 0.40.0 and < 2.0.0"}
        assert config.dev_dependencies == {"kilnunit": ">= 1.0.0 and < 2.0.0"}
        assert config.data["name"] == "my_app"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="does not exist"):
            load_package_config(ProjectPaths(root=tmp_path))

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "kiln.toml").write_text("name = \n", encoding="utf-8")
        with pytest.raises(ConfigError, match="not valid TOML"):
            load_package_config(ProjectPaths(root=tmp_path))


class TestParsePackageConfig:
    def test_name_required(self) -> None:
        with pytest.raises(ConfigError, match="name"):
            parse_package_config({"version": "1.0.0"})

    def test_defaults(self) -> None:
        config = parse_package_config({"name": "app"})

        assert config.version == "0.1.0"
        assert config.target is Target.ERLANG
        assert config.javascript_runtime is Runtime.NODEJS
        assert config.dependencies == {}

    def test_target_and_runtime(self) -> None:
        config = parse_package_config({
            "name": "app",
            "target": "JavaScript",
            "javascript": {"runtime": "bun"},
        })

        assert config.target is Target.JAVASCRIPT
        assert config.javascript_runtime is Runtime.BUN

    def test_invalid_target(self) -> None:
        with pytest.raises(ConfigError, match="Invalid target 'wasm'"):
            parse_package_config({"name": "app", "target": "wasm"})

    def test_non_string_version(self) -> None:
        with pytest.raises(ConfigError, match="version"):
            parse_package_config({"name": "app", "version": 1})

    def test_git_and_path_dependencies(self) -> None:
        config = parse_package_config({
            "name": "app",
            "dependencies": {
                "wibble": {"git": "https://example.com/wibble.git", "ref": "a8b3c5d"},
                "wobble": {"path": "../wobble"},
            },
        })

        assert config.dependencies == {
            "wibble": "git https://example.com/wibble.git",
            "wobble": "path ../wobble",
        }

    def test_underscore_dev_dependencies(self) -> None:
        config = parse_package_config({"name": "app", "dev_dependencies": {"kilnunit": "~> 1.0"}})
        assert config.dev_dependencies == {"kilnunit": "~> 1.0"}

    def test_dependencies_must_be_table(self) -> None:
        with pytest.raises(ConfigError, match="must be a table"):
            parse_package_config({"name": "app", "dependencies": ["wibble"]})
