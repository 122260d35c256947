"""Tests for domain models (core/models.py).

Coverage:
* Enumerations parse case-insensitively, accept aliases and reject
  unknown values with the list of valid choices.
* ``ProjectPaths`` derived locations.
* ``PackageRequirement`` parsing of ``name@version``.
* ``Manifest`` lookup.
* Immutability of the records.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from kiln.core.models import (
    Codegen,
    Manifest,
    ManifestPackage,
    Mode,
    PackageConfig,
    PackageRequirement,
    ProjectPaths,
    RetirementReason,
    Runtime,
    Target,
    TargetSupport,
    Template,
    Which,
)
from kiln.exceptions import InvalidChoiceError, UsageError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TestChoiceParsing:
    @pytest.mark.parametrize("text", ["javascript", "JavaScript", "JAVASCRIPT", " javascript "])
    def test_target_is_case_insensitive(self, text: str) -> None:
        assert Target.parse(text) is Target.JAVASCRIPT

    @pytest.mark.parametrize("text", ["deno", "Deno", "DENO"])
    def test_runtime_is_case_insensitive(self, text: str) -> None:
        assert Runtime.parse(text) is Runtime.DENO

    @pytest.mark.parametrize("text", ["test", "Test", "TEST"])
    def test_which_is_case_insensitive(self, text: str) -> None:
        assert Which.parse(text) is Which.TEST

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("erl", Target.ERLANG), ("JS", Target.JAVASCRIPT)],
    )
    def test_target_aliases(self, text: str, expected: Target) -> None:
        assert Target.parse(text) is expected

    def test_runtime_node_alias(self) -> None:
        assert Runtime.parse("node") is Runtime.NODEJS

    def test_hyphenated_values(self) -> None:
        assert Codegen.parse("Dependencies-Only") is Codegen.DEPENDENCIES_ONLY
        assert TargetSupport.parse("not-enforced") is TargetSupport.NOT_ENFORCED

    def test_unknown_value_lists_choices(self) -> None:
        with pytest.raises(InvalidChoiceError) as exc_info:
            Target.parse("wasm")
        message = str(exc_info.value)
        assert "wasm" in message
        assert "erlang" in message
        assert "javascript" in message
        assert exc_info.value.choices == ("erlang", "javascript")

    def test_kind_label_is_readable(self) -> None:
        with pytest.raises(InvalidChoiceError) as exc_info:
            RetirementReason.parse("bored")
        assert exc_info.value.kind == "retirement reason"

    def test_aliases_do_not_leak_between_enums(self) -> None:
        with pytest.raises(InvalidChoiceError):
            Runtime.parse("js")

    def test_str_is_canonical_value(self) -> None:
        assert str(Mode.PROD) == "prod"
        assert f"{Template.LIB}" == "lib"

    def test_choices_in_declaration_order(self) -> None:
        assert Runtime.choices() == ("nodejs", "deno", "bun")


# ---------------------------------------------------------------------------
# ProjectPaths
# ---------------------------------------------------------------------------

class TestProjectPaths:
    def test_derived_paths(self, tmp_path: Path) -> None:
        paths = ProjectPaths(root=tmp_path)

        assert paths.root_config == tmp_path / "kiln.toml"
        assert paths.manifest == tmp_path / "manifest.toml"
        assert paths.src_directory == tmp_path / "src"
        assert paths.test_directory == tmp_path / "test"
        assert paths.dev_directory == tmp_path / "dev"
        assert paths.build_directory == tmp_path / "build"
        assert paths.build_packages_directory == tmp_path / "build" / "packages"

    def test_target_build_directory(self, tmp_path: Path) -> None:
        paths = ProjectPaths(root=tmp_path)
        assert paths.build_directory_for_target(Mode.PROD, Target.JAVASCRIPT) == (
            tmp_path / "build" / "prod" / "javascript"
        )

    def test_package_build_directory(self, tmp_path: Path) -> None:
        paths = ProjectPaths(root=tmp_path)
        assert paths.build_directory_for_package(Mode.DEV, Target.ERLANG, "app") == (
            tmp_path / "build" / "dev" / "erlang" / "app"
        )

    def test_frozen(self, tmp_path: Path) -> None:
        paths = ProjectPaths(root=tmp_path)
        with pytest.raises(dataclasses.FrozenInstanceError):
            paths.root = tmp_path / "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# PackageRequirement
# ---------------------------------------------------------------------------

class TestPackageRequirement:
    def test_bare_name(self) -> None:
        assert PackageRequirement.parse("wibble") == PackageRequirement("wibble", None)

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("wibble@2", ">= 2.0.0 and < 3.0.0"),
            ("wibble@2.5", ">= 2.5.0 and < 3.0.0"),
            ("wibble@2.5.1", ">= 2.5.1 and < 3.0.0"),
            ("wibble@0.3", ">= 0.3.0 and < 1.0.0"),
        ],
    )
    def test_version_ranges(self, text: str, expected: str) -> None:
        requirement = PackageRequirement.parse(text)
        assert requirement.name == "wibble"
        assert requirement.version_range == expected

    @pytest.mark.parametrize("text", ["wibble@", "wibble@x", "wibble@1.2.3.4", "wibble@^1"])
    def test_malformed_version(self, text: str) -> None:
        with pytest.raises(UsageError, match="Invalid version"):
            PackageRequirement.parse(text)

    def test_empty_name(self) -> None:
        with pytest.raises(UsageError):
            PackageRequirement.parse("@1.0.0")


# ---------------------------------------------------------------------------
# Manifest / PackageConfig
# ---------------------------------------------------------------------------

class TestManifest:
    def test_find(self) -> None:
        stdlib = ManifestPackage(name="kiln_stdlib", version="0.40.0")
        manifest = Manifest(requirements=(), packages=(stdlib,))

        assert manifest.find("kiln_stdlib") is stdlib
        assert manifest.find("missing") is None
        assert len(manifest) == 1


class TestPackageConfig:
    def test_defaults(self) -> None:
        config = PackageConfig(name="app", target=Target.JAVASCRIPT, javascript_runtime=Runtime.BUN)
        defaults = config.defaults()

        assert defaults.name == "app"
        assert defaults.target is Target.JAVASCRIPT
        assert defaults.runtime is Runtime.BUN
