"""Dependency tree construction for ``kiln deps tree``.

Pure transforms over a :class:`~kiln.core.models.Manifest`; rendering
happens in the CLI layer.  Cycles are cut at the first repeated
package on a branch and marked as such.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from kiln.core.models import Manifest
from kiln.exceptions import PackageNotFoundError


@dataclass(frozen=True, slots=True)
class TreeNode:
    name: str
    version: str | None
    children: tuple[TreeNode, ...] = ()
    cycle: bool = False
    """True when this node repeats an ancestor and was not expanded."""

    @property
    def label(self) -> str:
        label = self.name if self.version is None else f"{self.name} v{self.version}"
        return f"{label} (*)" if self.cycle else label


def project_tree(manifest: Manifest, project_name: str, project_version: str) -> TreeNode:
    """Tree rooted at the project itself, following its direct requirements."""
    children = tuple(
        _descend(manifest, requirement.name, (project_name,))
        for requirement in sorted(manifest.requirements, key=lambda req: req.name)
    )
    return TreeNode(name=project_name, version=project_version, children=children)


def package_tree(manifest: Manifest, package: str) -> TreeNode:
    """Tree rooted at *package*.

    Raises
    ------
    PackageNotFoundError
        If *package* is not in the manifest.
    """
    _require(manifest, package)
    return _descend(manifest, package, ())


def inverted_tree(
    manifest: Manifest,
    package: str,
    project_name: str,
    project_version: str,
) -> TreeNode:
    """Tree of everything that depends on *package*, up to the project.

    Raises
    ------
    PackageNotFoundError
        If *package* is not in the manifest.
    """
    _require(manifest, package)
    return _ascend(manifest, package, (), project_name, project_version)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _require(manifest: Manifest, package: str) -> None:
    if manifest.find(package) is None:
        raise PackageNotFoundError(
            f"Package '{package}' not found in the manifest.",
            hint="Run `kiln deps list` to see the project's packages.",
        )


def _descend(manifest: Manifest, name: str, ancestors: tuple[str, ...]) -> TreeNode:
    found = manifest.find(name)
    version = found.version if found is not None else None
    if name in ancestors:
        return TreeNode(name=name, version=version, cycle=True)
    if found is None:
        return TreeNode(name=name, version=None)
    path = (*ancestors, name)
    children = tuple(
        _descend(manifest, child, path) for child in sorted(found.requirements)
    )
    return TreeNode(name=name, version=version, children=children)


def _ascend(
    manifest: Manifest,
    name: str,
    descendants: tuple[str, ...],
    project_name: str,
    project_version: str,
) -> TreeNode:
    found = manifest.find(name)
    version = found.version if found is not None else None
    if name in descendants:
        return TreeNode(name=name, version=version, cycle=True)
    path = (*descendants, name)
    children = [
        _ascend(manifest, dependant, path, project_name, project_version)
        for dependant in sorted(_dependants(manifest, name))
    ]
    if any(req.name == name for req in manifest.requirements):
        children.append(TreeNode(name=project_name, version=project_version))
    return TreeNode(name=name, version=version, children=tuple(children))


def _dependants(manifest: Manifest, name: str) -> Iterable[str]:
    return (pkg.name for pkg in manifest.packages if name in pkg.requirements)
