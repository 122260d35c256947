"""Rendering of command output (package lists, trees, tables, config).

All display-related logic lives here: no business logic.  Output a
user might pipe into another program goes to stdout.
"""

from __future__ import annotations

import importlib
from collections.abc import Sequence
from typing import Any

from kiln.cli.console import escape, stdout_console
from kiln.core.dependency_tree import TreeNode
from kiln.core.models import Manifest, OutdatedPackage, PackageConfig
from kiln.exceptions import EnvironmentError


def _import_rich(module: str, name: str) -> Any:
    """Import a Rich renderable class lazily."""
    try:
        imported = importlib.import_module(f"rich.{module}")
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return getattr(imported, name)


# ---------------------------------------------------------------------------
# deps list / deps outdated
# ---------------------------------------------------------------------------

def print_packages(manifest: Manifest) -> None:
    """One ``name version`` line per locked package, sorted by name."""
    for package in sorted(manifest.packages, key=lambda pkg: pkg.name):
        stdout_console.out(f"{package.name} {package.version}")


def print_outdated(packages: Sequence[OutdatedPackage]) -> None:
    if not packages:
        stdout_console.out("All packages are up to date.")
        return

    table_class = _import_rich("table", "Table")
    table = table_class(show_header=True, header_style="bold magenta", border_style="dim")
    table.add_column("Package", justify="left")
    table.add_column("Current", justify="right")
    table.add_column("Latest", justify="right")
    for package in packages:
        table.add_row(
            escape(package.name),
            package.current_version,
            f"[green]{package.latest_version}[/green]",
        )
    stdout_console.print(table)


# ---------------------------------------------------------------------------
# deps tree
# ---------------------------------------------------------------------------

def build_tree(node: TreeNode) -> Any:
    """Convert a :class:`TreeNode` into a ``rich.tree.Tree``."""
    tree_class = _import_rich("tree", "Tree")
    tree = tree_class(escape(node.label))
    _add_children(tree, node)
    return tree


def _add_children(branch: Any, node: TreeNode) -> None:
    for child in node.children:
        label = f"[dim]{escape(child.label)}[/dim]" if child.cycle else escape(child.label)
        _add_children(branch.add(label), child)


def print_tree(node: TreeNode) -> None:
    stdout_console.print(build_tree(node))


# ---------------------------------------------------------------------------
# print-config / raw output
# ---------------------------------------------------------------------------

def print_config(config: PackageConfig) -> None:
    pretty_class = _import_rich("pretty", "Pretty")
    stdout_console.print(pretty_class(config.data))


def print_text(text: str) -> None:
    stdout_console.out(text)
