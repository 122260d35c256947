"""Allow ``python -m kiln`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m kiln`` behaves identically to the ``kiln`` console script.
"""

from __future__ import annotations

from kiln.cli.app import cli

if __name__ == "__main__":
    cli()
