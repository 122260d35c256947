"""One-time logging initialisation for the ``kiln`` logger hierarchy.

Called exactly once, from :func:`kiln.cli.app.cli`, before any command
runs.  Library modules only ever do ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging

from kiln.cli.console import get_rich_console
from kiln.exceptions import EnvironmentError
from kiln.settings import Settings

ROOT_LOGGER: str = "kiln"


def _make_handler() -> logging.Handler:
    try:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            console=get_rich_console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        return handler
    except (ModuleNotFoundError, EnvironmentError):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        return handler


def initialise_logger(settings: Settings) -> logging.Logger:
    """Attach the single handler of the ``kiln`` logger.

    With logging switched off the logger receives a
    :class:`logging.NullHandler` and nothing reaches the terminal.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = False

    if settings.log_level is None:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return logger

    handler = _make_handler()
    logger.addHandler(handler)
    logger.setLevel(settings.log_level)
    return logger
