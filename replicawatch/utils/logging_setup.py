"""Logging configuration for the replicawatch CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from replicawatch.constants.defaults import LOG_LEVEL_DEFAULT

_HANDLER_NAME = "replicawatch"


def configure_logging(level: str = LOG_LEVEL_DEFAULT, console: Console | None = None) -> None:
    """Send log records to stderr through a RichHandler.

    Safe to call more than once; the replicawatch handler is replaced, other
    handlers are left alone.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level.upper())
