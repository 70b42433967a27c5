from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGING_CONFIGURED = False

logger = logging.getLogger("tomatl")


def setup_logging(level: int = logging.WARNING, *, console: Console | None = None) -> None:
    """
    Configure the ``tomatl`` logger once per process.

    Records go to stderr through rich so they don't tangle with the live
    progress display on stdout.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        logger.setLevel(level)
        return

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level)

    _LOGGING_CONFIGURED = True
