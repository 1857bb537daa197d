"""Shared rich console and logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Route packsmith log records through rich.

    WARNING and above by default, everything with `verbose`.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("packsmith")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
