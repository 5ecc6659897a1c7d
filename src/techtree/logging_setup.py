"""Root logger configuration for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from techtree.config import LogLevel

LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def configure_logging(level: str | LogLevel = LogLevel.INFO, verbose: bool = False) -> None:
    """Route log records through Rich on stderr.

    Args:
        level: Configured level name
        verbose: Force debug output regardless of level
    """
    if isinstance(level, LogLevel):
        level = level.value
    resolved = logging.DEBUG if verbose else LEVELS.get(level, logging.INFO)

    logging.basicConfig(
        level=resolved,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
