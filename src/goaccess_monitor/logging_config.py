"""Logging configuration.

Log records go to stderr through rich so they stay out of the way of
prompts and summaries printed on stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the package logger with a timestamped rich handler.

    Returns:
        The ``goaccess_monitor`` logger.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("goaccess_monitor")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
