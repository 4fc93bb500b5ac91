from __future__ import annotations

import sys

from loguru import logger


def setup_logging(level: str = "INFO") -> None:
    """
    Configures loguru for the plugin_evals library.

    This function enables "plugin_evals" logs and sets up a standard format
    that includes the bound `task` and `trial` extras.
    """
    logger.remove()
    logger.configure(extra={"task": "-", "trial": "-"})

    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[task]}</cyan>:<cyan>{extra[trial]}</cyan> - "
        "<level>{message}</level>"
    )

    logger.add(sys.stderr, format=fmt, level=level)
    logger.enable("plugin_evals")
