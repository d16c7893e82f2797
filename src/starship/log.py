"""Logging setup for Starship.

Components log through `logging.getLogger(__name__)` unless a logger is
injected. The CLI calls setup_logging() once per invocation.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"

BANNER_WIDTH = 70

# Handlers installed by setup_logging(), replaced on each call
_installed_handlers: List[logging.Handler] = []


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure the root logger.

    Args:
        verbose: Log DEBUG messages to the console
        log_file: Optional rotating log file (10MB x 3)
    """
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    while _installed_handlers:
        handler = _installed_handlers.pop()
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_file),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)


def log_banner(logger: logging.Logger, title: str) -> None:
    """Log a framed stage banner at WARNING level so it stands out."""
    rule = "*" * BANNER_WIDTH
    logger.warning(rule)
    logger.warning("*%s*", title.center(BANNER_WIDTH - 2))
    logger.warning(rule)
