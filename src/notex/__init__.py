"""notex - dedent and syntax-tag code blocks embedded in markup.

Multi-line code elements lose their shared leading indentation while any
inline markup inside them survives, and language engines tag character
ranges of the code with styled wrapper elements.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notex.config import Settings

__version__ = "0.1.0"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure logging to the console and, optionally, a rotating file."""
    from notex.config import get_settings

    settings = settings or get_settings()
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.log.level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    if settings.log.file is None:
        return

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    settings.log.file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.log.file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)
    logging.info("Logging configured. Log file: %s", settings.log.file.absolute())
