# apps/api/src/core/logging_setup.py

import logging
from logging.handlers import RotatingFileHandler

from core.settings import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE_NAME = "olx-scraper.log"


def setup_logging(settings: Settings) -> None:
    """
    Console logging always, rotating file only when LOG_DIR is set.
    Safe to call more than once: the file handler is attached once.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(log_level)

    if not settings.log_dir:
        return

    if any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return

    settings.log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        settings.log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(log_level)
    root.addHandler(file_handler)
