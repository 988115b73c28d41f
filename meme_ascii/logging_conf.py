"""
Central logging setup for MemeAscii.
Supports console and optional rotating file logs.
"""

import logging
from logging.handlers import RotatingFileHandler

from .config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(settings: Settings, rotate_bytes: int = 5 * 1024 * 1024, rotate_keep: int = 3) -> None:
    logging.basicConfig(level=settings.log_level_number, format=LOG_FORMAT)

    if settings.log_file:
        handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=rotate_bytes,
            backupCount=rotate_keep,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)

    # SDK clients are chatty at INFO
    if settings.log_level != "DEBUG":
        for name in ("httpx", "httpcore", "google_genai", "groq"):
            logging.getLogger(name).setLevel(logging.WARNING)
