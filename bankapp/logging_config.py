"""
Logging configuration for the banking core.

Every module logs through ``logging.getLogger(__name__)``, so everything
lands under the ``bankapp`` logger configured here. A console handler is
always installed; a rotating file handler is added when LOG_FILE is set.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from bankapp.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def setup_logging(level: str | None = None, log_file: str | None = None) -> logging.Logger:
    """
    Configure the ``bankapp`` logger.

    Arguments override the LOG_LEVEL / LOG_FILE settings. Safe to call more
    than once: existing handlers are replaced, not duplicated.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    log_file = log_file or settings.LOG_FILE

    logger = logging.getLogger("bankapp")
    logger.setLevel(numeric_level)
    logger.handlers = []

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # SQL statements are echoed by the engine itself when DEBUG is on
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )
    return logger
