import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app_utils import config

FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(log_file: str = config.LOG_FILE, level: str = config.LOG_LEVEL,
                 max_bytes: int = 1_000_000, backup_count: int = 3):
    """Attach a rotating file handler to the root logger once.

    Streamlit re-executes the script on every interaction, so calling this
    twice must not stack handlers.
    """
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))

    target = str(Path(log_file).resolve())
    for h in logger.handlers:
        if isinstance(h, RotatingFileHandler) and h.baseFilename == target:
            return logger

    handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FORMAT))
    logger.addHandler(handler)
    return logger
