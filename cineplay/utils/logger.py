import logging
import sys
from pathlib import Path
from typing import Optional
from ..config import LOG_PATH, LOG_LEVEL

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d) - %(message)s'

# Background writes and history lookups make these chatty at DEBUG
QUIET_LOGGERS = {
    "aiosqlite": logging.INFO,
    "asyncio": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}

def setup_logging(level: Optional[str] = None, log_path: Optional[Path] = LOG_PATH):
    """
    Configures the root logger for the player service.
    `level` defaults to LOG_LEVEL from the environment; pass log_path=None
    to log to the console only.
    """
    level = (level or LOG_LEVEL).upper()
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    logging.info(f"Logging initialized. Level: {level}, File: {log_path or 'disabled'}")

def get_logger(name):
    """Returns a logger with the given name."""
    return logging.getLogger(name)
