"""
Logging configuration - configures the root logger from settings
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from factory_speed_stats.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Console output goes to stderr; stdout is reserved for the speed report.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = LOG_LEVELS.get(level_name, logging.INFO)
    log_file = log_file or settings.LOG_FILE

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        logs_dir = os.path.dirname(log_file)
        if logs_dir and not os.path.exists(logs_dir):
            os.makedirs(logs_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(log_level)

    # pymongo emits heartbeat/topology chatter at DEBUG
    for noisy_logger in ["pymongo", "pymongo.topology", "pymongo.connection"]:
        logging.getLogger(noisy_logger).setLevel(max(log_level, logging.WARNING))

    logging.getLogger(__name__).debug(
        f"Logging configured: level={level_name}, file={log_file}"
    )
