"""
Logging setup for the league engine.

Handlers live on the top-level ``league`` logger only. Module loggers created
with ``logging.getLogger(__name__)`` propagate to it, so configuring it once
covers every service.
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from league.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_FILE_NAME = 'league.log'
LOG_BACKUP_DAYS = 14


def configure_package_logger(package: str = 'league') -> logging.Logger:
    """Attach console and daily rotating file handlers to the package logger once."""
    package_logger = logging.getLogger(package)
    if package_logger.handlers:
        return package_logger

    log_level = logging.DEBUG if Config.DEBUG else logging.INFO
    package_logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    log_dir = Path(Config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = TimedRotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        when='midnight',
        backupCount=LOG_BACKUP_DAYS,
        encoding='utf-8',
    )
    # The file keeps everything; the console follows DEBUG
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    package_logger.addHandler(file_handler)

    return package_logger


def setup_logger(name: str) -> logging.Logger:
    """Get a module logger, configuring its top-level package logger on first use."""
    configure_package_logger(name.split('.')[0])
    return logging.getLogger(name)
