"""
Logging configuration for ItemForge.

Modules obtain a named logger through get_logger(); the host application
decides where output goes by calling configure_logging() once at startup.
"""

import logging
import logging.handlers
import os
import time
from typing import Dict, Optional

DEFAULT_LEVEL = logging.INFO
LOGGERS: Dict[str, logging.Logger] = {}
LOGGER_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
ROOT_LOGGER_NAME = "itemforge"


def configure_logging(level: int = DEFAULT_LEVEL, log_dir: Optional[str] = None) -> None:
    """
    Configure the ItemForge logger hierarchy.

    Args:
        level: The log level to use.
        log_dir: Optional directory for a rotating log file. Console only when None.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOGGER_FORMAT, DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)
        log_file = os.path.join(log_dir, f'itemforge_{time.strftime("%Y%m%d_%H%M%S")}.log')
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5*1024*1024,  # 5 MB
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.debug("Logging configured")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name, nested under the ItemForge root logger.

    Args:
        name: Short subsystem name, e.g. "Pool" or "Roller".

    Returns:
        The cached logger.
    """
    if name in LOGGERS:
        return LOGGERS[name]

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    LOGGERS[name] = logger
    return logger
