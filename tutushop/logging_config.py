# tutushop/logging_config.py
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logger(
    name: str = "tutushop",
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        name: logger name; module loggers below it (``tutushop.*``) inherit handlers
        level: level name such as "INFO" or "DEBUG"
        log_dir: when set, also write a rotating ``<name>.log`` file there
        max_bytes: size before the log file rotates
        backup_count: rotated files to keep

    Returns:
        the configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    # configure once; repeated app construction (tests) must not stack handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / f"{name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
