"""Logging Utilities"""
import logging
from pathlib import Path
from typing import Optional


def setup_logger(name: str, log_dir: Optional[str] = 'results/logs', level: str = 'INFO'):
    """Setup console (and optional file) logger."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Already configured by an earlier call
    if logger.handlers:
        return logger

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(log_dir) / f'{name}.log')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
