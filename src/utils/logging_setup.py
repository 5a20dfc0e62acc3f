"""Logging setup for scripts that drive the aggregator."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from utils.config import Config


def setup_logging(
    verbose: bool = False,
    log_dir: Optional[Path] = None,
    log_file_name: Optional[str] = None,
) -> Optional[Path]:
    """Setup logging to the console and, optionally, a file.

    Args:
        verbose: If True, set DEBUG level; otherwise Config.LOG_LEVEL
        log_dir: Directory for log files (no file logging if None)
        log_file_name: Custom log file name (default: auto-generated with timestamp)

    Returns:
        Path to the log file, or None when logging to the console only
    """
    log_level = logging.DEBUG if verbose else getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)

    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    log_file = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        if log_file_name is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file_name = f"storecat_{timestamp}.log"
        log_file = log_dir / log_file_name

        # File handler (always DEBUG to capture everything)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if log_file:
        logging.info(f"Logging initialized. Log file: {log_file}")
    return log_file
