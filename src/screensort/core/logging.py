"""
Centralized logging utility for ScreenSort.
Provides a unified logger and configuration that respects the global Log Level setting.
"""

import logging
import sys
from typing import Optional
from .settings import BackendSettings, LogLevel


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


def setup_logging(level: Optional[LogLevel] = None):
    """
    Configure logging based on the provided level or the global setting.

    Args:
        level: LogLevel to use. If None, reads from BackendSettings.
    """
    if level is None:
        level = BackendSettings.get_log_level()

    log_mapping = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.NONE: logging.CRITICAL + 1
    }

    target_level = log_mapping.get(level, logging.INFO)

    logging.basicConfig(
        level=target_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ],
        force=True
    )

    screensort_logger = logging.getLogger("screensort")
    screensort_logger.setLevel(target_level)

    # Silence noisy third-party loggers unless in DEBUG mode
    if level != LogLevel.DEBUG:
        for noisy_lib in ["urllib3", "requests", "httpx", "openai", "google", "PIL", "asyncio"]:
            logging.getLogger(noisy_lib).setLevel(logging.ERROR)

    if level != LogLevel.NONE:
        screensort_logger.debug(f"Logging initialized at level: {level.value}")


# Global logger for general use
logger = logging.getLogger("screensort")
