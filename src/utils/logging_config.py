"""
Console and file logging configuration.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

colorama.init(autoreset=True)

# Every module logs through logging.getLogger(__name__), so handlers attach to
# the top-level package logger.
LOGGER_NAMESPACE = "src"


class LogLevel(str, Enum):
    """Log level enumeration."""

    MINIMAL = "minimal"  # WARNING and above
    NORMAL = "normal"  # INFO, WARNING, ERROR
    DETAILED = "detailed"  # DEBUG and above
    FULL = "full"  # DEBUG with file/line context


class ColoredFormatter(logging.Formatter):
    """Colored log formatter."""

    COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    def format(self, record):
        # Color a copy so file handlers sharing the record see the plain level name.
        colored = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, "")
        colored.levelname = f"{log_color}{record.levelname}{Style.RESET_ALL}"
        return super().format(colored)


def _resolve_level(level: LogLevel, verbose: bool, debug: bool) -> int:
    if debug or verbose or level in (LogLevel.DETAILED, LogLevel.FULL):
        return logging.DEBUG
    if level == LogLevel.NORMAL:
        return logging.INFO
    return logging.WARNING


def setup_logging(
    level: LogLevel = LogLevel.NORMAL,
    log_to_file: bool = False,
    log_file: Optional[str] = None,
    verbose: bool = False,
    debug: bool = False,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level
        log_to_file: Whether to also log to a file
        log_file: Log file path (default: logs/sred_engine.log)
        verbose: Verbose mode flag
        debug: Debug mode flag

    Returns:
        Configured package logger
    """
    log_level = _resolve_level(level, verbose, debug)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(log_level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    if debug or verbose or level == LogLevel.FULL:
        console_format = ColoredFormatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", datefmt="%H:%M:%S"
        )
    else:
        console_format = ColoredFormatter("%(levelname)-8s | %(message)s")
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    if log_to_file:
        log_path = Path(log_file or "logs/sred_engine.log")
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package namespace."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
