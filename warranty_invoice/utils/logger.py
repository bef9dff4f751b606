"""
Logging Setup.

Every module logs through a child of the "warranty_invoice" logger, so a
single call at startup decides where extraction messages go: a colored
stderr stream (stdout stays free for piped JSON) and, optionally, a
rotating log file.

Usage:
    from warranty_invoice.utils.logger import setup_logger, get_logger

    setup_logger()                     # once, in the entry point
    logger = get_logger(__name__)      # in each module
    logger.info("Parsed 4 rows from faktura_1.png")

Author: ML Engineering Team
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Optional, Union

import colorama
from colorama import Fore, Style

colorama.init()

ROOT_LOGGER_NAME = "warranty_invoice"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that wraps each console line in a level color.

    Fallthroughs between extraction tiers and confidence penalties are
    logged at WARNING, so they stand out in yellow.
    """

    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }
    RESET = Style.RESET_ALL

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, '')
        return f"{color}{super().format(record)}{self.RESET}"


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _build_handlers(
    log_format: str,
    date_format: str,
    log_file: Optional[str],
    max_bytes: int,
    backup_count: int,
    colorize: bool
) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stderr)
    formatter_class = ColoredFormatter if colorize else logging.Formatter
    console.setFormatter(formatter_class(log_format, datefmt=date_format))
    handlers: List[logging.Handler] = [console]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        # Log files never carry ANSI color codes
        rotating.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        handlers.append(rotating)

    return handlers


def setup_logger(
    level: Union[str, int] = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the application logger.

    Calling it again replaces the previous handlers, so tests and the
    CLI can reconfigure freely.

    Args:
        level: Level name or number, e.g. "DEBUG".
        log_format: Record format; defaults to DEFAULT_FORMAT.
        date_format: Timestamp format; defaults to DEFAULT_DATE_FORMAT.
        log_file: Rotating log file path, or None for console only.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        colorize: Color console output by level.

    Returns:
        The "warranty_invoice" logger.
    """
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    app_logger.handlers.clear()

    for handler in _build_handlers(
        log_format or DEFAULT_FORMAT,
        date_format or DEFAULT_DATE_FORMAT,
        log_file,
        max_bytes,
        backup_count,
        colorize
    ):
        app_logger.addHandler(handler)

    app_logger.propagate = False
    set_level(level)

    app_logger.debug("Logging initialized")
    return app_logger


def set_level(level: Union[str, int]) -> None:
    """Change the level of the application logger and all its handlers."""
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    numeric = _to_level(level)
    app_logger.setLevel(numeric)
    for handler in app_logger.handlers:
        handler.setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the application namespace.

    Args:
        name: Usually __name__; names outside the package are nested
            under "warranty_invoice".
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logger_from_config() -> logging.Logger:
    """Configure logging from the "logging" section of settings.yaml."""
    from warranty_invoice.config import get_config

    log_file = None
    if get_config("logging.file.enabled", False):
        log_file = get_config("logging.file.path")

    return setup_logger(
        level=get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", 10485760),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
