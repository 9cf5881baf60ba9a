"""
Application logging.

Every component logs through the Log facade with a "Component: message"
prefix. Output goes to a colored console stream and, unless
SISLOG_FILE_LOGGING is switched off, to a timestamped file in the user log
directory. Only the newest MAX_LOG_FILES files are kept.
"""
import logging
import os
import sys
from datetime import datetime
from logging import Logger
from pathlib import Path
from typing import Optional, Union

from colorama import init, Fore, Style
init(autoreset=True)

LOGGER_NAME = "sislog"
LOG_FILE_PREFIX = "sislog_"
MAX_LOG_FILES = 10

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def file_logging_enabled() -> bool:
    return os.getenv("SISLOG_FILE_LOGGING", "1").strip().lower() not in ("0", "false", "no", "off")


def open_log_file(log_dir: Optional[Path] = None, keep: int = MAX_LOG_FILES) -> Path:
    """
    Pick the path for this session's log file and drop old ones.

    Names embed a sortable timestamp (sislog_YYYY-mm-dd_HHMMSS.log), so
    sorting by name sorts by age.

    Args:
        log_dir: Target directory; defaults to the platform log directory
        keep: Number of files to keep, counting the new one

    Returns:
        Path of the new log file (not yet created)
    """
    if log_dir is None:
        from src.utils.paths import get_logs_dir
        log_dir = get_logs_dir()
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    existing = sorted(p for p in log_dir.glob(f"{LOG_FILE_PREFIX}*.log"))
    for old in existing[:max(len(existing) - (keep - 1), 0)]:
        old.unlink()

    return log_dir / f"{LOG_FILE_PREFIX}{datetime.now():%Y-%m-%d_%H%M%S}.log"


class ColorFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        logging.DEBUG: Fore.BLUE,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.LIGHTRED_EX,
    }

    def format(self, record):
        # File handlers share the record and need the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{self.COLORS.get(record.levelno, Fore.WHITE)}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


def build_logger(name: str = LOGGER_NAME, log_dir: Optional[Path] = None,
                 to_file: bool = True, level: int = logging.DEBUG) -> Logger:
    """Configure the named logger once; later calls return it unchanged."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.propagate = False

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ColorFormatter("%(asctime)s | %(levelname)s | %(message)s", "%H:%M:%S"))
    logger.addHandler(console)

    if to_file:
        file_handler = logging.FileHandler(open_log_file(log_dir), encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(message)s", "%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


class RepetitiveMessageFilter(logging.Filter):
    """
    Drops per-cycle DEBUG chatter: clock ticks, unchanged polls and
    timecode dispatches arrive many times a second.
    """

    NOISY_PREFIXES = (
        "clockengine: tick",
        "firestorereststore: poll unchanged",
        "store: dispatch set_timecode",
    )

    def filter(self, record):
        if record.levelno > logging.DEBUG:
            return True
        return not record.getMessage().lower().startswith(self.NOISY_PREFIXES)


class Log:
    """
    Application-wide logging facade.

    Components call Log.info("Component: message") rather than holding
    their own logger objects.
    """
    _logger: Logger = build_logger(to_file=file_logging_enabled())
    _noise_filter = RepetitiveMessageFilter()

    @classmethod
    def set_level(cls, level: Union[str, int]):
        """
        Change the level of the logger and all its handlers.

        Args:
            level: Name ("DEBUG" ... "CRITICAL") or logging constant; unknown
                names fall back to INFO
        """
        if isinstance(level, str):
            level = LEVELS.get(level.upper(), logging.INFO)
        cls._logger.setLevel(level)
        for handler in cls._logger.handlers:
            handler.setLevel(level)

    @classmethod
    def enable_repetitive_filter(cls, enable: bool = True):
        for handler in cls._logger.handlers:
            if enable:
                handler.addFilter(cls._noise_filter)
            else:
                handler.removeFilter(cls._noise_filter)

    @classmethod
    def debug(cls, text: str):
        cls._logger.debug(text)

    @classmethod
    def info(cls, text: str):
        cls._logger.info(text)

    @classmethod
    def warning(cls, text: str, exc_info: bool = False):
        cls._logger.warning(text, exc_info=exc_info)

    @classmethod
    def error(cls, text: str, exc_info: bool = False):
        cls._logger.error(text, exc_info=exc_info)
