"""
Rejuvenator Logging Configuration

Structured logging setup with verbose options, plus the append-only run log
that backs the operator console.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from enum import Enum


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


# Custom log format
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(funcName)s | %(message)s"

ROOT_LOGGER_NAME = "rejuvenator"

# Logger registry
_loggers: dict = {}
_initialized: bool = False
_log_file: Optional[Path] = None


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    log_file: Optional[Path] = None,
    verbose: bool = True,
    console_output: bool = True
) -> None:
    """
    Set up logging configuration for the entire application.

    Args:
        level: Minimum log level to capture
        log_file: Optional path to log file
        verbose: If True, use verbose format with line numbers
        console_output: If True, output to console
    """
    global _initialized, _log_file

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)

    # Run log handlers survive reconfiguration; everything else is replaced
    root_logger.handlers = [
        h for h in root_logger.handlers if isinstance(h, RunLogHandler)
    ]

    log_format = VERBOSE_FORMAT if verbose else DEFAULT_FORMAT
    formatter = logging.Formatter(log_format, datefmt="%Y-%m-%d %H:%M:%S")

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level.value)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        _log_file = Path(log_file)
        _log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(_log_file, encoding='utf-8')
        file_handler.setLevel(level.value)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _initialized = True
    root_logger.debug(f"Logging initialized - Level: {level.name}, Verbose: {verbose}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the module/component

    Returns:
        Configured logger instance
    """
    global _loggers

    if not _initialized:
        setup_logging()

    full_name = f"{ROOT_LOGGER_NAME}.{name}" if not name.startswith(ROOT_LOGGER_NAME) else name

    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)

    return _loggers[full_name]


def create_session_log(
    base_dir: Path,
    prefix: str = "session",
    level: LogLevel = LogLevel.INFO,
    verbose: bool = True
) -> Path:
    """
    Create a new session log file with timestamp.

    Args:
        base_dir: Directory to create log file in
        prefix: Prefix for log file name
        level: Minimum log level to capture
        verbose: If True, use verbose format with line numbers

    Returns:
        Path to created log file
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = base_dir / f"{prefix}_{timestamp}.log"
    setup_logging(level=level, log_file=log_file, verbose=verbose)
    return log_file


class RunLogHandler(logging.Handler):
    """
    Captures INFO-and-above records as operator console entries.

    Entries are only ever appended; each one reads ``[HH:MM:SS] message``.
    """

    def __init__(self, level=logging.INFO):
        super().__init__(level)
        self._entries: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
            self._entries.append(f"[{timestamp}] {record.getMessage()}")
        except Exception:
            self.handleError(record)

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def render(self) -> str:
        return "\n".join(self._entries)


def attach_run_log(level: LogLevel = LogLevel.INFO) -> RunLogHandler:
    """Attach a fresh RunLogHandler to the root rejuvenator logger."""
    if not _initialized:
        setup_logging()
    handler = RunLogHandler(level=level.value)
    logging.getLogger(ROOT_LOGGER_NAME).addHandler(handler)
    return handler


def detach_run_log(handler: RunLogHandler) -> None:
    """Remove a RunLogHandler previously attached with attach_run_log."""
    logging.getLogger(ROOT_LOGGER_NAME).removeHandler(handler)
