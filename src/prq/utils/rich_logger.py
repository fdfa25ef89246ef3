"""
Rich Logger for prq
===================

Logging utility with rich console formatting and timezone-aware file output.

Features:
- Rich console formatting on stderr, keeping stdout free for command output
- Optional rotating file log with timezone-aware timestamps
- Caller context and keyword context on every message
- Masking of secret-looking environment variable values
"""

import inspect
import logging
import logging.handlers
import os
import re
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import pytz
from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "prq"
DEFAULT_TIMEZONE = pytz.utc
DEFAULT_LOG_LEVEL = logging.WARNING
MAX_LOG_FILE_SIZE = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3

SESSION_ID = str(uuid.uuid4())

SENSITIVE_ENV_PATTERNS = [
    'GH_TOKEN', 'GITHUB_TOKEN', 'TOKEN', 'PASSWORD', 'SECRET', 'KEY',
]


class TimezoneAwareFormatter(logging.Formatter):
    """Formatter that renders record timestamps in a fixed timezone."""

    def __init__(self, fmt=None, datefmt=None, style='%', tz=None):
        super().__init__(fmt, datefmt, style)
        self.tz = tz

    def formatTime(self, record, datefmt=None):  # noqa: N802
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if self.tz:
            dt = dt.astimezone(self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()


class RichLogger:
    """
    Logger wrapper with rich formatting and structured context.

    Module loggers are created without handlers and propagate to the
    package logger, which `setup_logging` equips with handlers.
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: int = logging.NOTSET,
        timezone: pytz.BaseTzInfo = DEFAULT_TIMEZONE,
        log_file: Optional[Union[str, Path]] = None,
        console_output: bool = False,
        file_output: bool = False,
    ):
        """
        Initialize the RichLogger.

        Args:
            name: Logger name (typically module name)
            level: Logging level
            timezone: Timezone for file log timestamps
            log_file: Path to log file (optional)
            console_output: Enable rich console logging on stderr
            file_output: Enable rotating file logging
        """
        self.name = name
        self.timezone = timezone
        self.session_id = SESSION_ID

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Prevent duplicate handlers on reconfiguration
        if self.logger.handlers:
            self.logger.handlers.clear()

        if console_output:
            self._setup_console_handler()

        if file_output:
            self._setup_file_handler(log_file)

    def _setup_console_handler(self) -> None:
        """Attach a RichHandler writing to stderr."""
        console_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(console_handler)

    def _setup_file_handler(self, log_file: Optional[Union[str, Path]] = None) -> None:
        """
        Attach a rotating file handler.

        Args:
            log_file: Path to log file. Defaults to ~/.cache/prq/logs/prq.log
        """
        if not log_file:
            log_dir = Path.home() / ".cache" / "prq" / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / "prq.log"

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_FILE_SIZE,
            backupCount=BACKUP_COUNT,
            encoding='utf-8'
        )

        file_format = (
            "%(asctime)s | %(levelname)8s | %(name)s | "
            f"PID:{os.getpid()} | TID:{threading.get_ident()} | "
            f"SID:{self.session_id[:8]} | %(message)s"
        )
        file_handler.setFormatter(TimezoneAwareFormatter(file_format, tz=self.timezone))
        self.logger.addHandler(file_handler)

    def _get_caller_info(self) -> dict[str, Any]:
        """Find the first stack frame outside this module."""
        current_file = inspect.getfile(inspect.currentframe())
        for frame_info in inspect.stack()[1:]:
            frame_file = frame_info.filename
            if frame_file != current_file and not frame_file.endswith('logging/__init__.py'):
                return {
                    'filename': os.path.basename(frame_file),
                    'function': frame_info.function,
                    'lineno': frame_info.lineno,
                }
        return {'filename': 'unknown', 'function': 'unknown', 'lineno': 0}

    def _mask_sensitive_env_vars(self, text: str) -> str:
        """
        Mask values of secret-looking environment variables in text.

        Args:
            text: Text that might contain sensitive information

        Returns:
            Text with sensitive values masked
        """
        masked_text = text
        for var, value in os.environ.items():
            if value and len(value) > 4 and any(p in var.upper() for p in SENSITIVE_ENV_PATTERNS):
                masked_value = value[:4] + '*' * (len(value) - 4)
                masked_text = re.sub(re.escape(value), masked_value, masked_text)
        return masked_text

    def _format_message(self, message: str, **kwargs) -> str:
        """Prefix caller context, append keyword context, mask secrets."""
        caller = self._get_caller_info()
        formatted_msg = f"[{caller['filename']}:{caller['lineno']}] {caller['function']}() | {message}"

        if kwargs:
            context_parts = [f"{k}={v}" for k, v in kwargs.items()]
            formatted_msg += f" | {', '.join(context_parts)}"

        return self._mask_sensitive_env_vars(formatted_msg)

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(self._format_message(message, **kwargs))

    def exception(self, message: str, **kwargs) -> None:
        """
        Log an error with the active exception's traceback.

        Must be called from within an except block.
        """
        self.logger.error(self._format_message(message, **kwargs), exc_info=True)


_loggers: dict[str, RichLogger] = {}
_logger_lock = threading.Lock()


def get_logger(name: str = ROOT_LOGGER_NAME) -> RichLogger:
    """
    Get or create a logger instance (thread-safe).

    Args:
        name: Logger name

    Returns:
        RichLogger instance
    """
    if name in _loggers:
        return _loggers[name]

    with _logger_lock:
        if name not in _loggers:
            _loggers[name] = RichLogger(name)
        return _loggers[name]


def setup_logging(
    level: int = DEFAULT_LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    console_output: bool = True,
    file_output: bool = False,
    timezone: Optional[pytz.BaseTzInfo] = None
) -> RichLogger:
    """
    Configure the package logger. Call once at application startup.

    Args:
        level: Logging level
        log_file: Path to log file (None for default location)
        console_output: Enable rich console output to stderr
        file_output: Enable rotating file output
        timezone: Timezone for file timestamps (default: UTC)

    Returns:
        RichLogger: Configured package logger
    """
    with _logger_lock:
        logger = RichLogger(
            ROOT_LOGGER_NAME,
            level=level,
            timezone=timezone or DEFAULT_TIMEZONE,
            log_file=log_file,
            console_output=console_output,
            file_output=file_output,
        )
        _loggers[ROOT_LOGGER_NAME] = logger
    return logger
