"""Logging utilities shared by supipi and its device backend.

Loggers are named after module paths ('supipi.monitor',
'common.backend.resolver', ...) so that a single call to
configure_logging() covers both logger trees.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

LOGGER_ROOTS = ('supipi', 'common')


def get_logger(name: str | None = None) -> logging.Logger:
    """Create or retrieve a logger with consistent naming.

    Args:
        name: Logger name. If None, the calling module's __name__ is used.

    Returns:
        logging.Logger: Logger instance

    Examples:
        >>> logger = get_logger('supipi.monitor')
        >>> logger.info('Message')
    """
    if name is None:
        import inspect
        frame = inspect.currentframe()
        if frame is not None and frame.f_back is not None:
            name = frame.f_back.f_globals.get('__name__', 'supipi')
        else:
            name = 'supipi'

    return logging.getLogger(name)


class ISOFormatter(logging.Formatter):
    """Log formatter with ISO timestamp including milliseconds.

    Formats log messages as:
        <ISO-datetime-with-ms> <log-level> [<module>:<lineno>]: <message>
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat(timespec='milliseconds')
        message = f'{timestamp} {record.levelname} [{record.module}:{record.lineno}]: {record.getMessage()}'
        if record.exc_info:
            message = f'{message}\n{self.formatException(record.exc_info)}'
        return message


def setup_logging_handler(
    logger: logging.Logger,
    log_level: str = 'INFO',
    foreground: bool = True,
    log_file: Path | None = None,
) -> None:
    """Set up a logging handler based on foreground/background mode.

    Args:
        logger: Logger instance to configure
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        foreground: If True, log to stderr. If False, log to log_file (if provided)
        log_file: Path to log file (used only when foreground=False)
    """
    level = getattr(logging, log_level.upper())
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    formatter = ISOFormatter()

    if foreground:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
    elif log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def configure_logging(
    log_level: str = 'INFO',
    foreground: bool = True,
    log_file: Path | None = None,
) -> None:
    """Configure every project logger tree with the same handler setup."""
    for root in LOGGER_ROOTS:
        setup_logging_handler(get_logger(root), log_level, foreground, log_file)
