"""
Logging configuration for the crypto position tracker.

Records go to a rotating file in full detail and to the terminal through
rich, which shares the console the formatters print tables on.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from ..exceptions import ConfigurationError

LOG_FILE_NAME = "trackwise_crypto.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ('urllib3', 'requests', 'asyncio')


def resolve_level(name: str) -> int:
    """Map a level name such as 'info' to its logging constant."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {name!r}")
    return level


def _file_handler(log_dir: Path) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    return handler


def _console_handler(console: Optional[Console]) -> logging.Handler:
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter('%(message)s'))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_directory: str = "logs",
    console: Optional[Console] = None
) -> Path:
    """
    Route all records to a rotating log file and the rich console.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_directory: Directory to store log files
        console: Console to log to; a new one is created when omitted

    Returns:
        Path of the log file

    Raises:
        ConfigurationError: if the level name is unknown
    """
    level = resolve_level(log_level)

    log_dir = Path(log_directory)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(level)
    root_logger.addHandler(_file_handler(log_dir))
    root_logger.addHandler(_console_handler(console))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    log_file = log_dir / LOG_FILE_NAME
    logging.getLogger(__name__).info(f"Logging initialized - Level: {log_level}, File: {log_file}")
    return log_file
