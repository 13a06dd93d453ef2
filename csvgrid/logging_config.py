"""
Logging configuration.

Sets up file logging for csvgrid so that incomplete-file diagnostics,
catalog merges and read summaries end up in a rotating log file, and
optionally on the console through rich.
"""

from __future__ import annotations
import logging
from pathlib import Path
from datetime import datetime
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler

LOGGER_NAME = "csvgrid"


def setup_logging(log_dir: Path | str = "logs", verbose: bool = False) -> Path:
    """
    Set up logging for csvgrid.

    Parameters
    ----------
    log_dir : Path or str
        Directory for log files (default: "logs")
    verbose : bool
        Also log DEBUG messages to the console

    Returns
    -------
    Path
        Path to the current log file

    Notes
    -----
    - Creates rotating log files (max 10 MB, keeps 5 backups)
    - Log format: timestamp | level | module | message
    - Calling it again replaces the handlers installed by the previous call
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = get_log_file_path(log_dir)

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)
    logger.addHandler(file_handler)

    if verbose:
        console_handler = RichHandler(show_path=False, markup=False)
        console_handler.setLevel(logging.DEBUG)
        logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("csvgrid session started")
    logger.info("=" * 80)

    return log_file


def get_log_file_path(log_dir: Path | str = "logs") -> Path:
    """Path to today's log file."""
    log_dir = Path(log_dir)
    return log_dir / f"csvgrid_{datetime.now().strftime('%Y%m%d')}.log"


def read_recent_logs(log_dir: Path | str = "logs", max_lines: int = 500) -> list[str]:
    """
    Read recent log entries from the current log file.

    Parameters
    ----------
    log_dir : Path or str
        Directory containing log files (default: "logs")
    max_lines : int
        Maximum number of lines to return (default: 500)

    Returns
    -------
    list[str]
        List of log lines (most recent last)
    """
    log_file = get_log_file_path(log_dir)

    if not log_file.exists():
        return ["No log file found for today."]

    with open(log_file, 'r', encoding='utf-8') as f:
        lines = f.readlines()
    return lines[-max_lines:]
