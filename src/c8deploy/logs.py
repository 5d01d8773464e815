"""
Run logging for installer and health passes.

Every run writes its own timestamped log file and mirrors records to the
console through rich.
"""

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler

console = Console()

FILE_FORMAT = "[%(asctime)s] %(levelname)-7s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def run_log_path(log_dir: Path, prefix: str, now: Optional[datetime] = None) -> Path:
    """Return the log file path for a run started at ``now``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return log_dir / f"{prefix}_{stamp}.log"


def prepare_log_dir(log_dir: Path) -> Path:
    """Create the log directory, moving aside a file squatting on its path."""
    if log_dir.exists() and not log_dir.is_dir():
        backup = log_dir.with_name(f"{log_dir.name}.bak_{int(time.time())}")
        console.print(f"[yellow]WARN: {log_dir} exists and is not a directory, moving to {backup}[/yellow]")
        log_dir.rename(backup)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def setup_logging(
    log_dir: Path,
    prefix: str,
    level: str = "info",
    console_output: bool = True,
) -> Tuple[logging.Logger, Path]:
    """
    Set up logging for one run.

    Args:
        log_dir: Directory for run log files
        prefix: File name prefix, e.g. "servicelog" or "health"
        level: Console log level (the file always records DEBUG)
        console_output: Also log to the console

    Returns:
        The package logger and the log file path
    """
    log_file = run_log_path(prepare_log_dir(Path(log_dir)), prefix)

    logger = logging.getLogger("c8deploy")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)

    if console_output:
        console_handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
        console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        console_handler.setFormatter(logging.Formatter("%(message)s", datefmt=DATE_FORMAT))
        logger.addHandler(console_handler)

    return logger, log_file


@contextmanager
def run_log_file(log_dir: Path, prefix: str) -> Iterator[Path]:
    """Also write the package log to a run file of its own while the block runs."""
    log_file = run_log_path(prepare_log_dir(Path(log_dir)), prefix)
    handler = logging.FileHandler(log_file)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.getLogger("c8deploy")
    logger.addHandler(handler)
    try:
        yield log_file
    finally:
        logger.removeHandler(handler)
        handler.close()
