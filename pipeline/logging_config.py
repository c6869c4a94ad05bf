"""
Logging setup shared by the CLI and the pipeline modules.

A normal run keeps the console down to errors so tqdm bars are not torn
apart by log lines. A verbose run prints INFO to the console and, when a
log file is given, records the whole DEBUG trail there: every exiftool
command line and every pairing decision.

Level usage:
    DEBUG   - exiftool argument lists, pairing matches, copies and renames
    INFO    - directories entered, per-directory counts, reports written
    WARNING - orphans, unreadable sidecars, skipped offset rows
    ERROR   - directories skipped, copies that failed

Example:
    >>> setup_logging(verbose=True, log_file="logs/albumfix.log")
    >>> logging.getLogger("pipeline.pairing").debug("Exact match: a.jpg -> a.jpg.json")
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# =============================================================================
# Formats
# =============================================================================

VERBOSE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
QUIET_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOGS_DIR = "logs"

# python-magic logs every libmagic lookup at DEBUG
QUIET_LIBRARIES: List[str] = ["magic"]


# =============================================================================
# Setup
# =============================================================================


def _detailed_formatter() -> logging.Formatter:
    return logging.Formatter(VERBOSE_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Install the console handler and the optional file handler.

    Replaces whatever handlers the root logger had, so calling this twice
    does not duplicate output.

    Args:
        verbose: Show INFO on the console instead of ERROR only
        log_file: File that receives every record at DEBUG

    Returns:
        The root logger
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console = logging.StreamHandler()
    if verbose:
        console.setLevel(logging.INFO)
        console.setFormatter(_detailed_formatter())
    else:
        console.setLevel(logging.ERROR)
        console.setFormatter(logging.Formatter(QUIET_FORMAT))
    root.addHandler(console)

    if log_file:
        trail = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        trail.setLevel(logging.DEBUG)
        trail.setFormatter(_detailed_formatter())
        root.addHandler(trail)

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def default_log_file(command: str, logs_dir: str = LOGS_DIR) -> Path:
    """Timestamped log path for one CLI command, e.g. logs/albumfix_fix_errors_20250526_101500.log

    The logs directory is created if needed.
    """
    logs_path = Path(logs_dir)
    logs_path.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_path / f"albumfix_{command.replace('-', '_')}_{stamp}.log"
