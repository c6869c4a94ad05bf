"""
Core pipeline for albumfix.

Pairing, metadata building and application, error classification, the
per-directory ledger and the orchestrator that ties them together. The
remediators live in their own package and plug in through
remediators.registry.
"""

from .classifier import ErrorClassification, ErrorKind, classify
from .config import AlbumFixConfig
from .dependency_checker import check_exiftool, print_exiftool_error
from .exceptions import AlbumFixError, DirectoryError, ExifToolNotFoundError
from .exiftool import ExifTool
from .ledger import Ledger, LedgerRow
from .logging_config import setup_logging

__version__ = "1.0.0"
__all__ = [
    "AlbumFixConfig",
    "AlbumFixError",
    "DirectoryError",
    "ErrorClassification",
    "ErrorKind",
    "ExifTool",
    "ExifToolNotFoundError",
    "Ledger",
    "LedgerRow",
    "check_exiftool",
    "classify",
    "print_exiftool_error",
    "setup_logging",
]
