#!/usr/bin/env python3
"""
Dependency Checker

Preflight checks for the exiftool binary every metadata write relies on.
"""

import shutil
import subprocess
from typing import Optional


def get_exiftool_version(executable: str = "exiftool") -> Optional[str]:
    """Return the installed exiftool version string

    Args:
        executable: exiftool command name or path

    Returns:
        Version string (e.g. "12.76"), or None if exiftool cannot be run
    """
    try:
        result = subprocess.run(
            [executable, "-ver"],
            capture_output=True,
            text=True,
            check=True,
            stdin=subprocess.DEVNULL,
        )
    except (subprocess.CalledProcessError, OSError):
        return None
    return result.stdout.strip() or None


def check_exiftool(executable: str = "exiftool") -> bool:
    """Check if exiftool is installed and runnable

    Returns:
        True if exiftool is available, False otherwise
    """
    return get_exiftool_version(executable) is not None


def locate_exiftool(executable: str = "exiftool") -> Optional[str]:
    """Resolve the exiftool executable to a full path, if it is on PATH"""
    return shutil.which(executable)


def print_exiftool_error() -> None:
    """Print installation instructions for exiftool"""
    print("ERROR: exiftool is not installed or not in PATH")
    print("Please install exiftool:")
    print("  macOS: brew install exiftool")
    print("  Linux: sudo apt-get install libimage-exiftool-perl")
    print("  Windows: Download from https://exiftool.org/")
    print("Or point EXIFTOOL_PATH at an existing installation.")
