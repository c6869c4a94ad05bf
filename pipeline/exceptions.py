#!/usr/bin/env python3
"""
Exception types raised by the albumfix pipeline.

Per-file problems never raise: they are converted into ledger rows.
Only directory-level failures and a missing exiftool binary surface as
exceptions.
"""


class AlbumFixError(Exception):
    """Base class for all albumfix errors"""


class DirectoryError(AlbumFixError):
    """A source directory is missing or a destination directory cannot be created"""

    def __init__(self, directory, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"{directory}: {reason}")


class ExifToolNotFoundError(AlbumFixError):
    """The exiftool executable could not be launched"""


class SidecarError(AlbumFixError):
    """A JSON sidecar is unreadable or holds values that cannot be written"""
