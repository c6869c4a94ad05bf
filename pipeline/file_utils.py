#!/usr/bin/env python3
"""
File helpers for media copies

Provides content sniffing with python-magic, xxHash content digests used to
recognise copies that already exist, and the copy primitive every pipeline
stage uses to guarantee a destination-side artifact.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

import magic
import xxhash

logger = logging.getLogger(__name__)

# MIME type to extension mapping for the formats exiftool may report
MIME_TO_EXTENSION = {
    # Images
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/heif": ".heic",
    "image/tiff": ".tiff",
    "image/bmp": ".bmp",
    "image/x-ms-bmp": ".bmp",
    "image/x-adobe-dng": ".dng",
    # Videos
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/x-msvideo": ".avi",
    "video/x-matroska": ".mkv",
}

# exiftool file type names that use a different extension
_TYPE_EXTENSION_ALIASES = {
    ".jpeg": ".jpg",
    ".tif": ".tiff",
    ".heif": ".heic",
}

HASH_CHUNK_SIZE = 65536


def get_mime_type(file_path: Path) -> Optional[str]:
    """
    Get the MIME type of a file using python-magic.

    Args:
        file_path: Path to the file to analyze

    Returns:
        MIME type string or None if detection fails

    Example:
        >>> get_mime_type(Path("/tmp/photo.heic"))  # really a JPEG
        'image/jpeg'
    """
    try:
        return magic.from_file(str(file_path), mime=True)
    except Exception as e:
        logger.debug(f"Failed to get MIME type for {file_path}: {e}")
        return None


def detect_extension(file_path: Path) -> Optional[str]:
    """Return the extension (with dot) matching the file's actual content.

    Returns:
        Extension such as ".jpg", or None if the content type is unknown
    """
    mime = get_mime_type(file_path)
    if not mime:
        return None
    return MIME_TO_EXTENSION.get(mime)


def extensions_equivalent(first: str, second: str) -> bool:
    """Compare two extensions ignoring case, leading dots and known aliases.

    Example:
        >>> extensions_equivalent("JPEG", ".jpg")
        True
    """
    def _norm(ext: str) -> str:
        ext = "." + ext.lower().lstrip(".")
        return _TYPE_EXTENSION_ALIASES.get(ext, ext)

    return _norm(first) == _norm(second)


def compute_file_hash(file_path: Path) -> str:
    """Compute the xxHash64 digest of a file's contents.

    Reads the file in 64KB chunks so large videos are not loaded into memory.

    Args:
        file_path: File to hash

    Returns:
        Hex digest string

    Raises:
        OSError: If the file cannot be read
    """
    hasher = xxhash.xxh64()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def files_identical(first: Path, second: Path) -> bool:
    """Check whether two files exist and have the same contents.

    Sizes are compared before hashing. Unreadable files compare unequal.
    """
    try:
        if first.stat().st_size != second.stat().st_size:
            return False
        return compute_file_hash(first) == compute_file_hash(second)
    except OSError as e:
        logger.debug(f"Could not compare {first} and {second}: {e}")
        return False


def copy_media(source: Path, destination: Path, overwrite: bool = False) -> bool:
    """Copy a media file, preserving timestamps.

    Args:
        source: File to copy
        destination: Target path; parent directories are created
        overwrite: If False, an existing destination is left untouched

    Returns:
        True if a copy was made, False if the destination already existed

    Raises:
        OSError: If the copy fails
    """
    if destination.exists() and not overwrite:
        logger.debug(f"Destination already present, not copying: {destination}")
        return False

    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)
    logger.debug(f"Copied {source} -> {destination}")
    return True


def temporary_output_path(destination: Path) -> Path:
    """Hidden sibling path used when a write must replace an existing file.

    The original suffix is kept last so exiftool still sees the same file type.
    """
    return destination.with_name(f".{destination.stem}.albumfix-tmp{destination.suffix}")


def replace_file(source: Path, destination: Path) -> None:
    """Atomically move source over destination (same filesystem)."""
    os.replace(source, destination)
