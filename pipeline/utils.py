#!/usr/bin/env python3
"""
Filename and text helpers shared across the albumfix pipeline
"""

import os
from typing import Optional


# ============================================================================
# Filename Classification
# ============================================================================

# Extensions found in Google Photos takeouts that exiftool can annotate
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".heic", ".dng", ".png", ".gif", ".bmp", ".tiff", ".webp"}
VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".mkv"}
ALL_MEDIA_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS

# Only these containers are probed as possible live-photo companion clips
LIVE_PHOTO_EXTENSIONS = {".mov", ".mp4"}

SIDECAR_SUFFIX = ".json"


def _extension(file_path) -> str:
    return os.path.splitext(str(file_path))[1].lower()


def get_media_type(file_path) -> Optional[str]:
    """Classify a filename by extension, case-insensitively.

    Returns:
        "image", "video", or None for anything albumfix does not annotate

    Example:
        >>> get_media_type("photo.HEIC")
        'image'
        >>> get_media_type("photo.jpg.json") is None
        True
    """
    ext = _extension(file_path)
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext in VIDEO_EXTENSIONS:
        return "video"
    return None


def is_supported_media(file_path) -> bool:
    return _extension(file_path) in ALL_MEDIA_EXTENSIONS


def is_sidecar(file_path) -> bool:
    """True for any *.json name, including duplicate forms like a.jpg(1).json"""
    return str(file_path).lower().endswith(SIDECAR_SUFFIX)


# ============================================================================
# Text Helpers
# ============================================================================


def normalize_diagnostic(*parts: Optional[str]) -> Optional[str]:
    """Join tool output into a single-line diagnostic.

    Blank lines are dropped and the remaining lines are joined with "; ".

    Args:
        *parts: Output chunks (stdout, stderr, extra notes); None is ignored

    Returns:
        Single-line text, or None if there was nothing to report

    Example:
        >>> normalize_diagnostic("Warning: x\\n", "Error: y\\n")
        'Warning: x; Error: y'
    """
    lines = []
    for part in parts:
        if not part:
            continue
        for line in part.splitlines():
            line = line.strip()
            if line:
                lines.append(line)
    return "; ".join(lines) if lines else None


def clean_string(value) -> str:
    """Return a valid UTF-8 string for use as a tag value.

    Undecodable bytes and lone surrogates are replaced rather than dropped,
    and surrounding whitespace is stripped.
    """
    if value is None:
        return ""
    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="replace")
    else:
        text = str(value)
    return text.encode("utf-8", errors="replace").decode("utf-8").strip()


# ============================================================================
# Environment Helpers
# ============================================================================


def parse_bool_env(value: str) -> bool:
    """Read an on/off environment value; "true", "1", "yes" and "on" count as on.

    Example:
        >>> parse_bool_env("YES"), parse_bool_env("off")
        (True, False)
    """
    return value.strip().lower() in ("true", "1", "yes", "on")
