#!/usr/bin/env python3
"""
Run Configuration Module

Settings for one albumfix run. Values come from CLI arguments first, then
environment variables (optionally loaded from a .env file), then defaults.

Environment variables:
    EXIFTOOL_PATH            exiftool executable (default: "exiftool" on PATH)
    ALBUMFIX_DEFAULT_OFFSET  UTC offset used when a file has none on record
    ALBUMFIX_OFFSET_FILE     CSV of per-file offsets (exiftool -csv output)
    ALBUMFIX_WORKERS         worker threads for metadata writes (1 = sequential)
    ALBUMFIX_PROGRESS        "false" hides progress bars (default: shown)
"""

import os
from dataclasses import dataclass
from typing import Optional

from pipeline.utils import parse_bool_env

DEFAULT_EXIFTOOL = "exiftool"
DEFAULT_OFFSET = "+00:00"
DEFAULT_WORKERS = 1


@dataclass
class AlbumFixConfig:
    """Resolved settings for a single run"""

    exiftool_path: str = DEFAULT_EXIFTOOL
    default_offset: str = DEFAULT_OFFSET
    offset_file: Optional[str] = None
    workers: int = DEFAULT_WORKERS
    verbose: bool = False
    show_progress: bool = True

    @classmethod
    def from_env(cls, **overrides) -> "AlbumFixConfig":
        """Build a config from environment variables with explicit overrides.

        Overrides whose value is None are ignored, so argparse namespaces can
        be passed through directly.

        Args:
            **overrides: Field values that take precedence over the environment

        Returns:
            AlbumFixConfig instance

        Raises:
            ValueError: If ALBUMFIX_WORKERS is not an integer
        """
        config = cls(
            exiftool_path=os.environ.get("EXIFTOOL_PATH") or DEFAULT_EXIFTOOL,
            default_offset=os.environ.get("ALBUMFIX_DEFAULT_OFFSET") or DEFAULT_OFFSET,
            offset_file=os.environ.get("ALBUMFIX_OFFSET_FILE") or None,
            workers=int(os.environ.get("ALBUMFIX_WORKERS", DEFAULT_WORKERS)),
            show_progress=parse_bool_env(os.environ.get("ALBUMFIX_PROGRESS", "true")),
        )
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(config, key):
                raise TypeError(f"Unknown config field: {key}")
            setattr(config, key, value)

        config.workers = max(1, config.workers)
        return config
