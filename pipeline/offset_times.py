#!/usr/bin/env python3
"""
Offset Time Table

Maps media files to the UTC offset used when rendering capture timestamps.
The table is loaded from the CSV that exiftool produces with:

    exiftool -csv -OffsetTime -OffsetTimeOriginal -OffsetTimeDigitized -r <dir> > offsets.csv

Rows where every offset column is "-" carry no information and are skipped.
Rows whose offset columns disagree are ambiguous, logged and skipped.
"""

import csv
import logging
import os
import re
from datetime import timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

OFFSET_COLUMNS = ("OffsetTime", "OffsetTimeOriginal", "OffsetTimeDigitized")
EMPTY_VALUE = "-"

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):(\d{2})$")


def parse_offset(offset: str) -> timezone:
    """Convert an offset string such as "+08:00" into a tzinfo.

    Raises:
        ValueError: If the string is not in +HH:MM / -HH:MM form

    Example:
        >>> parse_offset("-05:30")
        datetime.timezone(datetime.timedelta(days=-1, seconds=66600))
    """
    match = _OFFSET_PATTERN.match(offset.strip())
    if not match:
        raise ValueError(f"Invalid UTC offset: {offset!r}")
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return timezone(-delta if sign == "-" else delta)


def _path_key(path) -> str:
    return os.path.normcase(os.path.abspath(str(path)))


class OffsetTimeTable:
    """Lookup from media path to UTC offset string"""

    def __init__(self, offsets: Optional[Dict[str, str]] = None, default_offset: str = "+00:00"):
        parse_offset(default_offset)
        self.default_offset = default_offset
        self._by_path: Dict[str, str] = {}
        self._by_name: Dict[str, Optional[str]] = {}
        for path, offset in (offsets or {}).items():
            self.add(path, offset)

    def add(self, path, offset: str) -> None:
        """Record the offset for one file.

        Name-only lookups are kept for files whose basename is unique in the
        table; a second file with the same name disables the name fallback.
        """
        self._by_path[_path_key(path)] = offset
        name = Path(str(path)).name
        if name in self._by_name and self._by_name[name] != offset:
            self._by_name[name] = None
        else:
            self._by_name[name] = offset

    def lookup(self, media_path) -> str:
        """Return the offset for media_path, or the default offset."""
        offset = self._by_path.get(_path_key(media_path))
        if offset:
            return offset
        offset = self._by_name.get(Path(str(media_path)).name)
        return offset or self.default_offset

    def timezone_for(self, media_path) -> timezone:
        return parse_offset(self.lookup(media_path))

    def __len__(self) -> int:
        return len(self._by_path)

    @classmethod
    def load(
        cls,
        csv_path: Optional[str],
        default_offset: str = "+00:00",
        encoding: str = "utf-8-sig",
    ) -> "OffsetTimeTable":
        """Load a table from an exiftool offset CSV.

        Relative SourceFile entries are resolved against the CSV's directory.

        Args:
            csv_path: Path to the CSV, or None for an empty table
            default_offset: Offset returned for files not in the table
            encoding: CSV encoding (exiftool may write a BOM)

        Returns:
            OffsetTimeTable instance

        Raises:
            FileNotFoundError: If csv_path is given but does not exist
        """
        table = cls(default_offset=default_offset)
        if not csv_path:
            return table

        csv_file = Path(csv_path)
        base_dir = csv_file.parent
        skipped = 0

        with open(csv_file, "r", encoding=encoding, newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                source = (row.get("SourceFile") or "").strip()
                if not source:
                    continue

                values = {
                    (row.get(column) or EMPTY_VALUE).strip() or EMPTY_VALUE
                    for column in OFFSET_COLUMNS
                }
                values.discard(EMPTY_VALUE)
                if not values:
                    continue
                if len(values) > 1:
                    logger.warning(
                        f"Conflicting offsets for {source}: {sorted(values)}, skipping"
                    )
                    skipped += 1
                    continue

                offset = values.pop()
                try:
                    parse_offset(offset)
                except ValueError as e:
                    logger.warning(f"{e} for {source}, skipping")
                    skipped += 1
                    continue

                source_path = Path(source)
                if not source_path.is_absolute():
                    source_path = base_dir / source_path
                table.add(source_path, offset)

        logger.info(
            f"Loaded {len(table)} offset(s) from {csv_file}"
            + (f" ({skipped} skipped)" if skipped else "")
        )
        return table
