#!/usr/bin/env python3
"""
Ledger

Per-directory CSV record of what happened to every media file. The ledger
for a destination directory lives next to it, not inside it:

    /out/Album 1/             destination directory
    /out/Album 1_output.csv   its ledger

Columns: Media File, JSON File, Destination File, Processed, Errors.
Processed is the literal "true" or "false"; Errors is empty whenever
Processed is true.

A processing pass resets and appends; a remediation pass reads every row,
transforms the sequence and swaps a rewritten file into place.
"""

import csv
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

LEDGER_SUFFIX = "_output.csv"
# Media File,Destination File,Processed,Errors plus the sidecar path that
# remediators rebuild assignments from. Ledgers without it still read.
LEDGER_HEADER = ["Media File", "JSON File", "Destination File", "Processed", "Errors"]

# Marks an Errors value that a remediation pass already handled
REMEDIATED_PREFIX = "[remediated:"


@dataclass
class LedgerRow:
    """One media file's outcome"""

    media_file: str
    json_file: str = ""
    destination_file: str = ""
    processed: bool = False
    errors: str = ""

    def __post_init__(self):
        if self.processed:
            self.errors = ""

    @property
    def remediated(self) -> bool:
        return self.errors.startswith(REMEDIATED_PREFIX)

    def to_csv(self) -> Dict[str, str]:
        return {
            "Media File": self.media_file,
            "JSON File": self.json_file,
            "Destination File": self.destination_file,
            "Processed": "true" if self.processed else "false",
            "Errors": self.errors,
        }

    @classmethod
    def from_csv(cls, row: Dict[str, str]) -> "LedgerRow":
        return cls(
            media_file=row.get("Media File") or "",
            json_file=row.get("JSON File") or "",
            destination_file=row.get("Destination File") or "",
            processed=(row.get("Processed") or "").strip().lower() == "true",
            errors=row.get("Errors") or "",
        )


def mark_remediated(
    row: LedgerRow,
    kind: str,
    processed: bool,
    message: str,
    destination: Optional[Path] = None,
) -> LedgerRow:
    """Return the row as it should read after a remediation attempt.

    A fixed row becomes processed with no errors. An unfixed row keeps
    Processed=false and its Errors are prefixed with "[remediated:<kind>]"
    so later passes leave it alone; the original diagnostic is kept unless
    the message already contains it.
    """
    destination_file = str(destination) if destination else row.destination_file
    if processed:
        return replace(row, destination_file=destination_file, processed=True, errors="")

    errors = f"{REMEDIATED_PREFIX}{kind}] {message}"
    if row.errors and row.errors not in message:
        errors = f"{errors} | {row.errors}"
    return replace(row, destination_file=destination_file, processed=False, errors=errors)


def ledger_path_for(directory) -> Path:
    """Ledger location for a directory: a sibling named <dirname>_output.csv"""
    directory = Path(os.path.abspath(str(directory)))
    return directory.parent / f"{directory.name}{LEDGER_SUFFIX}"


class Ledger:
    """CSV ledger bound to one destination directory"""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.path = ledger_path_for(self.directory)
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return self.path.is_file()

    def reset(self) -> None:
        """Start a fresh ledger for a new processing pass."""
        with self._lock:
            if self.path.exists():
                self.path.unlink()
                logger.debug(f"Removed previous ledger: {self.path}")

    def append(self, row: LedgerRow) -> None:
        """Append one row, writing the header first if the file is new."""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            write_header = not self.path.exists() or self.path.stat().st_size == 0
            with open(self.path, "a", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=LEDGER_HEADER)
                if write_header:
                    writer.writeheader()
                writer.writerow(row.to_csv())

    def read_all(self) -> List[LedgerRow]:
        """Read every row in file order. A missing ledger reads as empty."""
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8", newline="") as f:
            return [LedgerRow.from_csv(row) for row in csv.DictReader(f)]

    def rewrite(self, rows: Iterable[LedgerRow]) -> None:
        """Replace the ledger contents with rows in one atomic swap.

        The new contents are written to a temporary file in the same
        directory and moved over the ledger, so an interrupted rewrite
        leaves the previous ledger intact.
        """
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.path.stem}.", suffix=".tmp", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    writer = csv.DictWriter(f, fieldnames=LEDGER_HEADER)
                    writer.writeheader()
                    for row in rows:
                        writer.writerow(row.to_csv())
                os.replace(temp_name, self.path)
            except BaseException:
                if os.path.exists(temp_name):
                    os.unlink(temp_name)
                raise
        logger.debug(f"Rewrote ledger: {self.path}")


def find_ledgers(root) -> List[Path]:
    """All ledger files under root, sorted by path."""
    return sorted(Path(root).rglob(f"*{LEDGER_SUFFIX}"))
