#!/usr/bin/env python3
"""
Orphan Tracking

Collects the files pairing could not match during a run:

- media files no sidecar was found for (still copied to the destination)
- sidecars no media file claimed (nothing is done with them)

The run ends with one JSON report at <destination>/issues/orphans.json.
Directories may be resolved from worker threads, so recording is locked.
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ISSUES_DIR = "issues"
REPORT_NAME = "orphans.json"

MEDIA_REASON = "No JSON sidecar found"
SIDECAR_REASON = "No media file matched"


class OrphanTracker:
    """Orphaned media and sidecars across every directory of one run"""

    def __init__(self, source_directory):
        self.source_directory = str(source_directory)
        self.started = datetime.now().isoformat()
        self.media: List[Dict[str, Any]] = []
        self.sidecars: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def record_media(self, media_path: Path, directory: Path) -> None:
        entry = {
            "file_path": str(media_path),
            "directory": str(directory),
            "reason": MEDIA_REASON,
        }
        try:
            entry["file_size"] = Path(media_path).stat().st_size
        except OSError as e:
            logger.debug(f"Could not stat {media_path}: {e}")

        with self._lock:
            self.media.append(entry)

    def record_sidecar(self, sidecar_path: Path, directory: Path) -> None:
        entry = {
            "file_path": str(sidecar_path),
            "directory": str(directory),
            "reason": SIDECAR_REASON,
        }
        with self._lock:
            self.sidecars.append(entry)

    def has_orphans(self) -> bool:
        return bool(self.media or self.sidecars)

    def counts(self) -> Dict[str, int]:
        return {
            "total_orphans": len(self.media) + len(self.sidecars),
            "orphaned_media": len(self.media),
            "orphaned_sidecars": len(self.sidecars),
        }

    def to_report(self) -> Dict[str, Any]:
        return {
            "source_directory": self.source_directory,
            "timestamp": self.started,
            "summary": self.counts(),
            "orphaned_media": self.media,
            "orphaned_sidecars": self.sidecars,
        }

    def save(self, output_dir) -> Optional[Path]:
        """Write the report under output_dir/issues.

        Args:
            output_dir: Destination root of the run

        Returns:
            Report path, or None when there were no orphans or the write
            failed (the failure is logged)
        """
        if not self.has_orphans():
            logger.info("No orphans to report")
            return None

        report_path = Path(output_dir) / ISSUES_DIR / REPORT_NAME
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            with open(report_path, "w", encoding="utf-8") as f:
                json.dump(self.to_report(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Could not write orphan report {report_path}: {e}")
            return None

        counts = self.counts()
        logger.info(
            f"Orphan report: {report_path} "
            f"({counts['orphaned_media']} media, {counts['orphaned_sidecars']} sidecars)"
        )
        return report_path
