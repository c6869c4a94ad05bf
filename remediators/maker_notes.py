"""
Maker Notes Remediator

exiftool refuses to rewrite files whose vendor maker notes it cannot parse.
Re-running the same write with -m (ignore minor errors) usually succeeds;
the annotated result replaces the fallback copy made on the first pass.
"""

import logging
from pathlib import Path
from typing import Optional

from pipeline.classifier import ErrorClassification, ErrorKind
from remediators.base import (
    RemediationContext,
    RemediationResult,
    RemediatorBase,
    copy_through,
)

logger = logging.getLogger(__name__)

IGNORE_MINOR_ERRORS = "-m"


class MakerNotesRemediator(RemediatorBase):
    """Retries the metadata write while tolerating minor errors"""

    @staticmethod
    def get_kind() -> ErrorKind:
        return ErrorKind.MAKER_NOTES

    @staticmethod
    def remediate(
        classification: ErrorClassification,
        media_path: Path,
        destination_dir: Path,
        context: RemediationContext,
        sidecar_path: Optional[Path] = None,
    ) -> RemediationResult:
        assignments = context.build_assignments(media_path, sidecar_path)
        outcome = context.applier.apply(
            media_path,
            assignments,
            destination_dir,
            extra_flags=[IGNORE_MINOR_ERRORS],
            replace_existing=True,
        )

        if outcome.success:
            return RemediationResult(
                True, "Metadata written ignoring unparsable maker notes", outcome.destination
            )

        return copy_through(
            media_path,
            destination_dir,
            f"Failed to fix maker notes: {outcome.diagnostic or 'unknown error'}",
        )


def get_remediator():
    """Return remediator class for registration"""
    return MakerNotesRemediator
