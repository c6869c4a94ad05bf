"""
Truncated Media Remediator

A truncated container cannot be rebuilt here. The file is copied through
and stays unprocessed so it shows up in the analysis report.
"""

from pathlib import Path
from typing import Optional

from pipeline.classifier import ErrorClassification, ErrorKind
from remediators.base import (
    RemediationContext,
    RemediationResult,
    RemediatorBase,
    copy_through,
)

MESSAGE = "File appears to be corrupted (truncated media)"


class TruncatedMediaRemediator(RemediatorBase):
    """Copies truncated files through without changes"""

    @staticmethod
    def get_kind() -> ErrorKind:
        return ErrorKind.TRUNCATED_MEDIA

    @staticmethod
    def remediate(
        classification: ErrorClassification,
        media_path: Path,
        destination_dir: Path,
        context: RemediationContext,
        sidecar_path: Optional[Path] = None,
    ) -> RemediationResult:
        return copy_through(media_path, destination_dir, MESSAGE)


def get_remediator():
    """Return remediator class for registration"""
    return TruncatedMediaRemediator
