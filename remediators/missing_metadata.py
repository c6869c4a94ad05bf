"""
Missing Metadata Remediator

Handles files that never had a usable sidecar. Nothing can be written, so
the original is passed through to the destination untouched.
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

MESSAGE = "No metadata available, file copied to destination"


class MissingMetadataRemediator(RemediatorBase):
    """Pass-through for files without metadata"""

    @staticmethod
    def get_kind() -> ErrorKind:
        return ErrorKind.MISSING_METADATA

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
    return MissingMetadataRemediator
