"""
Unknown Error Remediator

Catch-all for diagnostics no pattern recognises. The file is copied
through and the raw diagnostic is kept verbatim so new patterns can be
added to the classifier later.
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


class UnknownErrorRemediator(RemediatorBase):
    """Copies the file through and echoes the diagnostic"""

    @staticmethod
    def get_kind() -> ErrorKind:
        return ErrorKind.UNKNOWN

    @staticmethod
    def remediate(
        classification: ErrorClassification,
        media_path: Path,
        destination_dir: Path,
        context: RemediationContext,
        sidecar_path: Optional[Path] = None,
    ) -> RemediationResult:
        raw = classification.params.get("raw", "")
        return copy_through(media_path, destination_dir, f"Unknown error: {raw}")


def get_remediator():
    """Return remediator class for registration"""
    return UnknownErrorRemediator
