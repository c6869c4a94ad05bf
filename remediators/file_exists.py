"""
File Exists Remediator

exiftool will not overwrite an existing output file. The destination
already holds the file, so the failure is treated as satisfied.
"""

from pathlib import Path
from typing import Optional

from pipeline.classifier import ErrorClassification, ErrorKind
from remediators.base import RemediationContext, RemediationResult, RemediatorBase


class FileExistsRemediator(RemediatorBase):
    """Marks destination collisions as processed without touching files"""

    @staticmethod
    def get_kind() -> ErrorKind:
        return ErrorKind.FILE_EXISTS

    @staticmethod
    def remediate(
        classification: ErrorClassification,
        media_path: Path,
        destination_dir: Path,
        context: RemediationContext,
        sidecar_path: Optional[Path] = None,
    ) -> RemediationResult:
        existing = classification.params.get("existing_path")
        destination = Path(existing) if existing else Path(destination_dir) / Path(media_path).name
        return RemediationResult(
            True, f"File already exists in destination: {destination.name}", destination
        )


def get_remediator():
    """Return remediator class for registration"""
    return FileExistsRemediator
