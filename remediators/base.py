#!/usr/bin/env python3
"""
Base class for all remediators

A remediator handles one ErrorKind. It gets the ledger row's media file,
sidecar and destination directory, tries to recover, and always leaves a
file at the destination before returning.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pipeline.applier import MetadataApplier
from pipeline.classifier import ErrorClassification, ErrorKind
from pipeline.exceptions import SidecarError
from pipeline.file_utils import copy_media
from pipeline.metadata_builder import MetadataBuilder
from pipeline.sidecar import parse_sidecar

logger = logging.getLogger(__name__)


@dataclass
class RemediationResult:
    """Outcome of one remediation attempt"""

    processed: bool
    message: str
    destination: Optional[Path] = None


@dataclass
class RemediationContext:
    """Services shared by every remediator in a run"""

    applier: MetadataApplier
    builder: MetadataBuilder

    def build_assignments(self, media_path: Path, sidecar_path: Optional[Path]) -> List[str]:
        """Rebuild the assignments for a media file from its sidecar.

        An absent or unreadable sidecar yields no assignments.
        """
        if sidecar_path is None:
            return []
        try:
            record = parse_sidecar(sidecar_path)
            return self.builder.build(record, media_path)
        except SidecarError as e:
            logger.warning(f"Ignoring sidecar during remediation: {e}")
            return []


def copy_through(media_path: Path, destination_dir: Path, message: str) -> RemediationResult:
    """Make sure the original file is present at the destination.

    Never overwrites an existing destination file. A failed copy is logged
    and appended to the message.

    Args:
        media_path: Original media file
        destination_dir: Directory that must receive the file
        message: Explanation recorded in the ledger

    Returns:
        Unprocessed RemediationResult
    """
    destination = Path(destination_dir) / Path(media_path).name
    try:
        copy_media(Path(media_path), destination, overwrite=False)
    except OSError as e:
        logger.error(f"Failed to copy {media_path} to {destination}: {e}")
        return RemediationResult(False, f"{message}; copy failed: {e}", destination)
    return RemediationResult(False, message, destination)


class RemediatorBase(ABC):
    """Base class for all remediators"""

    @staticmethod
    @abstractmethod
    def get_kind() -> ErrorKind:
        """Return the ErrorKind this remediator handles"""
        pass

    @staticmethod
    @abstractmethod
    def remediate(
        classification: ErrorClassification,
        media_path: Path,
        destination_dir: Path,
        context: RemediationContext,
        sidecar_path: Optional[Path] = None,
    ) -> RemediationResult:
        """Attempt recovery for one failed media file

        Must be safe to call again for the same failure and must leave a
        file in destination_dir.

        Args:
            classification: Classified diagnostic with captured params
            media_path: Original media file from the ledger
            destination_dir: Destination directory the ledger belongs to
            context: Shared applier and builder
            sidecar_path: Sidecar recorded in the ledger, if any

        Returns:
            RemediationResult
        """
        pass
