"""
Incorrect Extension Remediator

exiftool will not write a file whose content does not match its extension
("Not a valid HEIC (looks more like a JPEG)"). A sibling copy with the
extension exiftool expects is created next to the source, and the metadata
write is repeated against that copy.

The sibling is reused when an identical one is already there, so repeated
runs do not pile up copies. After a successful write the plain fallback copy
left at the destination by the first pass is removed.
"""

import logging
from pathlib import Path
from typing import Optional

from pipeline.classifier import ErrorClassification, ErrorKind
from pipeline.file_utils import (
    copy_media,
    detect_extension,
    extensions_equivalent,
    files_identical,
)
from remediators.base import (
    RemediationContext,
    RemediationResult,
    RemediatorBase,
    copy_through,
)

logger = logging.getLogger(__name__)


def sibling_path(media_path: Path, expected: str) -> Path:
    """Path of the renamed copy: same directory and stem, expected extension.

    Example:
        >>> sibling_path(Path("/x/a.heic"), "JPEG")
        PosixPath('/x/a.jpeg')
    """
    return media_path.with_name(f"{media_path.stem}.{expected.lower()}")


def prepare_sibling(media_path: Path, sibling: Path) -> Optional[str]:
    """Create (or reuse) the renamed sibling copy.

    Returns:
        Error text if the sibling could not be prepared, otherwise None
    """
    if sibling.exists():
        if files_identical(media_path, sibling):
            logger.debug(f"Reusing existing sibling copy: {sibling}")
            return None
        return f"Cannot rename to {sibling.name}: a different file already exists"

    try:
        copy_media(media_path, sibling)
    except OSError as e:
        logger.error(f"Failed to create {sibling}: {e}")
        return f"Failed to create {sibling.name}: {e}"
    logger.debug(f"Created sibling copy: {sibling}")
    return None


def remove_stale_copy(media_path: Path, destination_dir: Path) -> None:
    """Remove destination_dir's copy of media_path if it is still byte-identical."""
    stale = destination_dir / media_path.name
    if stale.exists() and files_identical(media_path, stale):
        try:
            stale.unlink()
            logger.debug(f"Removed fallback copy: {stale}")
        except OSError as e:
            logger.warning(f"Could not remove fallback copy {stale}: {e}")


class IncorrectExtensionRemediator(RemediatorBase):
    """Re-applies metadata under the extension the content actually has"""

    @staticmethod
    def get_kind() -> ErrorKind:
        return ErrorKind.INCORRECT_EXTENSION

    @staticmethod
    def remediate(
        classification: ErrorClassification,
        media_path: Path,
        destination_dir: Path,
        context: RemediationContext,
        sidecar_path: Optional[Path] = None,
    ) -> RemediationResult:
        current = classification.params.get("current", media_path.suffix.lstrip("."))
        expected = classification.params.get("expected")
        if not expected:
            return copy_through(
                media_path, destination_dir, "Cannot determine the expected extension"
            )

        detected = detect_extension(media_path)
        if detected and not extensions_equivalent(detected, expected):
            logger.warning(
                f"{media_path.name}: content sniffing suggests {detected}, "
                f"exiftool expects {expected}; following exiftool"
            )

        sibling = sibling_path(media_path, expected)
        if sibling.name.lower() == media_path.name.lower():
            sibling = media_path
        else:
            error = prepare_sibling(media_path, sibling)
            if error:
                return copy_through(media_path, destination_dir, error)

        assignments = context.build_assignments(sibling, sidecar_path)
        outcome = context.applier.apply(
            sibling, assignments, destination_dir, replace_existing=True
        )

        if not outcome.success:
            if sibling != media_path:
                remove_stale_copy(sibling, Path(destination_dir))
            return copy_through(
                media_path,
                destination_dir,
                "Failed to update metadata after extension change: "
                f"{outcome.diagnostic or 'unknown error'}",
            )

        if outcome.destination.name != media_path.name:
            remove_stale_copy(media_path, Path(destination_dir))

        return RemediationResult(
            True,
            f"Updated file extension from {current} to {expected}",
            outcome.destination,
        )


def get_remediator():
    """Return remediator class for registration"""
    return IncorrectExtensionRemediator
