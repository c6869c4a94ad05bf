#!/usr/bin/env python3
"""
Metadata Applier

Writes tag assignments into a copy of a media file under a destination
directory. Whatever the outcome, the destination ends up holding a file for
every input: an annotated copy on success, the untouched original otherwise.
An annotated file that is already in place is never overwritten by the
fallback copy.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from pipeline.exiftool import ExifTool, ToolResult
from pipeline.file_utils import (
    copy_media,
    replace_file,
    temporary_output_path,
)
from pipeline.utils import normalize_diagnostic

logger = logging.getLogger(__name__)


@dataclass
class MetadataOutcome:
    """Result of applying metadata to one media file"""

    success: bool
    destination: Path
    diagnostic: Optional[str] = None
    invoked_tool: bool = False


class MetadataApplier:
    """Applies assignments with exiftool, falling back to a plain copy"""

    def __init__(self, exiftool: ExifTool):
        self.exiftool = exiftool

    def apply(
        self,
        media_path: Path,
        assignments: Sequence[str],
        destination_dir: Path,
        extra_flags: Sequence[str] = (),
        replace_existing: bool = False,
        destination_name: Optional[str] = None,
    ) -> MetadataOutcome:
        """Write assignments from media_path into destination_dir.

        Args:
            media_path: Source media file (never modified)
            assignments: "-Tag=value" arguments; empty means plain copy
            destination_dir: Output directory, created if missing
            extra_flags: Additional exiftool flags (e.g. "-m")
            replace_existing: Replace a file already at the destination
                (used when upgrading a fallback copy to an annotated one)
            destination_name: Output filename, defaults to the source name

        Returns:
            MetadataOutcome describing what happened

        Raises:
            OSError: If destination_dir cannot be created
        """
        media_path = Path(media_path)
        destination_dir = Path(destination_dir)
        destination_dir.mkdir(parents=True, exist_ok=True)
        destination = destination_dir / (destination_name or media_path.name)

        if not assignments:
            return self._copy_only(media_path, destination, replace_existing)

        if replace_existing and destination.exists():
            result = self._write_replacing(media_path, destination, assignments, extra_flags)
        else:
            result = self.exiftool.write(media_path, destination, assignments, extra_flags)

        if result.success:
            logger.debug(f"Wrote metadata: {media_path} -> {destination}")
            return MetadataOutcome(True, destination, result.diagnostic, invoked_tool=True)

        diagnostic = result.diagnostic or f"exiftool exited with status {result.returncode}"
        logger.debug(f"exiftool failed for {media_path}: {diagnostic}")
        copy_error = self._fallback_copy(media_path, destination)
        if copy_error:
            diagnostic = normalize_diagnostic(diagnostic, copy_error)
        return MetadataOutcome(False, destination, diagnostic, invoked_tool=True)

    def pass_through(
        self, media_path: Path, destination_dir: Path, diagnostic: str
    ) -> MetadataOutcome:
        """Copy a file that has no usable metadata and record why.

        Raises:
            OSError: If destination_dir cannot be created
        """
        media_path = Path(media_path)
        destination_dir = Path(destination_dir)
        destination_dir.mkdir(parents=True, exist_ok=True)
        destination = destination_dir / media_path.name

        copy_error = self._fallback_copy(media_path, destination)
        return MetadataOutcome(
            False, destination, normalize_diagnostic(diagnostic, copy_error), invoked_tool=False
        )

    def _copy_only(self, media_path: Path, destination: Path, replace_existing: bool) -> MetadataOutcome:
        try:
            copy_media(media_path, destination, overwrite=replace_existing)
        except OSError as e:
            logger.error(f"Failed to copy {media_path} to {destination}: {e}")
            return MetadataOutcome(False, destination, f"Copy failed: {e}")
        return MetadataOutcome(True, destination)

    def _write_replacing(
        self,
        media_path: Path,
        destination: Path,
        assignments: Sequence[str],
        extra_flags: Sequence[str],
    ) -> ToolResult:
        temp_path = temporary_output_path(destination)
        if temp_path.exists():
            temp_path.unlink()

        result = self.exiftool.write(media_path, temp_path, assignments, extra_flags)
        if result.success:
            try:
                replace_file(temp_path, destination)
            except OSError as e:
                logger.error(f"Failed to replace {destination}: {e}")
                return ToolResult(1, result.stdout, f"Replace failed: {e}")
        elif temp_path.exists():
            temp_path.unlink()
        return result

    def _fallback_copy(self, media_path: Path, destination: Path) -> Optional[str]:
        """Copy the original unless something is already at the destination.

        Returns:
            Error text if the copy failed, otherwise None
        """
        try:
            copy_media(media_path, destination, overwrite=False)
        except OSError as e:
            logger.error(f"Fallback copy failed for {media_path}: {e}")
            return f"Copy failed: {e}"
        return None
