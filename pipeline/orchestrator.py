#!/usr/bin/env python3
"""
Orchestrator

Drives the two passes over an export, one directory at a time:

    process     pair -> build -> apply -> ledger
    fix-errors  ledger -> classify -> remediate -> ledger rewrite

Per-file failures become ledger rows. A directory that cannot be read or
created is logged, counted and skipped; the remaining directories still run.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Collection, List, Optional, Tuple

from pipeline.applier import MetadataApplier, MetadataOutcome
from pipeline.classifier import classify
from pipeline.config import AlbumFixConfig
from pipeline.exceptions import DirectoryError, SidecarError
from pipeline.exiftool import ExifTool
from pipeline.ledger import Ledger, LedgerRow, mark_remediated
from pipeline.metadata_builder import MetadataBuilder
from pipeline.offset_times import OffsetTimeTable
from pipeline.orphans import ISSUES_DIR, OrphanTracker
from pipeline.pairing import MediaFile, PairResolver
from pipeline.processing import imap_ordered
from pipeline.progress import PHASE_EXIF, PHASE_FIX, progress_bar
from pipeline.sidecar import parse_sidecar
from remediators.base import RemediationContext
from remediators.registry import RemediationDispatcher, create_default_registry

logger = logging.getLogger(__name__)

NO_SIDECAR_DIAGNOSTIC = "No JSON file found"


@dataclass
class DirectoryStats:
    """Counts for one directory in one pass"""

    destination: Path
    source: Optional[Path] = None
    total: int = 0
    processed: int = 0
    failed: int = 0
    remediated: int = 0
    unresolved: int = 0


@dataclass
class RunSummary:
    """Aggregated results of a process or fix-errors run"""

    directories: List[DirectoryStats] = field(default_factory=list)
    directory_errors: List[str] = field(default_factory=list)
    orphaned_media: int = 0
    orphaned_sidecars: int = 0

    @property
    def total(self) -> int:
        return sum(d.total for d in self.directories)

    @property
    def processed(self) -> int:
        return sum(d.processed for d in self.directories)

    @property
    def failed(self) -> int:
        return sum(d.failed for d in self.directories)

    @property
    def remediated(self) -> int:
        return sum(d.remediated for d in self.directories)

    @property
    def unresolved(self) -> int:
        return sum(d.unresolved for d in self.directories)


def list_directories(
    root: Path,
    nested: bool,
    exclude: Collection[Path] = (),
    skip_names: Collection[str] = (),
) -> List[Path]:
    """Directories a pass should visit: root, plus every subdirectory if nested.

    Hidden directories, directories named in skip_names and anything under an
    excluded path are pruned. Order is top-down with siblings sorted by name.
    """
    excluded = {os.path.abspath(str(p)) for p in exclude}
    directories = [root]
    if not nested:
        return directories

    for current, subdirs, _files in os.walk(root):
        kept = []
        for name in sorted(subdirs):
            path = Path(current) / name
            if name.startswith(".") or name in skip_names:
                continue
            if os.path.abspath(str(path)) in excluded:
                continue
            kept.append(name)
            directories.append(path)
        subdirs[:] = kept
    return directories


class Orchestrator:
    """Runs the processing and remediation passes for one CLI invocation"""

    def __init__(self, config: AlbumFixConfig, exiftool: ExifTool):
        self.config = config
        self.exiftool = exiftool

        offset_table = OffsetTimeTable.load(config.offset_file, config.default_offset)
        self.builder = MetadataBuilder(offset_table)
        self.applier = MetadataApplier(exiftool)
        self.dispatcher = RemediationDispatcher(
            create_default_registry(), RemediationContext(self.applier, self.builder)
        )

    # ------------------------------------------------------------------
    # Processing pass
    # ------------------------------------------------------------------

    def process(self, source, destination, nested: bool = False, fix: bool = False) -> RunSummary:
        """Annotate every media file under source into destination.

        Args:
            source: Export directory to read
            destination: Directory that mirrors source with annotated files
            nested: Also process every subdirectory of source
            fix: Run the remediation pass on each directory right after it
                is processed

        Returns:
            RunSummary for the run

        Raises:
            DirectoryError: If source is not a directory
        """
        source = Path(os.path.abspath(str(source)))
        destination = Path(os.path.abspath(str(destination)))
        if not source.is_dir():
            raise DirectoryError(source, "source directory does not exist")

        tracker = OrphanTracker(source)
        resolver = PairResolver(self.exiftool, tracker)
        summary = RunSummary()

        directories = list_directories(source, nested, exclude=[destination])
        logger.info(f"Processing {len(directories)} director(ies) under {source}")

        for source_dir in directories:
            destination_dir = destination / source_dir.relative_to(source)
            try:
                stats = self.process_directory(source_dir, destination_dir, resolver)
                if fix and stats.total:
                    fixed = self.fix_directory(destination_dir)
                    stats.remediated = fixed.remediated
                    stats.unresolved = fixed.unresolved
            except DirectoryError as e:
                logger.error(f"Skipping directory: {e}")
                summary.directory_errors.append(str(e))
                continue
            except OSError as e:
                logger.error(f"Skipping directory {source_dir}: {e}")
                summary.directory_errors.append(f"{source_dir}: {e}")
                continue
            if stats.total:
                summary.directories.append(stats)

        orphans = tracker.counts()
        summary.orphaned_media = orphans["orphaned_media"]
        summary.orphaned_sidecars = orphans["orphaned_sidecars"]
        if destination.is_dir():
            tracker.save(destination)
        return summary

    def process_directory(
        self, source_dir: Path, destination_dir: Path, resolver: PairResolver
    ) -> DirectoryStats:
        """Process the media files directly inside source_dir.

        A directory without media files is skipped and gets no ledger.

        Raises:
            DirectoryError: If source_dir cannot be read or destination_dir
                cannot be created
        """
        stats = DirectoryStats(destination=destination_dir, source=source_dir)
        if not source_dir.is_dir():
            raise DirectoryError(source_dir, "source directory does not exist")

        try:
            pairs = resolver.resolve(source_dir)
        except OSError as e:
            raise DirectoryError(source_dir, f"cannot read directory: {e}") from e

        if not pairs:
            logger.debug(f"No media in {source_dir}, skipping")
            return stats

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(destination_dir, f"cannot create directory: {e}") from e

        ledger = Ledger(destination_dir)
        ledger.reset()
        logger.info(f"{source_dir}: {len(pairs)} media file(s) -> {destination_dir}")

        def _run(item: Tuple[MediaFile, Optional[Path]]) -> LedgerRow:
            media, sidecar = item
            return self.process_pair(media, sidecar, destination_dir)

        rows = imap_ordered(
            _run,
            list(pairs.items()),
            workers=self.config.workers,
            phase=PHASE_EXIF,
            description=f"Writing metadata ({source_dir.name})",
            show_progress=self.config.show_progress,
        )
        for row in rows:
            ledger.append(row)
            stats.total += 1
            if row.processed:
                stats.processed += 1
            else:
                stats.failed += 1

        logger.info(
            f"{source_dir.name}: {stats.processed} processed, {stats.failed} failed"
        )
        return stats

    def process_pair(
        self, media: MediaFile, sidecar: Optional[Path], destination_dir: Path
    ) -> LedgerRow:
        """Apply one media file's sidecar and describe the outcome as a ledger row."""
        outcome = self.apply_metadata(media, sidecar, destination_dir)
        return LedgerRow(
            media_file=str(media.path),
            json_file=str(sidecar) if sidecar else "",
            destination_file=str(outcome.destination),
            processed=outcome.success,
            errors=outcome.diagnostic or "",
        )

    def apply_metadata(
        self, media: MediaFile, sidecar: Optional[Path], destination_dir: Path
    ) -> MetadataOutcome:
        if sidecar is None:
            return self.applier.pass_through(media.path, destination_dir, NO_SIDECAR_DIAGNOSTIC)

        try:
            record = parse_sidecar(sidecar)
            assignments = self.builder.build(record, media.path)
        except SidecarError as e:
            logger.warning(str(e))
            return self.applier.pass_through(
                media.path, destination_dir, f"No metadata found in {sidecar.name}"
            )

        return self.applier.apply(media.path, assignments, destination_dir)

    # ------------------------------------------------------------------
    # Remediation pass
    # ------------------------------------------------------------------

    def fix_errors(self, destination, nested: bool = False) -> RunSummary:
        """Remediate unprocessed ledger rows under destination.

        Raises:
            DirectoryError: If destination is not a directory
        """
        destination = Path(os.path.abspath(str(destination)))
        if not destination.is_dir():
            raise DirectoryError(destination, "destination directory does not exist")

        summary = RunSummary()
        for directory in list_directories(destination, nested, skip_names=[ISSUES_DIR]):
            try:
                stats = self.fix_directory(directory)
            except OSError as e:
                logger.error(f"Skipping directory {directory}: {e}")
                summary.directory_errors.append(f"{directory}: {e}")
                continue
            if stats.total:
                summary.directories.append(stats)
        return summary

    def fix_directory(self, destination_dir: Path) -> DirectoryStats:
        """Run remediators for every unresolved row of one directory's ledger.

        Rows that are processed, or that a previous pass already remediated,
        are left untouched, so running this twice changes nothing the
        second time. The ledger is only rewritten when a row changed.
        """
        ledger = Ledger(destination_dir)
        rows = ledger.read_all()
        stats = DirectoryStats(destination=destination_dir, total=len(rows))
        stats.processed = sum(1 for row in rows if row.processed)
        stats.failed = stats.total - stats.processed

        pending = [i for i, row in enumerate(rows) if not row.processed and not row.remediated]
        if not pending:
            return stats

        logger.info(f"{destination_dir}: remediating {len(pending)} file(s)")
        for index in progress_bar(
            pending,
            PHASE_FIX,
            f"Fixing errors ({destination_dir.name})",
            disable=not self.config.show_progress,
        ):
            row = rows[index]
            classification = classify(row.errors or None)
            sidecar = Path(row.json_file) if row.json_file else None
            result = self.dispatcher.remediate(
                classification, Path(row.media_file), destination_dir, sidecar
            )
            rows[index] = mark_remediated(
                row, classification.kind.value, result.processed, result.message, result.destination
            )
            if result.processed:
                stats.remediated += 1
            else:
                stats.unresolved += 1

        ledger.rewrite(rows)
        stats.processed += stats.remediated
        stats.failed -= stats.remediated
        return stats
