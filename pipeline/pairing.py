#!/usr/bin/env python3
"""
Pair Resolver

Matches every media file in a directory with its JSON sidecar.

Matching runs in priority order:
    1. exact       IMG_0001.HEIC -> IMG_0001.HEIC.json
    2. magic path  IMG_0001(1).HEIC -> IMG_0001.HEIC(1).json
                   IMG_0001-edited.jpg -> IMG_0001.jpg.json
    3. live photo  IMG_0001.MOV (< 3s) -> IMG_0001.HEIC.json

A sidecar claimed by one media file is never handed to another, with one
exception: a live-photo companion clip may share the sidecar of its still
image when no unclaimed sidecar matches.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from pipeline.exiftool import ExifTool
from pipeline.orphans import OrphanTracker
from pipeline.utils import (
    LIVE_PHOTO_EXTENSIONS,
    get_media_type,
    is_sidecar,
    is_supported_media,
)

logger = logging.getLogger(__name__)

# Clips shorter than this are treated as live-photo companions
LIVE_PHOTO_MAX_DURATION = 3.0

# Duplicate markers "(1)" / " (2)", the "Copy" marker and the "edited"
# markers Google Photos appends in English and Traditional Chinese locales
COSMETIC_SUFFIX_PATTERN = re.compile(r"\s?\(\d{1,2}\)|-已編輯|-edited| Copy")


@dataclass(frozen=True)
class MediaFile:
    """One media file discovered in a directory scan"""

    path: Path
    live_photo: bool = field(default=False, compare=False)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        """Lower-cased extension without the dot, e.g. heic"""
        return self.path.suffix.lower().lstrip(".")

    @property
    def media_kind(self) -> Optional[str]:
        return get_media_type(self.path)


def strip_cosmetic_suffixes(name: str) -> str:
    """Remove duplicate, copy and edited markers from a filename.

    Example:
        >>> strip_cosmetic_suffixes("IMG_0001(1).HEIC")
        'IMG_0001.HEIC'
        >>> strip_cosmetic_suffixes("IMG_0001.HEIC(1).json")
        'IMG_0001.HEIC.json'
    """
    return COSMETIC_SUFFIX_PATTERN.sub("", name)


def media_magic_path(name: str, live_photo: bool = False) -> str:
    """Magic path of a media filename; live photos also lose their extension."""
    magic = strip_cosmetic_suffixes(name)
    if live_photo:
        magic = Path(magic).stem
    return magic


def sidecar_magic_path(name: str) -> str:
    """Magic path of a sidecar filename, without the trailing .json."""
    magic = strip_cosmetic_suffixes(name)
    if magic.lower().endswith(".json"):
        magic = magic[: -len(".json")]
    return magic


def magic_matches(media_magic: str, sidecar_name: str, live_photo: bool = False) -> bool:
    """Check whether a sidecar belongs to a media file by magic path.

    The sidecar's magic path must start with the media's, so 1.jpg never
    takes IMG_1.jpg.json. A live-photo magic path has no extension and must
    end at a dot or at the end of the name, so IMG_0001 does not match
    IMG_00010.jpg.json.

    Example:
        >>> magic_matches("IMG_0001.HEIC", "IMG_0001.HEIC(1).json")
        True
        >>> magic_matches("IMG_0001", "IMG_00010.jpg.json", live_photo=True)
        False
    """
    candidate = sidecar_magic_path(sidecar_name)
    if not candidate.startswith(media_magic):
        return False
    if not live_photo:
        return True
    rest = candidate[len(media_magic) :]
    return rest == "" or rest.startswith(".")


class PairResolver:
    """Resolves media/sidecar pairs one directory at a time"""

    def __init__(
        self,
        exiftool: ExifTool,
        tracker: Optional[OrphanTracker] = None,
        live_photo_max_duration: float = LIVE_PHOTO_MAX_DURATION,
    ):
        self.exiftool = exiftool
        self.tracker = tracker
        self.live_photo_max_duration = live_photo_max_duration

    def is_live_photo(self, path: Path) -> bool:
        """Check whether a clip is a live-photo companion.

        Only mov/mp4 files are probed. A failed probe means "not a live photo".
        """
        if path.suffix.lower() not in LIVE_PHOTO_EXTENSIONS:
            return False
        duration = self.exiftool.probe_duration(path)
        if duration is None:
            return False
        return duration < self.live_photo_max_duration

    def list_candidates(self, directory: Path):
        """Split the immediate files of a directory into media and sidecars.

        Both lists are sorted by filename, which fixes the tie-break order
        for magic-path matching.
        """
        files = sorted((p for p in directory.iterdir() if p.is_file()), key=lambda p: p.name)
        media = [p for p in files if is_supported_media(p)]
        sidecars = [p for p in files if is_sidecar(p)]
        return media, sidecars

    def resolve(self, directory) -> Dict[MediaFile, Optional[Path]]:
        """Pair every media file in directory with its sidecar.

        Args:
            directory: Directory to scan (not recursive)

        Returns:
            Ordered mapping of MediaFile to sidecar path, or None when no
            sidecar matched. Empty if the directory has no media files.
        """
        directory = Path(directory)
        media_paths, sidecar_paths = self.list_candidates(directory)
        if not media_paths:
            logger.debug(f"No media files in {directory}")
            return {}

        sidecars_by_name = {p.name: p for p in sidecar_paths}
        matches: Dict[Path, Optional[Path]] = {}
        live_flags: Dict[Path, bool] = {}
        claimed: Set[Path] = set()

        # Pass 1: exact names win before any fuzzy matching happens
        for media_path in media_paths:
            sidecar = sidecars_by_name.get(f"{media_path.name}.json")
            if sidecar is not None:
                matches[media_path] = sidecar
                claimed.add(sidecar)
                logger.debug(f"Exact match: {media_path.name} -> {sidecar.name}")

        # Pass 2: magic paths, stills before live-photo clips so a short clip
        # never takes a sidecar a still image needs
        unmatched = [p for p in media_paths if p not in matches]
        for media_path in unmatched:
            live_flags[media_path] = self.is_live_photo(media_path)

        ordered = [p for p in unmatched if not live_flags[p]] + [
            p for p in unmatched if live_flags[p]
        ]
        for media_path in ordered:
            matches[media_path] = self._match_magic(
                media_path, sidecar_paths, claimed, live_flags[media_path]
            )

        result: Dict[MediaFile, Optional[Path]] = {}
        for media_path in media_paths:
            media = MediaFile(media_path, live_photo=live_flags.get(media_path, False))
            result[media] = matches.get(media_path)

        self._report_orphans(directory, result, sidecar_paths, claimed)
        return result

    def _match_magic(
        self,
        media_path: Path,
        sidecar_paths: List[Path],
        claimed: Set[Path],
        live_photo: bool,
    ) -> Optional[Path]:
        magic = media_magic_path(media_path.name, live_photo=live_photo)

        for sidecar in sidecar_paths:
            if sidecar in claimed:
                continue
            if magic_matches(magic, sidecar.name, live_photo):
                claimed.add(sidecar)
                logger.debug(f"Magic match: {media_path.name} -> {sidecar.name}")
                return sidecar

        if live_photo:
            for sidecar in sidecar_paths:
                if sidecar in claimed and magic_matches(magic, sidecar.name, live_photo):
                    logger.debug(f"Live photo shares sidecar: {media_path.name} -> {sidecar.name}")
                    return sidecar

        return None

    def _report_orphans(
        self,
        directory: Path,
        result: Dict[MediaFile, Optional[Path]],
        sidecar_paths: List[Path],
        claimed: Set[Path],
    ) -> None:
        for media, sidecar in result.items():
            if sidecar is None:
                logger.warning(f"No sidecar found for media file: {media.path}")
                if self.tracker is not None:
                    self.tracker.record_media(media.path, directory)

        for sidecar in sidecar_paths:
            if sidecar not in claimed:
                logger.info(f"No media file found for sidecar: {sidecar}")
                if self.tracker is not None:
                    self.tracker.record_sidecar(sidecar, directory)
