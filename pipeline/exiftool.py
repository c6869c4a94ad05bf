#!/usr/bin/env python3
"""
ExifTool session wrapper

One ExifTool instance is created per run and handed to every component that
talks to the tool. It owns the run's probe cache, so a media file is
duration-probed at most once no matter how many passes look at it.

All invocations go through run(), which never raises for a non-zero exit
status; callers inspect the returned ToolResult instead.
"""

import logging
import re
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pipeline.exceptions import AlbumFixError, ExifToolNotFoundError
from pipeline.utils import normalize_diagnostic

logger = logging.getLogger(__name__)

# Flags passed to every write so non-ASCII paths and tag values survive and
# files over 4GB are handled
COMMON_FLAGS: List[str] = [
    "-charset",
    "filename=UTF8",
    "-charset",
    "exif=UTF8",
    "-charset",
    "iptc=UTF8",
    "-api",
    "largefilesupport=1",
]

# "Duration : 2.53 s" (short clips) or "Duration : 0:01:05" (30s and longer)
_DURATION_SECONDS = re.compile(r"Duration\s*:\s*(\d+(?:\.\d+)?)\s*s\b")
_DURATION_CLOCK = re.compile(r"Duration\s*:\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")


@dataclass
class ToolResult:
    """Outcome of one exiftool invocation"""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> Optional[str]:
        """stdout and stderr folded into one line"""
        return normalize_diagnostic(self.stdout, self.stderr)


_MISSING = object()


class ProbeCache:
    """Thread-safe memo of duration probes, keyed by absolute path"""

    def __init__(self):
        self._durations: Dict[str, Optional[float]] = {}
        self._lock = threading.Lock()

    def get(self, path: Path):
        with self._lock:
            return self._durations.get(str(path), _MISSING)

    def put(self, path: Path, duration: Optional[float]) -> None:
        with self._lock:
            self._durations[str(path)] = duration

    def __len__(self) -> int:
        with self._lock:
            return len(self._durations)


def parse_duration(output: str) -> Optional[float]:
    """Parse the duration in seconds from `exiftool -duration` output.

    Args:
        output: stdout of the probe

    Returns:
        Duration in seconds, or None if no duration line was found

    Example:
        >>> parse_duration("Duration                        : 2.53 s")
        2.53
        >>> parse_duration("Duration                        : 0:01:05")
        65.0
    """
    match = _DURATION_SECONDS.search(output)
    if match:
        return float(match.group(1))

    match = _DURATION_CLOCK.search(output)
    if match:
        hours, minutes, seconds = match.groups()
        return int(hours) * 3600 + int(minutes) * 60 + float(seconds)

    return None


class ExifTool:
    """Runs exiftool as a subprocess and caches probe results for one run"""

    def __init__(self, executable: str = "exiftool", cache: Optional[ProbeCache] = None):
        self.executable = executable
        self.cache = cache if cache is not None else ProbeCache()

    def run(self, args: Sequence[str]) -> ToolResult:
        """Invoke exiftool with the given arguments and wait for it to exit.

        Args:
            args: Arguments after the executable name

        Returns:
            ToolResult with exit status and captured output

        Raises:
            ExifToolNotFoundError: If the executable cannot be launched
        """
        cmd = [self.executable, *[str(a) for a in args]]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            raise ExifToolNotFoundError(f"Cannot run {self.executable}: {e}") from e

        return ToolResult(completed.returncode, completed.stdout or "", completed.stderr or "")

    def write(
        self,
        source: Path,
        destination: Path,
        assignments: Sequence[str],
        extra_flags: Sequence[str] = (),
    ) -> ToolResult:
        """Write tag assignments from source into a new file at destination.

        The source file is never modified. exiftool refuses to overwrite an
        existing destination and reports "'<path>' already exists".

        Args:
            source: Media file to read
            destination: Output file path (must not exist)
            assignments: "-Tag=value" arguments
            extra_flags: Additional flags such as "-m"

        Returns:
            ToolResult of the write
        """
        args = [
            *COMMON_FLAGS,
            *extra_flags,
            "-o",
            str(destination),
            *assignments,
            str(source),
        ]
        return self.run(args)

    def probe_duration(self, path: Path) -> Optional[float]:
        """Return the media duration in seconds, or None if it cannot be read.

        Probe failures of any kind (missing tool, non-zero exit, no duration
        line) are logged and reported as None. Results are cached per run.
        """
        cached = self.cache.get(path)
        if cached is not _MISSING:
            return cached

        duration = None
        try:
            result = self.run(["-duration", str(path)])
        except AlbumFixError as e:
            logger.warning(f"Duration probe failed for {path}: {e}")
        else:
            if result.success:
                duration = parse_duration(result.stdout)
                if duration is None:
                    logger.debug(f"No duration reported for {path}")
            else:
                logger.warning(
                    f"Duration probe failed for {path}: {result.diagnostic or result.returncode}"
                )

        self.cache.put(path, duration)
        return duration

    def version(self) -> Optional[str]:
        """Return the exiftool version string, or None if it cannot run"""
        try:
            result = self.run(["-ver"])
        except ExifToolNotFoundError:
            return None
        return result.stdout.strip() if result.success else None
