"""
Pytest configuration and shared fixtures for albumfix tests.

This module provides:
- A scripted stand-in for exiftool so the pipeline runs without the binary
- Per-test temporary source and destination directories
- Orchestrator and remediation context fixtures wired to the fake tool
- Markers for tests that need the real exiftool
"""

import logging
import shutil
import sys
from pathlib import Path
from typing import Dict, List, Sequence

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pipeline.applier import MetadataApplier  # noqa: E402
from pipeline.config import AlbumFixConfig  # noqa: E402
from pipeline.exiftool import ExifTool, ToolResult  # noqa: E402
from pipeline.metadata_builder import MetadataBuilder  # noqa: E402
from pipeline.offset_times import OffsetTimeTable  # noqa: E402
from pipeline.orchestrator import Orchestrator  # noqa: E402
from remediators.base import RemediationContext  # noqa: E402


# ============================================================================
# Fake exiftool
# ============================================================================


class FakeExifTool(ExifTool):
    """ExifTool whose subprocess is replaced by a scripted in-memory tool.

    Writes copy the source to the -o destination and refuse to overwrite an
    existing one, like the real tool. Failures are scripted per source
    filename; a "[minor]" failure succeeds when "-m" is passed.

    Attributes:
        calls: Every argument list passed to run()
        writes: (source, destination, assignments) for each successful write
        failures: Source filename -> diagnostic to fail with
        durations: Media filename -> duration in seconds for -duration probes
        failing_probes: Media filenames whose probe exits non-zero
    """

    def __init__(self):
        super().__init__("fake-exiftool")
        self.calls: List[List[str]] = []
        self.writes: List[tuple] = []
        self.failures: Dict[str, str] = {}
        self.durations: Dict[str, float] = {}
        self.failing_probes = set()

    def run(self, args: Sequence[str]) -> ToolResult:
        args = [str(a) for a in args]
        self.calls.append(args)

        if args == ["-ver"]:
            return ToolResult(0, "12.76\n")

        if args[0] == "-duration":
            name = Path(args[1]).name
            if name in self.failing_probes:
                return ToolResult(1, "", f"Error: File format error - {args[1]}")
            if name in self.durations:
                return ToolResult(0, f"Duration                        : {self.durations[name]} s\n")
            return ToolResult(0, "")

        out_index = args.index("-o")
        destination = Path(args[out_index + 1])
        source = Path(args[-1])
        assignments = args[out_index + 2 : -1]

        failure = self.failures.get(source.name)
        if failure and not ("[minor]" in failure and "-m" in args):
            return ToolResult(1, "", f"{failure} - {source}")

        if destination.exists():
            return ToolResult(1, "", f"Error: '{destination}' already exists - {source}")

        shutil.copy2(source, destination)
        self.writes.append((source, destination, assignments))
        return ToolResult(0, "    1 image files created\n")

    def write_calls(self) -> List[List[str]]:
        return [call for call in self.calls if "-o" in call]


# ============================================================================
# Session-scoped fixtures
# ============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def exiftool_available() -> bool:
    """True when a real exiftool binary is on PATH."""
    return shutil.which("exiftool") is not None


# ============================================================================
# Function-scoped fixtures - created fresh for each test
# ============================================================================


@pytest.fixture
def temp_source_dir(tmp_path) -> Path:
    """Create a temporary album directory for a single test."""
    source_dir = tmp_path / "source"
    source_dir.mkdir()
    return source_dir


@pytest.fixture
def temp_output_dir(tmp_path) -> Path:
    """Create a temporary output directory for a single test."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def fake_exiftool() -> FakeExifTool:
    return FakeExifTool()


@pytest.fixture
def run_config() -> AlbumFixConfig:
    """Run configuration with progress bars disabled."""
    return AlbumFixConfig(show_progress=False)


@pytest.fixture
def builder() -> MetadataBuilder:
    """Builder with an empty offset table (every file at UTC)."""
    return MetadataBuilder(OffsetTimeTable())


@pytest.fixture
def remediation_context(fake_exiftool, builder) -> RemediationContext:
    return RemediationContext(MetadataApplier(fake_exiftool), builder)


@pytest.fixture
def orchestrator(run_config, fake_exiftool) -> Orchestrator:
    return Orchestrator(run_config, fake_exiftool)


@pytest.fixture
def root_logger():
    """Restore the root logger's handlers after setup_logging replaces them."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


# ============================================================================
# Test configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring the real exiftool binary"
    )
