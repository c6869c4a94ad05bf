#!/usr/bin/env python3
"""
albumfix - Photo Takeout Metadata Repair

Pairs every media file in an exported album with its JSON sidecar, writes
the capture time, GPS position, title and description into a copy of the
file, and records the outcome of each file in a per-directory CSV ledger.
A second pass reads the ledgers back and remediates the failures exiftool
reported.

Usage:
    albumfix.py process <source> <dest> [--nested] [--verbose] [--workers N]
                        [--offset-file CSV] [--fix]
    albumfix.py fix-errors <dest> [--nested] [--verbose]
    albumfix.py analyze <csv-dir>
    albumfix.py info
"""

import argparse
import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from pipeline import __version__
from pipeline.analysis import analyze_ledgers, print_analysis
from pipeline.config import AlbumFixConfig
from pipeline.dependency_checker import (
    check_exiftool,
    get_exiftool_version,
    locate_exiftool,
    print_exiftool_error,
)
from pipeline.env_loader import load_dotenv_file
from pipeline.exceptions import AlbumFixError
from pipeline.exiftool import ExifTool
from pipeline.logging_config import default_log_file, setup_logging
from pipeline.orchestrator import Orchestrator, RunSummary
from pipeline.processing import print_processing_summary
from pipeline.utils import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per pass"""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (also writes logs/albumfix_<command>_<time>.log)",
    )
    common.add_argument(
        "--env-file",
        default=None,
        help="Path to .env file to load (default: ./.env if present)",
    )

    parser = argparse.ArgumentParser(
        prog="albumfix",
        description="Write Google Photos takeout sidecar metadata into the media files it describes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Annotate one album
  %(prog)s process "Takeout/Google Photos/Trip" /path/to/output

  # Annotate every album under the takeout root, then fix what failed
  %(prog)s process "Takeout/Google Photos" /path/to/output --nested --fix

  # Re-run the remediation pass on a previous output
  %(prog)s fix-errors /path/to/output --nested

  # Summarise the failures recorded in the ledgers
  %(prog)s analyze /path/to
        """,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    process = subparsers.add_parser(
        "process",
        parents=[common],
        help="Apply sidecar metadata and write annotated copies",
    )
    process.add_argument("source", help="Exported album directory")
    process.add_argument("dest", help="Output directory")
    process.add_argument(
        "--nested",
        action="store_true",
        help="Also process every subdirectory of source",
    )
    process.add_argument(
        "--workers",
        "-w",
        type=int,
        help="Number of parallel exiftool calls (default: 1, or ALBUMFIX_WORKERS)",
    )
    process.add_argument(
        "--offset-file",
        metavar="CSV",
        help="exiftool -csv output with OffsetTime columns (overrides ALBUMFIX_OFFSET_FILE)",
    )
    process.add_argument(
        "--fix",
        action="store_true",
        help="Run the remediation pass on each directory after processing it",
    )

    fix_errors = subparsers.add_parser(
        "fix-errors",
        parents=[common],
        help="Remediate files a previous process run could not annotate",
    )
    fix_errors.add_argument("dest", help="Output directory of a previous process run")
    fix_errors.add_argument(
        "--nested",
        action="store_true",
        help="Also fix every subdirectory of dest",
    )

    analyze = subparsers.add_parser(
        "analyze",
        parents=[common],
        help="Summarise the failures recorded in the ledgers",
    )
    analyze.add_argument("csv_dir", help="Directory searched for *_output.csv ledgers")

    subparsers.add_parser(
        "info",
        parents=[common],
        help="Show version, exiftool status and supported file types",
    )
    return parser


def show_info(config: AlbumFixConfig) -> int:
    """Print version and dependency status

    Returns:
        0 if exiftool is usable, 1 otherwise
    """
    version = get_exiftool_version(config.exiftool_path)
    location = locate_exiftool(config.exiftool_path) or config.exiftool_path

    print(f"albumfix {__version__}")
    print()
    if version:
        print(f"  exiftool: {version} ({location})")
    else:
        print(f"  exiftool: not found ({config.exiftool_path})")
    print(f"  Default UTC offset: {config.default_offset}")
    print(f"  Offset file: {config.offset_file or '(none)'}")
    print(f"  Workers: {config.workers}")
    print()
    print(f"  Images: {', '.join(sorted(IMAGE_EXTENSIONS))}")
    print(f"  Videos: {', '.join(sorted(VIDEO_EXTENSIONS))}")

    if not version:
        print()
        print_exiftool_error()
        return 1
    return 0


def print_run_summary(summary: RunSummary, output_dir: str, title: str) -> None:
    extra_stats = {"Directories": len(summary.directories)}
    if summary.remediated or summary.unresolved:
        extra_stats["Fixed by remediation"] = summary.remediated
        extra_stats["Still unresolved"] = summary.unresolved
    if summary.orphaned_media or summary.orphaned_sidecars:
        extra_stats["Media without sidecar"] = summary.orphaned_media
        extra_stats["Sidecars without media"] = summary.orphaned_sidecars
    if summary.directory_errors:
        extra_stats["Directories skipped"] = len(summary.directory_errors)

    print_processing_summary(
        success=summary.processed,
        failed=summary.failed,
        total=summary.total,
        output_dir=output_dir,
        title=title,
        extra_stats=extra_stats,
    )
    for error in summary.directory_errors:
        print(f"  ERROR: {error}")


def main(argv=None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load .env early (CLI > env > .env precedence is enforced by AlbumFixConfig)
    load_dotenv_file(args.env_file)

    log_file = default_log_file(args.command) if args.verbose else None
    setup_logging(verbose=args.verbose, log_file=log_file)

    if args.command == "analyze":
        csv_dir = Path(args.csv_dir)
        if not csv_dir.is_dir():
            print(f"ERROR: Directory does not exist: {csv_dir.resolve()}")
            return 1
        analysis = analyze_ledgers(csv_dir)
        if not analysis.ledgers:
            print(f"ERROR: No ledgers (*_output.csv) found under: {csv_dir.resolve()}")
            return 1
        print_analysis(analysis, csv_dir)
        return 0

    try:
        config = AlbumFixConfig.from_env(
            workers=getattr(args, "workers", None),
            offset_file=getattr(args, "offset_file", None),
            verbose=args.verbose,
        )
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}")
        return 1

    if args.command == "info":
        return show_info(config)

    if not check_exiftool(config.exiftool_path):
        print_exiftool_error()
        return 1

    try:
        orchestrator = Orchestrator(config, ExifTool(config.exiftool_path))
    except (OSError, ValueError) as e:
        print(f"ERROR: Could not load offsets: {e}")
        return 1

    try:
        if args.command == "process":
            source = Path(args.source).resolve()
            if not source.is_dir():
                print(f"ERROR: Source directory does not exist: {source}")
                return 1
            print(f"Processing: {source}")
            summary = orchestrator.process(source, args.dest, nested=args.nested, fix=args.fix)
            print_run_summary(summary, args.dest, "Processing complete!")
        else:
            dest = Path(args.dest).resolve()
            if not dest.is_dir():
                print(f"ERROR: Destination directory does not exist: {dest}")
                return 1
            print(f"Fixing errors in: {dest}")
            summary = orchestrator.fix_errors(dest, nested=args.nested)
            print_run_summary(summary, args.dest, "Remediation complete!")
    except AlbumFixError as e:
        print(f"ERROR: {e}")
        return 1

    if log_file:
        print(f"Log written to: {log_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
