#!/usr/bin/env python3
"""
Processing helpers

Used by the orchestrator and the CLI:
- imap_ordered: map over a bounded thread pool, results in input order
- print_processing_summary: the closing summary block
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterator, Optional, Sequence, TypeVar

from pipeline.progress import PHASE_EXIF, progress_bar

T = TypeVar("T")
R = TypeVar("R")


def imap_ordered(
    fn: Callable[[T], R],
    items: Sequence[T],
    workers: int = 1,
    phase: str = PHASE_EXIF,
    description: str = "Processing",
    show_progress: bool = True,
) -> Iterator[R]:
    """
    Apply fn to every item and yield results in input order.

    With workers > 1 the calls run on a bounded thread pool. Results are
    always yielded to the caller's thread, in input order, as soon as each
    one (and every one before it) is done.

    Args:
        fn: Function applied to each item
        items: Items to process
        workers: Maximum concurrent calls (1 = sequential)
        phase: Progress bar phase identifier
        description: Description shown in progress bar
        show_progress: Display the progress bar

    Yields:
        One result per item, in the same order as items
    """
    if not items:
        return

    if workers <= 1 or len(items) == 1:
        for item in progress_bar(
            items, phase, description, total=len(items), disable=not show_progress
        ):
            yield fn(item)
        return

    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
        yield from progress_bar(
            executor.map(fn, items),
            phase,
            description,
            total=len(items),
            disable=not show_progress,
        )


def print_processing_summary(
    success: int,
    failed: int,
    total: int,
    output_dir: str,
    title: str = "Processing complete!",
    extra_stats: Optional[Dict[str, int]] = None,
) -> None:
    """
    Print the end-of-run block shown after process and fix-errors.

    extra_stats lines are printed between the failure count and the total,
    in insertion order, e.g. "Directories: 3" or "Still unresolved: 2".
    """
    print("\n" + "=" * 50)
    print(title)
    print(f"  Successfully processed: {success}")
    print(f"  Failed: {failed}")

    for label, count in (extra_stats or {}).items():
        print(f"  {label}: {count}")

    print(f"  Total: {total}")
    print(f"\nFinal files saved to: {os.path.abspath(output_dir)}")
