#!/usr/bin/env python3
"""
tqdm progress bars for the two albumfix passes.

Every bar is labelled "[<phase>] <action>" so a nested run that walks many
albums shows which pass and which album is being worked on. Bars are
transient: they disappear once a directory is finished and only the
summary stays on screen.
"""

from typing import Iterable, Optional, TypeVar

from tqdm import tqdm

# Bar labels for the two passes
PHASE_EXIF = "EXIF"
PHASE_FIX = "Fix"

T = TypeVar("T")


def progress_bar(
    iterable: Iterable[T],
    phase: str,
    action: str,
    total: Optional[int] = None,
    unit: str = "file",
    disable: bool = False,
) -> tqdm:
    """Wrap iterable in a labelled, transient bar.

    Args:
        iterable: Items or results to iterate
        phase: PHASE_EXIF or PHASE_FIX
        action: What is happening, e.g. "Writing metadata (Trip)"
        total: Item count when iterable has no len()
        unit: Unit shown next to the rate
        disable: Iterate without drawing anything

    Returns:
        tqdm instance yielding the same items as iterable
    """
    label = f"[{phase}] {action}"
    return tqdm(iterable, desc=label, total=total, unit=unit, leave=False, disable=disable)
