#!/usr/bin/env python3
"""
Ledger Analysis

Summarises every ledger under a directory: how many files were processed,
how many are still failing and which ErrorKind each failure falls under.
Rows a remediation pass already handled are counted under the kind recorded
in their "[remediated:<kind>]" prefix; everything else is classified afresh.
"""

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from pipeline.classifier import ErrorKind, classify
from pipeline.ledger import LEDGER_SUFFIX, Ledger, LedgerRow, find_ledgers

logger = logging.getLogger(__name__)

MAX_SAMPLES = 3

_REMEDIATED_KIND = re.compile(r"^\[remediated:(\w+)\]")


@dataclass
class KindStats:
    count: int = 0
    samples: List[str] = field(default_factory=list)


@dataclass
class LedgerAnalysis:
    """Totals across all ledgers found under one directory"""

    ledgers: List[Path] = field(default_factory=list)
    total: int = 0
    processed: int = 0
    failed: int = 0
    by_kind: Dict[ErrorKind, KindStats] = field(
        default_factory=lambda: OrderedDict((kind, KindStats()) for kind in ErrorKind)
    )

    def percent(self, count: int) -> float:
        return (count / self.failed * 100.0) if self.failed else 0.0


def kind_of(row: LedgerRow) -> ErrorKind:
    """ErrorKind a failed row belongs to."""
    match = _REMEDIATED_KIND.match(row.errors)
    if match:
        try:
            return ErrorKind(match.group(1))
        except ValueError:
            logger.debug(f"Unrecognised remediation marker in {row.media_file}")
    return classify(row.errors or None).kind


def analyze_ledgers(csv_dir) -> LedgerAnalysis:
    """Read every ledger under csv_dir and tally the outcomes.

    Args:
        csv_dir: Directory searched recursively for *_output.csv files

    Returns:
        LedgerAnalysis; ledgers is empty when none were found
    """
    analysis = LedgerAnalysis(ledgers=find_ledgers(csv_dir))

    for ledger_path in analysis.ledgers:
        # A ledger file is addressed through the directory it describes
        directory = ledger_path.with_name(ledger_path.name[: -len(LEDGER_SUFFIX)])
        rows = Ledger(directory).read_all()
        logger.debug(f"{ledger_path}: {len(rows)} row(s)")

        for row in rows:
            analysis.total += 1
            if row.processed:
                analysis.processed += 1
                continue
            analysis.failed += 1
            stats = analysis.by_kind[kind_of(row)]
            stats.count += 1
            if len(stats.samples) < MAX_SAMPLES:
                stats.samples.append(row.media_file)

    return analysis


def print_analysis(analysis: LedgerAnalysis, csv_dir) -> None:
    """Print the analysis in the same block layout as the processing summary."""
    print("\n" + "=" * 50)
    print(f"Ledger analysis: {Path(csv_dir).resolve()}")
    print(f"  Ledgers: {len(analysis.ledgers)}")
    print(f"  Total files: {analysis.total}")
    print(f"  Processed: {analysis.processed}")
    print(f"  Failed: {analysis.failed}")

    if not analysis.failed:
        return

    print("\nFailures by kind:")
    for kind, stats in analysis.by_kind.items():
        if not stats.count:
            continue
        print(f"  {kind.value:20s} {stats.count:6d} ({analysis.percent(stats.count):5.1f}%)")
        for sample in stats.samples:
            print(f"      e.g. {sample}")
