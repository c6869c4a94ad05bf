"""
Tests for ledger analysis.
"""

from pipeline.analysis import MAX_SAMPLES, analyze_ledgers, kind_of, print_analysis
from pipeline.classifier import ErrorKind
from pipeline.ledger import Ledger, LedgerRow, mark_remediated


def _write(directory, rows):
    ledger = Ledger(directory)
    for row in rows:
        ledger.append(row)
    return ledger


class TestKindOf:
    def test_classifies_raw_diagnostic(self):
        row = LedgerRow("a.mp4", errors="Error: Truncated mdat atom - a.mp4")

        assert kind_of(row) is ErrorKind.TRUNCATED_MEDIA

    def test_uses_remediation_marker(self):
        row = mark_remediated(
            LedgerRow("a.jpg", errors="Error: Something new"),
            "maker_notes",
            False,
            "Failed to fix maker notes",
        )

        assert kind_of(row) is ErrorKind.MAKER_NOTES

    def test_unrecognised_marker_falls_back(self):
        row = LedgerRow("a.jpg", errors="[remediated:gone] No JSON file found")

        assert kind_of(row) is ErrorKind.MISSING_METADATA


class TestAnalyzeLedgers:
    """Tests for tallying ledgers under a directory."""

    def test_counts_by_kind(self, tmp_path):
        _write(
            tmp_path / "Trip",
            [
                LedgerRow("/s/a.jpg", processed=True),
                LedgerRow("/s/b.heic", errors="Error: Not a valid HEIC (looks more like a JPEG)"),
                LedgerRow("/s/c.jpg", errors="No JSON file found"),
            ],
        )
        _write(
            tmp_path / "Trip" / "Day 2",
            [
                LedgerRow("/s/d.jpg", errors="No JSON file found"),
                LedgerRow("/s/e.jpg", errors="Error: Weird"),
            ],
        )

        analysis = analyze_ledgers(tmp_path)

        assert len(analysis.ledgers) == 2
        assert analysis.total == 5
        assert analysis.processed == 1
        assert analysis.failed == 4
        assert analysis.by_kind[ErrorKind.MISSING_METADATA].count == 2
        assert analysis.by_kind[ErrorKind.INCORRECT_EXTENSION].count == 1
        assert analysis.by_kind[ErrorKind.UNKNOWN].count == 1
        assert analysis.by_kind[ErrorKind.MAKER_NOTES].count == 0
        assert analysis.percent(2) == 50.0

    def test_samples_are_capped(self, tmp_path):
        rows = [LedgerRow(f"/s/{i}.jpg", errors="No JSON file found") for i in range(MAX_SAMPLES + 2)]
        _write(tmp_path / "Trip", rows)

        stats = analyze_ledgers(tmp_path).by_kind[ErrorKind.MISSING_METADATA]

        assert stats.count == MAX_SAMPLES + 2
        assert stats.samples == [row.media_file for row in rows[:MAX_SAMPLES]]

    def test_no_ledgers(self, tmp_path):
        analysis = analyze_ledgers(tmp_path)

        assert analysis.ledgers == []
        assert analysis.total == 0
        assert analysis.percent(1) == 0.0

    def test_after_process_and_fix(self, orchestrator, temp_source_dir, temp_output_dir, fake_exiftool):
        album = temp_source_dir / "Trip"
        album.mkdir()
        for name in ("a.jpg", "b.mp4"):
            (album / name).write_bytes(b"")
        fake_exiftool.failures["b.mp4"] = "Error: Truncated mdat atom"
        (album / "b.mp4.json").write_text('{"title": "b"}', encoding="utf-8")

        orchestrator.process(album, temp_output_dir / "Trip", fix=True)
        analysis = analyze_ledgers(temp_output_dir)

        assert analysis.total == 2
        assert analysis.by_kind[ErrorKind.MISSING_METADATA].count == 1
        assert analysis.by_kind[ErrorKind.TRUNCATED_MEDIA].count == 1


class TestPrintAnalysis:
    def test_lists_only_present_kinds(self, tmp_path, capsys):
        _write(tmp_path / "Trip", [LedgerRow("/s/c.jpg", errors="No JSON file found")])

        print_analysis(analyze_ledgers(tmp_path), tmp_path)
        output = capsys.readouterr().out

        assert "Ledgers: 1" in output
        assert "missing_metadata" in output
        assert "100.0%" in output
        assert "truncated_media" not in output
        assert "e.g. /s/c.jpg" in output

    def test_clean_run_has_no_breakdown(self, tmp_path, capsys):
        _write(tmp_path / "Trip", [LedgerRow("/s/a.jpg", processed=True)])

        print_analysis(analyze_ledgers(tmp_path), tmp_path)

        assert "Failures by kind" not in capsys.readouterr().out
