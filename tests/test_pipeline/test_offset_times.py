"""
Tests for the offset time table and its CSV loader.
"""

from datetime import timedelta

import pytest

from pipeline.offset_times import OffsetTimeTable, parse_offset
from tests.fixtures.generators import write_offset_csv


class TestParseOffset:
    """Tests for offset string parsing."""

    @pytest.mark.parametrize(
        "offset, delta",
        [
            ("+00:00", timedelta(0)),
            ("+08:00", timedelta(hours=8)),
            ("-05:30", timedelta(hours=-5, minutes=-30)),
        ],
    )
    def test_valid_offsets(self, offset, delta):
        assert parse_offset(offset).utcoffset(None) == delta

    @pytest.mark.parametrize("offset", ["8", "+8:00", "UTC", "", "+08:00:00"])
    def test_invalid_offsets(self, offset):
        with pytest.raises(ValueError):
            parse_offset(offset)

    def test_invalid_default_rejected(self):
        with pytest.raises(ValueError):
            OffsetTimeTable(default_offset="local")


class TestLookup:
    """Tests for path and name lookups."""

    def test_path_lookup(self, tmp_path):
        table = OffsetTimeTable({str(tmp_path / "a.jpg"): "+09:00"})

        assert table.lookup(tmp_path / "a.jpg") == "+09:00"
        assert table.lookup(tmp_path / "b.jpg") == "+00:00"

    def test_unique_name_fallback(self, tmp_path):
        """A file moved to another directory still finds its offset by name."""
        table = OffsetTimeTable({str(tmp_path / "src" / "a.jpg"): "+09:00"})

        assert table.lookup(tmp_path / "elsewhere" / "a.jpg") == "+09:00"

    def test_ambiguous_name_falls_back_to_default(self, tmp_path):
        table = OffsetTimeTable(
            {
                str(tmp_path / "one" / "a.jpg"): "+09:00",
                str(tmp_path / "two" / "a.jpg"): "-03:00",
            },
            default_offset="+01:00",
        )

        assert table.lookup(tmp_path / "one" / "a.jpg") == "+09:00"
        assert table.lookup(tmp_path / "three" / "a.jpg") == "+01:00"


class TestLoad:
    """Tests for reading exiftool offset CSVs."""

    def test_load_rows(self, tmp_path):
        csv_path = write_offset_csv(
            tmp_path / "offsets.csv",
            [
                ("album/a.jpg", "+08:00", "+08:00", "+08:00"),
                ("album/b.jpg", "-", "-05:00", "-"),
            ],
        )

        table = OffsetTimeTable.load(str(csv_path))

        assert len(table) == 2
        assert table.lookup(tmp_path / "album" / "a.jpg") == "+08:00"
        assert table.lookup(tmp_path / "album" / "b.jpg") == "-05:00"

    def test_all_dash_rows_are_skipped(self, tmp_path):
        csv_path = write_offset_csv(tmp_path / "offsets.csv", [("a.jpg", "-", "-", "-")])

        table = OffsetTimeTable.load(str(csv_path), default_offset="+02:00")

        assert len(table) == 0
        assert table.lookup(tmp_path / "a.jpg") == "+02:00"

    def test_conflicting_rows_are_skipped(self, tmp_path, caplog):
        csv_path = write_offset_csv(
            tmp_path / "offsets.csv", [("a.jpg", "+08:00", "+09:00", "-")]
        )

        table = OffsetTimeTable.load(str(csv_path))

        assert len(table) == 0
        assert "Conflicting offsets" in caplog.text

    def test_invalid_offsets_are_skipped(self, tmp_path):
        csv_path = write_offset_csv(tmp_path / "offsets.csv", [("a.jpg", "soon", "-", "-")])

        assert len(OffsetTimeTable.load(str(csv_path))) == 0

    def test_absolute_source_paths(self, tmp_path):
        media = tmp_path / "album" / "a.jpg"
        csv_path = write_offset_csv(tmp_path / "offsets.csv", [(str(media), "+05:45", "-", "-")])

        assert OffsetTimeTable.load(str(csv_path)).lookup(media) == "+05:45"

    def test_no_path_gives_empty_table(self):
        table = OffsetTimeTable.load(None, default_offset="+03:00")

        assert len(table) == 0
        assert table.default_offset == "+03:00"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            OffsetTimeTable.load(str(tmp_path / "missing.csv"))
