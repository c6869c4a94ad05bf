"""
Tests for sidecar parsing.
"""

import pytest

from pipeline.exceptions import SidecarError
from pipeline.sidecar import SidecarRecord, parse_sidecar, record_from_dict
from tests.fixtures.generators import sidecar_payload, write_sidecar


class TestRecordFromDict:
    """Tests for field extraction."""

    def test_full_payload(self):
        record = record_from_dict(
            sidecar_payload(title="IMG_0001.HEIC", description="Beach day", geo=(25.03, 121.56, 9.0))
        )

        assert record == SidecarRecord(
            title="IMG_0001.HEIC",
            description="Beach day",
            timestamp=1609459200,
            geo=(25.03, 121.56, 9.0),
        )

    def test_blank_text_is_absent(self):
        record = record_from_dict({"title": "", "description": "   "})

        assert record.title is None
        assert record.description is None
        assert record == SidecarRecord()

    def test_partial_geo_is_absent(self):
        """Latitude, longitude and altitude are all present or the triple is dropped."""
        record = record_from_dict({"geoDataExif": {"latitude": 1.0, "longitude": 2.0}})

        assert record.geo is None

    def test_non_numeric_geo_is_absent(self):
        record = record_from_dict(
            {"geoDataExif": {"latitude": "1.0", "longitude": 2.0, "altitude": 0.0}}
        )

        assert record.geo is None

    def test_zero_geo_is_clear_sentinel(self):
        record = record_from_dict({"geoDataExif": {"latitude": 0, "longitude": 0.0, "altitude": 0}})

        assert record.geo == (0, 0.0, 0)
        assert record.clears_gps is True

    def test_origin_like_but_nonzero_geo_is_kept(self):
        record = record_from_dict({"geoDataExif": {"latitude": 0.0, "longitude": 0.0, "altitude": 12.0}})

        assert record.clears_gps is False

    def test_unparsable_timestamp_is_absent(self):
        record = record_from_dict({"photoTakenTime": {"timestamp": "yesterday"}})

        assert record.timestamp is None

    def test_numeric_timestamp_is_accepted(self):
        record = record_from_dict({"photoTakenTime": {"timestamp": 1609459200}})

        assert record.timestamp == 1609459200

    @pytest.mark.parametrize("raw", ["99999999999999999", "-99999999999999999", 10**20])
    def test_out_of_range_timestamp_raises(self, raw):
        with pytest.raises(SidecarError):
            record_from_dict({"photoTakenTime": {"timestamp": raw}})


class TestParseSidecar:
    """Tests for reading sidecar files."""

    def test_reads_file(self, temp_source_dir):
        path = write_sidecar(temp_source_dir / "a.jpg.json", title="a", geo=None)

        record = parse_sidecar(path)

        assert record.title == "a"
        assert record.timestamp == 1609459200
        assert record.geo is None

    def test_non_ascii_text(self, temp_source_dir):
        path = write_sidecar(temp_source_dir / "a.jpg.json", description="台北 101 🌇")

        assert parse_sidecar(path).description == "台北 101 🌇"

    def test_malformed_json_raises(self, temp_source_dir):
        path = temp_source_dir / "a.jpg.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SidecarError):
            parse_sidecar(path)

    def test_non_object_raises(self, temp_source_dir):
        path = temp_source_dir / "a.jpg.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(SidecarError):
            parse_sidecar(path)

    def test_missing_file_raises(self, temp_source_dir):
        with pytest.raises(SidecarError):
            parse_sidecar(temp_source_dir / "missing.json")

    def test_out_of_range_timestamp_names_the_file(self, temp_source_dir):
        path = write_sidecar(temp_source_dir / "a.jpg.json", timestamp=99999999999999999)

        with pytest.raises(SidecarError, match="a.jpg.json"):
            parse_sidecar(path)
