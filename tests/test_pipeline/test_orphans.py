"""
Tests for the orphan report.
"""

import json

from pipeline.orphans import ISSUES_DIR, REPORT_NAME, OrphanTracker
from tests.fixtures.media_samples import MINIMAL_JPEG, write_media_file


class TestOrphanTracker:
    def test_nothing_to_report(self, tmp_path):
        tracker = OrphanTracker(tmp_path)

        assert tracker.save(tmp_path) is None
        assert not (tmp_path / ISSUES_DIR).exists()

    def test_report_contents(self, tmp_path):
        media = write_media_file(tmp_path / "a.jpg")
        tracker = OrphanTracker(tmp_path)
        tracker.record_media(media, tmp_path)
        tracker.record_sidecar(tmp_path / "b.jpg.json", tmp_path)

        report_path = tracker.save(tmp_path / "out")

        assert report_path == tmp_path / "out" / ISSUES_DIR / REPORT_NAME
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["source_directory"] == str(tmp_path)
        assert report["summary"]["total_orphans"] == 2
        assert report["orphaned_media"][0]["file_size"] == len(MINIMAL_JPEG)
        assert report["orphaned_sidecars"][0]["reason"] == "No media file matched"

    def test_missing_media_has_no_size(self, tmp_path):
        tracker = OrphanTracker(tmp_path)

        tracker.record_media(tmp_path / "gone.jpg", tmp_path)

        assert "file_size" not in tracker.media[0]
        assert tracker.has_orphans() is True
