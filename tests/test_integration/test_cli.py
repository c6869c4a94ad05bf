"""
CLI integration tests for albumfix.py.

Tests cover:
- Argument handling and exit codes (run as a subprocess)
- A full process / fix-errors / analyze cycle through main() with the
  scripted exiftool standing in for the real one
"""

import os
import subprocess
import sys

import pytest

import albumfix
from pipeline.ledger import Ledger
from tests.fixtures.generators import create_takeout_album

MISSING_EXIFTOOL = "/nonexistent/bin/exiftool"


def run_cli(project_root, *args, **env):
    """Run albumfix.py in a subprocess with extra environment variables."""
    return subprocess.run(
        [sys.executable, "albumfix.py", *args],
        cwd=project_root,
        capture_output=True,
        text=True,
        env={**os.environ, **env},
    )


class TestCLIBasic:
    """Basic CLI functionality tests."""

    def test_help_output(self, project_root):
        """Should list every subcommand."""
        result = run_cli(project_root, "--help")

        assert result.returncode == 0
        for command in ("process", "fix-errors", "analyze", "info"):
            assert command in result.stdout

    def test_version(self, project_root):
        result = run_cli(project_root, "--version")

        assert result.returncode == 0
        assert albumfix.__version__ in result.stdout

    def test_no_command_error(self, project_root):
        """Should error when no command is given."""
        result = run_cli(project_root)

        assert result.returncode != 0

    def test_process_needs_destination(self, project_root, tmp_path):
        result = run_cli(project_root, "process", str(tmp_path))

        assert result.returncode != 0

    def test_missing_exiftool(self, project_root, tmp_path):
        """Should fail before touching anything when exiftool is absent."""
        create_takeout_album(tmp_path, "Trip")

        result = run_cli(
            project_root,
            "process",
            str(tmp_path / "Trip"),
            str(tmp_path / "out"),
            EXIFTOOL_PATH=MISSING_EXIFTOOL,
        )

        assert result.returncode == 1
        assert "exiftool is not installed" in result.stdout
        assert not (tmp_path / "out").exists()

    def test_info_without_exiftool(self, project_root):
        result = run_cli(project_root, "info", EXIFTOOL_PATH=MISSING_EXIFTOOL)

        assert result.returncode == 1
        assert "exiftool: not found" in result.stdout
        assert "heic" in result.stdout

    def test_analyze_missing_directory(self, project_root, tmp_path):
        result = run_cli(project_root, "analyze", str(tmp_path / "missing"))

        assert result.returncode == 1
        assert "does not exist" in result.stdout

    def test_analyze_without_ledgers(self, project_root, tmp_path):
        result = run_cli(project_root, "analyze", str(tmp_path))

        assert result.returncode == 1
        assert "No ledgers" in result.stdout


@pytest.fixture
def cli_env(monkeypatch, tmp_path, fake_exiftool, root_logger):
    """Run main() in-process against the fake exiftool from a clean directory."""
    for name in ("EXIFTOOL_PATH", "ALBUMFIX_OFFSET_FILE", "ALBUMFIX_WORKERS", "ALBUMFIX_DEFAULT_OFFSET"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ALBUMFIX_PROGRESS", "false")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(albumfix, "check_exiftool", lambda executable: True)
    monkeypatch.setattr(albumfix, "ExifTool", lambda executable: fake_exiftool)
    return fake_exiftool


class TestCLIRun:
    """Full runs through main()."""

    def test_process_fix_and_analyze(self, cli_env, temp_source_dir, temp_output_dir, capsys):
        album = create_takeout_album(
            temp_source_dir, "Trip", media=["a.jpg", "b.jpg"], sidecars={"a.jpg.json": None}
        )
        destination = temp_output_dir / "Trip"

        assert albumfix.main(["process", str(album), str(destination), "--fix"]) == 0
        output = capsys.readouterr().out
        assert "Processing complete!" in output

        rows = Ledger(destination).read_all()
        assert [row.processed for row in rows] == [True, False]
        assert rows[1].remediated is True

        assert albumfix.main(["analyze", str(temp_output_dir)]) == 0
        output = capsys.readouterr().out
        assert "Total files: 2" in output
        assert "missing_metadata" in output

    def test_fix_errors(self, cli_env, temp_source_dir, temp_output_dir, capsys):
        album = create_takeout_album(temp_source_dir, "Trip", media=["a.jpg"], sidecars={})
        assert albumfix.main(["process", str(album), str(temp_output_dir / "Trip")]) == 0

        assert albumfix.main(["fix-errors", str(temp_output_dir / "Trip")]) == 0

        assert "Remediation complete!" in capsys.readouterr().out
        assert Ledger(temp_output_dir / "Trip").read_all()[0].remediated is True

    def test_missing_source(self, cli_env, tmp_path, capsys):
        assert albumfix.main(["process", str(tmp_path / "missing"), str(tmp_path / "out")]) == 1
        assert "Source directory does not exist" in capsys.readouterr().out

    def test_missing_destination(self, cli_env, tmp_path, capsys):
        assert albumfix.main(["fix-errors", str(tmp_path / "missing")]) == 1
        assert "Destination directory does not exist" in capsys.readouterr().out

    def test_missing_offset_file(self, cli_env, temp_source_dir, tmp_path):
        album = create_takeout_album(temp_source_dir, "Trip")

        result = albumfix.main(
            ["process", str(album), str(tmp_path / "out"), "--offset-file", str(tmp_path / "none.csv")]
        )

        assert result == 1

    def test_invalid_workers(self, cli_env, monkeypatch, tmp_path):
        monkeypatch.setenv("ALBUMFIX_WORKERS", "many")

        assert albumfix.main(["fix-errors", str(tmp_path)]) == 1

    def test_verbose_writes_log_file(self, cli_env, temp_source_dir, temp_output_dir, tmp_path):
        album = create_takeout_album(temp_source_dir, "Trip", media=["a.jpg"])

        assert albumfix.main(["process", str(album), str(temp_output_dir / "Trip"), "-v"]) == 0

        logs = list((tmp_path / "logs").glob("albumfix_process_*.log"))
        assert len(logs) == 1
