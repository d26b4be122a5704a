"""Tests for CLI module."""

import io
import re
import zipfile
from datetime import datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from logcourier import __version__
from logcourier.artifacts.lifecycle import make_name
from logcourier.cli import app

runner = CliRunner()

FIXED = datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def env(temp_dir: Path) -> dict[str, str]:
    """Environment pointing the CLI at the temporary directory."""
    return {"LC_APP_ID": "testapp", "LC_CACHE_DIR": str(temp_dir / "cache")}


@pytest.fixture
def log_dir(temp_dir: Path) -> Path:
    return temp_dir / "cache" / "log"


@pytest.fixture
def source_log(temp_dir: Path) -> Path:
    path = temp_dir / "app.log"
    path.write_text("line\n" * 100)
    return path


class TestVersionCommand:
    """Tests for the version command."""

    def test_version(self) -> None:
        """Show version information."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Log Courier" in result.stdout
        assert __version__ in result.stdout


class TestNameCommand:
    """Tests for the name command."""

    def test_name(self) -> None:
        result = runner.invoke(app, ["name", "myapp_log_"])
        assert result.exit_code == 0
        assert re.fullmatch(r"myapp_log_\d{8}_\d{6}\.log", result.stdout.strip())

    def test_name_with_extension(self) -> None:
        result = runner.invoke(app, ["name", "myapp", "--ext", "zip"])
        assert result.exit_code == 0
        assert re.fullmatch(r"myapp_\d{8}_\d{6}\.zip", result.stdout.strip())


class TestCaptureCommand:
    """Tests for the capture command."""

    def test_capture_from_file(self, env, log_dir: Path, source_log: Path) -> None:
        """Capture copies the log into the cache directory."""
        result = runner.invoke(app, ["capture", "--file", str(source_log)], env=env)

        assert result.exit_code == 0
        assert "Saved:" in result.stdout
        captured = list(log_dir.glob("testapp_log_*.log"))
        assert len(captured) == 1
        assert captured[0].read_text() == source_log.read_text()

    def test_capture_zip(self, env, log_dir: Path, source_log: Path) -> None:
        result = runner.invoke(app, ["capture", "--zip", "--file", str(source_log)], env=env)

        assert result.exit_code == 0
        assert len(list(log_dir.glob("testapp_log_*.zip"))) == 1
        assert list(log_dir.glob("testapp_log_*.log")) == []

    def test_capture_missing_file(self, env, temp_dir: Path) -> None:
        result = runner.invoke(
            app, ["capture", "--file", str(temp_dir / "missing.log")], env=env
        )

        assert result.exit_code == 1
        assert "Capture failed" in result.stdout

    def test_capture_size_cap(self, env, log_dir: Path, temp_dir: Path) -> None:
        """--max-kb cancels a capture that grows too large."""
        big = temp_dir / "big.log"
        big.write_bytes(b"x" * 10_000)

        result = runner.invoke(
            app,
            ["capture", "--file", str(big), "--max-kb", "2"],
            env={**env, "LC_CHUNK_SIZE": "1024"},
        )

        assert result.exit_code == 1
        assert "cancelled" in result.stdout
        assert list(log_dir.glob("testapp_log_*")) == []

    def test_capture_file_and_command_conflict(self, env, source_log: Path) -> None:
        result = runner.invoke(
            app, ["capture", "--file", str(source_log), "--command", "echo hi"], env=env
        )
        assert result.exit_code == 2

    def test_invalid_configuration(self, env, source_log: Path) -> None:
        result = runner.invoke(
            app,
            ["capture", "--file", str(source_log)],
            env={**env, "LC_CHUNK_SIZE": "lots"},
        )
        assert result.exit_code == 2


class TestShareCommand:
    """Tests for the share command."""

    def test_share_email_draft(self, env, temp_dir: Path, source_log: Path) -> None:
        result = runner.invoke(
            app,
            [
                "share",
                "--channel", "email",
                "--email", "dev@example.com",
                "--headers", "Build 42",
                "--file", str(source_log),
            ],
            env=env,
        )

        assert result.exit_code == 0
        assert "Delivered via email" in result.stdout
        drafts = list((temp_dir / "cache" / "outbox").glob("testapp_log_*.log.eml"))
        assert len(drafts) == 1
        assert b"dev@example.com" in drafts[0].read_bytes()

    def test_share_email_needs_recipient(self, env, source_log: Path) -> None:
        result = runner.invoke(
            app, ["share", "--channel", "email", "--file", str(source_log)], env=env
        )

        assert result.exit_code == 1
        assert "Delivery failed" in result.stdout

    def test_share_to_directory(self, env, temp_dir: Path, source_log: Path) -> None:
        result = runner.invoke(
            app, ["share", "--channel", "share", "--zip", "--file", str(source_log)], env=env
        )

        assert result.exit_code == 0
        assert len(list((temp_dir / "cache" / "shared").glob("testapp_log_*.zip"))) == 1

    def test_share_console(self, env, source_log: Path) -> None:
        result = runner.invoke(app, ["share", "--file", str(source_log)], env=env)

        assert result.exit_code == 0
        assert "Log ready to share" in result.stdout

    def test_unknown_channel(self, env, source_log: Path) -> None:
        result = runner.invoke(
            app, ["share", "--channel", "fax", "--file", str(source_log)], env=env
        )
        assert result.exit_code == 2


class TestArchiveCommands:
    """Tests for the zip and unzip commands."""

    def test_zip_and_unzip(self, env, temp_dir: Path, source_log: Path) -> None:
        archive = temp_dir / "out.zip"
        zipped = runner.invoke(app, ["zip", str(archive), str(source_log)], env=env)

        assert zipped.exit_code == 0
        assert "Wrote 1 entries" in zipped.stdout

        restored = runner.invoke(app, ["unzip", str(archive), str(temp_dir / "restore")], env=env)

        assert restored.exit_code == 0
        assert (temp_dir / "restore" / "app.log").read_text() == source_log.read_text()

    def test_zip_missing_file(self, env, temp_dir: Path, source_log: Path) -> None:
        result = runner.invoke(
            app, ["zip", str(temp_dir / "out.zip"), str(source_log), str(temp_dir / "nope")],
            env=env,
        )

        assert result.exit_code == 1
        assert not (temp_dir / "out.zip").exists()

    def test_zip_skip_missing(self, env, temp_dir: Path, source_log: Path) -> None:
        result = runner.invoke(
            app,
            ["zip", str(temp_dir / "out.zip"), str(temp_dir / "nope"), str(source_log),
             "--skip-missing"],
            env=env,
        )

        assert result.exit_code == 0
        assert "Skipped missing file" in result.stdout
        with zipfile.ZipFile(temp_dir / "out.zip") as zf:
            assert zf.namelist() == ["app.log"]

    def test_unzip_from_stdin(self, env, temp_dir: Path) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("piped.txt", "via stdin")

        result = runner.invoke(
            app, ["unzip", "-", str(temp_dir / "out")], input=buffer.getvalue(), env=env
        )

        assert result.exit_code == 0
        assert (temp_dir / "out" / "piped.txt").read_text() == "via stdin"

    def test_unzip_corrupt(self, env, temp_dir: Path) -> None:
        bogus = temp_dir / "bogus.zip"
        bogus.write_bytes(b"garbage" * 20)

        result = runner.invoke(app, ["unzip", str(bogus), str(temp_dir / "out")], env=env)

        assert result.exit_code == 1
        assert "Unzip failed" in result.stdout


class TestPurgeAndListCommands:
    """Tests for the purge and list commands."""

    @pytest.fixture
    def populated(self, log_dir: Path) -> Path:
        log_dir.mkdir(parents=True)
        (log_dir / make_name("testapp_log_", FIXED)).write_text("a")
        (log_dir / make_name("testapp_log_", FIXED, "zip")).write_bytes(b"b")
        (log_dir / "keep.txt").write_text("c")
        return log_dir

    def test_list(self, env, populated: Path) -> None:
        result = runner.invoke(app, ["list"], env=env)

        assert result.exit_code == 0
        assert "Artifacts (2)" in result.stdout

    def test_purge(self, env, populated: Path) -> None:
        result = runner.invoke(app, ["purge"], env=env)

        assert result.exit_code == 0
        assert "Removed 2" in result.stdout
        assert sorted(p.name for p in populated.iterdir()) == ["keep.txt"]

    def test_purge_older_than_keeps_everything_recent(self, env, populated: Path) -> None:
        result = runner.invoke(app, ["purge", "--older-than-days", "100000"], env=env)

        assert result.exit_code == 0
        assert "Removed 0" in result.stdout
        assert len(list(populated.iterdir())) == 3

    def test_purge_custom_prefix(self, env, populated: Path) -> None:
        result = runner.invoke(
            app, ["purge", "--dir", str(populated), "--prefix", "keep"], env=env
        )

        assert result.exit_code == 0
        assert not (populated / "keep.txt").exists()
