"""Tests for the filecopy command line."""

from pathlib import Path
import logging

import pytest
from typer.testing import CliRunner

from filecopy.cli import app


FIXTURES_DIR = Path(__file__).parent / "fixtures"

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach handlers bound to the runner's captured streams."""
    yield
    logger = logging.getLogger("filecopy")
    logger.handlers[:] = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestConfigsCommand:
    """Tests for the configs command."""

    def test_lists_bundled_configs(self):
        """Test that bundled configuration names are printed."""
        result = runner.invoke(app, ["configs"])

        assert result.exit_code == 0
        assert result.output.split() == ["filecopy-binary", "filecopy-bytes", "filecopy-text"]


class TestSetupCommand:
    """Tests for the setup command."""

    def test_creates_directories(self, tmp_path):
        """Test that setup prepares both directories."""
        result = runner.invoke(
            app,
            ["setup", "--input-dir", str(tmp_path / "in"), "--output-dir", str(tmp_path / "out")],
        )

        assert result.exit_code == 0
        assert (tmp_path / "in").is_dir()
        assert (tmp_path / "out").is_dir()

    def test_blocked_path_exits_nonzero(self, tmp_path):
        """Test that a blocked path is reported as a startup failure."""
        (tmp_path / "in").write_text("file")

        result = runner.invoke(
            app,
            ["setup", "--input-dir", str(tmp_path / "in"), "--output-dir", str(tmp_path / "out")],
        )

        assert result.exit_code == 1
        assert "Startup failed" in result.output


class TestRunCommand:
    """Tests for the run command."""

    def args(self, tmp_path, *extra):
        return [
            "run",
            *extra,
            "--input-dir", str(tmp_path / "input"),
            "--output-dir", str(tmp_path / "output"),
            "--log-level", "ERROR",
        ]

    def test_run_once_copies(self, tmp_path):
        """Test a single-scan run of the bytes pipeline."""
        (tmp_path / "input").mkdir()
        (tmp_path / "input" / "note.txt").write_bytes(b"hello")

        result = runner.invoke(app, self.args(tmp_path, "filecopy-bytes", "--once"))

        assert result.exit_code == 0, result.output
        assert "Files copied: 1" in result.output
        assert (tmp_path / "output" / "note.txt").read_bytes() == b"HELLO"

    def test_run_with_duration(self, tmp_path):
        """Test that a polling run stops after --duration."""
        result = runner.invoke(app, self.args(tmp_path, "--duration", "0.2"))

        assert result.exit_code == 0, result.output
        assert (tmp_path / "input").is_dir()
        assert (tmp_path / "output").is_dir()

    def test_run_with_config_dir(self, tmp_path):
        """Test that --config-dir extends the resource search."""
        result = runner.invoke(
            app, self.args(tmp_path, "config_simple", "--config-dir", str(FIXTURES_DIR))
        )

        assert result.exit_code == 0, result.output
        assert "Running pipeline: simple" in result.output

    def test_missing_config_exits_1(self, tmp_path):
        """Test that an unknown resource is a fatal startup failure."""
        result = runner.invoke(app, self.args(tmp_path, "no-such-pipeline", "--once"))

        assert result.exit_code == 1
        assert "Startup failed" in result.output

    def test_undecodable_config_exits_1(self, tmp_path):
        """Test that a config file with invalid UTF-8 is a reported startup failure."""
        config = tmp_path / "bad.json"
        config.write_bytes(b'{"name": "\xff\xfe"}')

        result = runner.invoke(app, self.args(tmp_path, str(config), "--once"))

        assert result.exit_code == 1
        assert "Startup failed" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)

    def test_blocked_input_exits_1(self, tmp_path):
        """Test that a blocked input path is a fatal startup failure."""
        (tmp_path / "input").write_text("file")

        result = runner.invoke(app, self.args(tmp_path, "--once"))

        assert result.exit_code == 1
        assert not (tmp_path / "output").exists()

    def test_failed_copies_exit_2(self, tmp_path):
        """Test that per-file failures are reflected in the exit code."""
        (tmp_path / "input").mkdir()
        (tmp_path / "input" / "bad.txt").write_bytes(b"\xff\xfe")
        config = tmp_path / "ascii.json"
        config.write_text(
            '{"name": "ascii", "source": {"directory": "${input_dir}"},'
            ' "transfer": {"mode": "text", "encoding": "ascii"},'
            ' "target": {"directory": "${output_dir}"}}'
        )

        result = runner.invoke(app, self.args(tmp_path, str(config), "--once"))

        assert result.exit_code == 2
        assert "Files failed: 1" in result.output


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_bundled_config(self):
        """Test that a bundled configuration validates."""
        result = runner.invoke(app, ["validate", "filecopy-text"])

        assert result.exit_code == 0
        assert "Validation passed: filecopy-text" in result.output

    def test_invalid_config_lists_issues(self):
        """Test that semantic issues are printed with exit code 2."""
        result = runner.invoke(app, ["validate", str(FIXTURES_DIR / "config_same_dirs.json")])

        assert result.exit_code == 2
        assert "target.directory" in result.output
        assert "transfer.transform" in result.output

    def test_unresolvable_config_exits_1(self):
        """Test that an unknown resource exits with code 1."""
        result = runner.invoke(app, ["validate", "no-such-pipeline"])

        assert result.exit_code == 1


class TestJsonFormatter:
    """Tests for structured log formatting."""

    def test_includes_extra_fields(self):
        """Test that extra= attributes appear in the JSON payload."""
        import json

        from filecopy.cli import JsonFormatter

        record = logging.LogRecord(
            "filecopy.pipeline.worker", logging.INFO, __file__, 1, "file_copied", None, None
        )
        record.bytes = 42
        record.source = Path("/in/a.bin")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["msg"] == "file_copied"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "filecopy.pipeline.worker"
        assert payload["bytes"] == 42
        assert payload["source"] == repr(Path("/in/a.bin"))
