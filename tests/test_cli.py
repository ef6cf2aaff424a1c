"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner
from pydantic import ValidationError

from pgprof import __version__
from pgprof.cli.main import cli
from pgprof.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from PGPROF_* variables and cached settings."""
    for var in ("PGPROF_LOG_LEVEL", "PGPROF_SCRATCH_DIR", "PGPROF_REPORT_FORMAT", "PGPROF_REPORT_LIMIT"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def runner():
    return CliRunner()


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_text_report(self, runner, write_trace, sample_trace, scratch_dir):
        """Test the text report lists the query and the merged connection."""
        trace = write_trace(sample_trace)
        result = runner.invoke(cli, ["analyze", str(trace), "--scratch-dir", str(scratch_dir)])

        assert result.exit_code == 0, result.output
        out = result.stdout
        assert out.index("QUERIES") < out.index("SELECT 1") < out.index("CONNECTIONS")
        assert "Total time: 25 ms" in out
        assert "               Calls: 2" in out
        assert "Called from: billing, reports" in out
        assert list(scratch_dir.iterdir()) == []

    def test_json_report(self, runner, write_trace, sample_trace, scratch_dir):
        """Test JSON output parses and ranks entries."""
        trace = write_trace(sample_trace)
        result = runner.invoke(
            cli, ["analyze", str(trace), "--format", "json", "--scratch-dir", str(scratch_dir)]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["queries"][0]["query"] == "SELECT 1"
        assert data["connections"][0]["nr_connects"] == 2
        assert data["analysis"]["connections_skipped"][0]["connection_id"] == "conn-b"

    def test_output_file(self, runner, write_trace, sample_trace, scratch_dir, temp_dir):
        """Test the report can be written to a file."""
        trace = write_trace(sample_trace)
        output = temp_dir / "report.txt"
        result = runner.invoke(
            cli, ["analyze", str(trace), "--output", str(output), "--scratch-dir", str(scratch_dir)]
        )

        assert result.exit_code == 0, result.output
        assert "QUERIES" not in result.stdout
        assert "SELECT 1" in output.read_text()

    def test_format_from_settings(self, runner, write_trace, sample_trace, scratch_dir, monkeypatch):
        """Test the default format comes from the environment."""
        monkeypatch.setenv("PGPROF_REPORT_FORMAT", "json")
        trace = write_trace(sample_trace)
        result = runner.invoke(cli, ["analyze", str(trace), "--scratch-dir", str(scratch_dir)])

        assert result.exit_code == 0, result.output
        assert "queries" in json.loads(result.stdout)

    def test_undecodable_query_text_reaches_stdout(self, runner, temp_dir, scratch_dir):
        """Test invalid UTF-8 in a query is reported and written back as the same bytes."""
        trace = temp_dir / "trace.csv"
        trace.write_bytes(
            b"1,a,connect,2,ok,user,alice,database,shop,host,localhost,port,5432,prog,app\n"
            b"1,a,prepare,1,ok,query,SELECT \xff,name,p\n"
            b"1,a,execute,4,ok,name,p\n"
        )
        result = runner.invoke(cli, ["analyze", str(trace), "--scratch-dir", str(scratch_dir)])

        assert result.exit_code == 0, result.output
        assert b"SELECT \xff" in result.stdout_bytes
        assert b"Total time: 5 ms" in result.stdout_bytes

    def test_missing_trace_file(self, runner, temp_dir):
        """Test a missing trace file is rejected."""
        result = runner.invoke(cli, ["analyze", str(temp_dir / "missing.csv")])
        assert result.exit_code != 0

    def test_scratch_directory_failure(self, runner, write_trace, sample_trace, temp_dir):
        """Test an unusable scratch location aborts without a report."""
        blocker = temp_dir / "blocker"
        blocker.write_text("")
        trace = write_trace(sample_trace)
        result = runner.invoke(cli, ["analyze", str(trace), "--scratch-dir", str(blocker / "sub")])

        assert result.exit_code == 1
        assert "QUERIES" not in result.stdout


class TestOtherCommands:
    """Tests for config and version."""

    def test_config(self, runner):
        """Test config shows current settings."""
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        assert "Report Format" in result.stdout

    def test_version(self, runner):
        """Test version flag."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_log_level(self, runner, monkeypatch):
        """Test an unknown log level is a clean configuration error."""
        monkeypatch.setenv("PGPROF_LOG_LEVEL", "verbose")
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, ValidationError)

    def test_log_level_any_case(self, runner, monkeypatch):
        """Test level names are accepted in lower case."""
        monkeypatch.setenv("PGPROF_LOG_LEVEL", "debug")
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0, result.output
        assert get_settings().log_level == "DEBUG"


class TestSettings:
    """Tests for Settings validation."""

    def test_rejects_unknown_log_level(self):
        """Test a level name logging does not know fails validation."""
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_normalizes_log_level(self):
        """Test level names are upper-cased."""
        assert Settings(log_level="warning").log_level == "WARNING"
