"""
Tests for the Reporter modules.
"""

import io
import json
import os
from datetime import datetime, timedelta, timezone

import pytest
from rich.console import Console

from instance_reaper.core.config import ReaperConfig
from instance_reaper.reaper.result import PipelineError, ReapResult, Stage
from instance_reaper.reporters.cli_reporter import CLIReporter, humanize_duration
from instance_reaper.reporters.json_reporter import JSONReporter
from instance_reaper.reporters.report_writer import ReportWriter

from conftest import make_instance


@pytest.fixture
def sample_result():
    """Create a sample ReapResult with one failed delete."""
    return ReapResult(
        service_name="p-mysql",
        reap=True,
        recursive=False,
        expired=[
            make_instance("inst-1", "old-1", "2017-01-01T00:00:00Z"),
            make_instance("inst-2", "old-2", "2017-01-02T00:00:00Z"),
        ],
        deleted=["inst-2"],
        errors=[
            PipelineError(
                Stage.SINK,
                "unable to delete service instance: old-1 inst-1 (HTTP status 500)",
            )
        ],
        start_time=datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
        end_time=datetime(2024, 1, 15, 10, 30, 4, tzinfo=timezone.utc),
    )


@pytest.fixture
def console():
    """A Rich console writing to memory."""
    return Console(file=io.StringIO(), width=120, color_system=None)


class TestReportWriter:
    """Tests for ReportWriter class."""

    def test_writes_lines(self):
        """Test that each line is written with a newline and remembered."""
        stream = io.StringIO()
        writer = ReportWriter(stream)

        writer.write_line("old-1 inst-1")
        writer.write_line("old-2 inst-2")

        assert stream.getvalue() == "old-1 inst-1\nold-2 inst-2\n"
        assert writer.lines == ["old-1 inst-1", "old-2 inst-2"]
        assert repr(writer) == "ReportWriter(lines=2)"


class TestHumanizeDuration:
    """Tests for humanize_duration function."""

    @pytest.mark.parametrize(
        "interval, expected",
        [
            (timedelta(0), "0 seconds"),
            (timedelta(seconds=1), "1 second"),
            (timedelta(hours=36), "1 day 12 hours"),
            (timedelta(days=8, minutes=1), "1 week 1 day 1 minute"),
            (timedelta(seconds=90.7), "1 minute 30 seconds"),
        ],
    )
    def test_formatting(self, interval, expected):
        """Test human-readable durations."""
        assert humanize_duration(interval) == expected


class TestCLIReporter:
    """Tests for CLIReporter class."""

    def test_reporter_initialization(self):
        """Test CLI reporter initialization."""
        reporter = CLIReporter()
        assert reporter.console is not None

    def test_dry_run_banner(self, console):
        """Test the dry-run banner."""
        CLIReporter(console).print_dry_run_banner()

        assert "DRY RUN ONLY!" in console.file.getvalue()

    def test_start_message(self, console):
        """Test the start message."""
        config = ReaperConfig(
            api_url="https://api.example.com",
            username="admin",
            password="secret",
            service_name="p-mysql",
            expiry_interval=timedelta(hours=24),
        )

        CLIReporter(console).print_start(config)

        assert console.file.getvalue().strip() == (
            "Reaping instances of 'p-mysql' older than 1 day in "
            "https://api.example.com as admin..."
        )

    def test_summary(self, console, sample_result):
        """Test the run summary."""
        CLIReporter(console).report(sample_result)

        output = console.file.getvalue()
        assert "p-mysql" in output
        assert "Expired Instances:" in output
        assert "Failed:" in output

    def test_failure_message(self, console):
        """Test the failure message."""
        CLIReporter(console).print_failure("Authentication failed", "bad [creds]")

        assert "Authentication failed: bad [creds]" in console.file.getvalue()


class TestJSONReporter:
    """Tests for JSONReporter class."""

    def test_build(self, sample_result):
        """Test the JSON document of a result."""
        data = JSONReporter().build(sample_result)

        assert data["metadata"]["service_name"] == "p-mysql"
        assert data["metadata"]["succeeded"] is False
        assert data["metadata"]["expired_count"] == 2
        assert data["metadata"]["deleted_count"] == 1
        assert data["metadata"]["end_time"] == "2024-01-15T10:30:04+00:00"
        assert [i["deleted"] for i in data["expired_instances"]] == [False, True]
        assert data["errors"][0]["stage"] == "sink"

    def test_export(self, sample_result, tmp_path):
        """Test exporting results to a JSON file."""
        output_path = str(tmp_path / "reap.json")

        result_path = JSONReporter(output_path=output_path).report(sample_result)

        assert result_path == output_path
        with open(output_path, "r") as f:
            data = json.load(f)
        assert len(data["expired_instances"]) == 2

    def test_auto_generated_filename(self, sample_result, tmp_path, monkeypatch):
        """Test that filename is auto-generated when not specified."""
        monkeypatch.chdir(tmp_path)

        result_path = JSONReporter().report(sample_result)

        assert result_path.startswith("reap_p-mysql_")
        assert result_path.endswith(".json")
        assert os.path.exists(result_path)

    def test_to_string(self, sample_result):
        """Test converting result to JSON string."""
        data = json.loads(JSONReporter().to_string(sample_result))

        assert "metadata" in data
        assert "expired_instances" in data
