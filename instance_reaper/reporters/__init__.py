"""
Report Generators
=================

Output for reap runs.

Available Reporters
-------------------
ReportWriter
    Plain-text, line-per-instance report written while the pipeline runs.
CLIReporter
    Rich terminal banner and summary.
JSONReporter
    JSON export of the run result.
"""

from instance_reaper.reporters.cli_reporter import CLIReporter, humanize_duration
from instance_reaper.reporters.json_reporter import JSONReporter
from instance_reaper.reporters.report_writer import ReportWriter

__all__ = [
    "CLIReporter",
    "JSONReporter",
    "ReportWriter",
    "humanize_duration",
]
