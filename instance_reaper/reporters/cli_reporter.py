"""
CLI Reporter Module
===================

Rich terminal output around a reap run: the dry-run banner, the start
message and the closing summary.

The per-instance report itself is plain text written by
:class:`ReportWriter`; this module only decorates the run.

Classes
-------
CLIReporter
    Main reporter class for terminal output.

Example
-------
>>> reporter = CLIReporter()
>>> reporter.print_dry_run_banner()
>>> reporter.report(result)

See Also
--------
rich : Python library for rich text and formatting.
JSONReporter : For programmatic access.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from instance_reaper.core.config import ReaperConfig
from instance_reaper.reaper.result import ReapResult

# Module logger
logger = logging.getLogger(__name__)

DURATION_UNITS = (
    ("week", 7 * 24 * 60 * 60),
    ("day", 24 * 60 * 60),
    ("hour", 60 * 60),
    ("minute", 60),
    ("second", 1),
)


def humanize_duration(interval: timedelta) -> str:
    """
    Format a duration for people, e.g. ``1 day 2 hours``.

    Parameters
    ----------
    interval : timedelta
        Duration to format; sub-second parts are dropped.

    Returns
    -------
    str
        Space-separated counts of weeks, days, hours, minutes and seconds,
        omitting zero units.

    Example
    -------
    >>> humanize_duration(timedelta(hours=36))
    '1 day 12 hours'
    """
    remaining = int(interval.total_seconds())
    if remaining <= 0:
        return "0 seconds"

    parts = []
    for name, size in DURATION_UNITS:
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count} {name}{'' if count == 1 else 's'}")
    return " ".join(parts)


class CLIReporter:
    """
    Reporter for terminal messages around a reap run.

    Parameters
    ----------
    console : Console, optional
        Rich Console instance. If not provided, creates a new one.

    Attributes
    ----------
    console : Console
        The Rich Console used for output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the CLI reporter with a Rich Console."""
        self.console = console or Console()
        logger.debug("Initialized CLIReporter")

    def print_dry_run_banner(self) -> None:
        """Announce that nothing will be deleted."""
        self.console.print(
            Panel(
                "[yellow bold]DRY RUN ONLY![/yellow bold]\n"
                "Expired instances will be listed but not deleted.",
                border_style="yellow",
            )
        )

    def print_start(self, config: ReaperConfig) -> None:
        """
        Print what is about to be reaped.

        Parameters
        ----------
        config : ReaperConfig
            Configuration of the run.
        """
        self.console.print(
            f"Reaping instances of '{escape(config.service_name)}' older than "
            f"{humanize_duration(config.expiry_interval)} in "
            f"{escape(config.api_url)} as {escape(config.username)}..."
        )

    def report(self, result: ReapResult) -> None:
        """
        Print the summary of a finished run.

        Parameters
        ----------
        result : ReapResult
            Result returned by the reaper.
        """
        summary = Table(show_header=False, box=None, padding=(0, 2))
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="white")

        summary.add_row("Service:", escape(result.service_name))
        summary.add_row("Mode:", "reap" if result.reap else "dry run")
        if result.reap:
            summary.add_row("Recursive:", "yes" if result.recursive else "no")

        expired_style = "red" if result.expired else "green"
        summary.add_row(
            "Expired Instances:",
            f"[{expired_style}]{len(result.expired)}[/]",
        )
        if result.reap:
            summary.add_row("Deleted:", f"[green]{len(result.deleted)}[/]")
            if result.failed_deletes:
                summary.add_row("Failed:", f"[red]{result.failed_deletes}[/]")

        if result.errors:
            summary.add_row("Errors:", f"[yellow]{len(result.errors)}[/]")

        self.console.print()
        self.console.print(summary)

    def print_completion_message(self, output_file: Optional[str] = None) -> None:
        """
        Print the completion message.

        Parameters
        ----------
        output_file : str, optional
            Path of the JSON report if one was written.
        """
        self.console.print("\n[green bold]Reap complete![/green bold]")
        if output_file:
            self.console.print(f"[dim]Results saved to: {escape(output_file)}[/dim]")

    def print_failure(self, message: str, cause: object) -> None:
        """
        Print a fatal failure, e.g. ``Authentication failed: <cause>``.

        Parameters
        ----------
        message : str
            What failed.
        cause : object
            Why it failed.
        """
        self.console.print(
            f"\n[red bold]{escape(message)}:[/red bold] {escape(str(cause))}"
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return "CLIReporter()"
