"""
Instance Reaper CLI

Main entry point for the command-line interface.
"""

import math
import sys
from datetime import timedelta
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import click
from rich.console import Console

from . import __version__
from .cloudfoundry.client import CloudFoundryClient
from .cloudfoundry.login import get_oauth_token
from .core.config import MAXIMUM_RESULTS_PER_PAGE, PAGE_SIZE_LIMIT, ReaperConfig
from .core.exceptions import AuthenticationError, ConfigurationError, ReaperError
from .core.http_client import AuthenticatedClient, build_session
from .core.logging import get_logger, setup_logging
from .reaper.expiry import utc_now
from .reaper.pipeline import Reaper
from .reporters.cli_reporter import CLIReporter
from .reporters.json_reporter import JSONReporter
from .reporters.report_writer import ReportWriter


console = Console()
logger = get_logger(__name__)


def validate_api_url(ctx, param, value: str) -> str:
    """Parse the API URL and force the https scheme."""
    try:
        parsed = urlsplit(value if "://" in value else f"https://{value}")
        netloc = parsed.netloc
    except ValueError:
        netloc = ""
    if not netloc:
        raise click.BadParameter(f"Invalid api url: {value}")
    return urlunsplit(("https", netloc, parsed.path.rstrip("/"), "", ""))


def validate_age_hours(ctx, param, value: str) -> timedelta:
    """Parse a non-negative number of hours into an interval."""
    try:
        hours = float(value)
    except ValueError:
        hours = -1.0
    if not math.isfinite(hours) or hours < 0:
        raise click.BadParameter(f"Invalid expiry interval: {value}")
    return timedelta(seconds=int(hours * 60 * 60))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="instance-reaper")
@click.option(
    "--username",
    "-u",
    envvar="CF_USERNAME",
    required=True,
    help="Cloud Foundry username (or CF_USERNAME)",
)
@click.option(
    "--password",
    "-p",
    envvar="CF_PASSWORD",
    prompt=True,
    hide_input=True,
    help="Cloud Foundry password (or CF_PASSWORD; prompted if absent)",
)
@click.option(
    "--skip-ssl-validation",
    is_flag=True,
    help="Skip verification of the API endpoint. Not recommended!",
)
@click.option(
    "--reap",
    is_flag=True,
    help="Reap service instances. Otherwise perform a dry run only.",
)
@click.option(
    "--recursive",
    is_flag=True,
    help=(
        "Also delete any service bindings, service keys, and routes "
        "associated with reaped service instances."
    ),
)
@click.option(
    "--page-size",
    default=MAXIMUM_RESULTS_PER_PAGE,
    type=click.IntRange(1, PAGE_SIZE_LIMIT),
    show_default=True,
    help="Results per page requested from the API",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Diagnostic log level (logs go to stderr)",
)
@click.option(
    "--log-file",
    default=None,
    help="Also write diagnostic logs to this file",
)
@click.option(
    "--output",
    "-o",
    default=None,
    help="Also write the run summary to this JSON file",
)
@click.argument("api_url", callback=validate_api_url)
@click.argument("service_name")
@click.argument("age_hours", callback=validate_age_hours)
def cli(
    username: str,
    password: str,
    skip_ssl_validation: bool,
    reap: bool,
    recursive: bool,
    page_size: int,
    log_level: str,
    log_file: Optional[str],
    output: Optional[str],
    api_url: str,
    service_name: str,
    age_hours: timedelta,
):
    """
    Delete instances of the given service older than the given age.

    Only instances of the service's free plans are considered. Without
    --reap, expired instances are listed but not deleted.

    Examples:

        # List free p-mysql instances older than a day
        instance-reaper -u admin -p secret api.example.com p-mysql 24

        # Delete them, with their bindings, keys and routes
        instance-reaper --reap --recursive -u admin api.example.com p-mysql 24
    """
    setup_logging(level=log_level, log_file=log_file)
    cli_reporter = CLIReporter(console)

    try:
        config = ReaperConfig(
            api_url=api_url,
            username=username,
            password=password,
            service_name=service_name,
            expiry_interval=age_hours,
            reap=reap,
            recursive=recursive,
            skip_ssl_validation=skip_ssl_validation,
            page_size=page_size,
        )
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    logger.debug(f"Starting with {config!r}")

    try:
        if config.dry_run:
            cli_reporter.print_dry_run_banner()
        cli_reporter.print_start(config)

        session = build_session(config.skip_ssl_validation)
        try:
            access_token = get_oauth_token(
                session, config.api_url, config.username, config.password
            )
        except AuthenticationError as e:
            cli_reporter.print_failure("Authentication failed", e)
            sys.exit(1)

        cf_client = CloudFoundryClient(
            AuthenticatedClient(session),
            config.api_url,
            access_token,
            page_size=config.page_size,
        )
        reaper = Reaper(
            cf_client,
            now=utc_now,
            report=ReportWriter(sys.stdout),
            page_size=config.page_size,
        )
        result = reaper.run(config)

        output_file = None
        if output:
            output_file = JSONReporter(output_path=output).report(result)

        cli_reporter.report(result)

        if not result.succeeded:
            cli_reporter.print_failure("Failed", "errors occurred whilst reaping")
            sys.exit(1)

        cli_reporter.print_completion_message(output_file)

    except ReaperError as e:
        cli_reporter.print_failure("Error", e)
        sys.exit(1)
    except OSError as e:
        cli_reporter.print_failure("Error", e)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Reap cancelled by user.[/yellow]")
        sys.exit(130)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
