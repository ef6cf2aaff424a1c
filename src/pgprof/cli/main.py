"""Main CLI entry point for pgprof."""

import csv
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from pgprof import __version__
from pgprof.config import get_settings
from pgprof.analyzer import ProfileAnalyzer
from pgprof.collector.row_parser import TRACE_ENCODING, TRACE_ERRORS
from pgprof.errors import ProfileError
from pgprof.reporter import render

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    try:
        settings = get_settings()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    level = logging.DEBUG if verbose else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """pgprof - Database profiling trace analyzer.

    Find the queries and connection configurations that cost the most
    time in a profiling trace.
    """
    setup_logging(verbose)


@cli.command()
@click.argument(
    "trace_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--format",
    "report_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Report format (default from PGPROF_REPORT_FORMAT, else text)",
)
@click.option(
    "--limit",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum entries per section (0 = all)",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the report to a file instead of stdout",
)
@click.option(
    "--scratch-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Parent directory for temporary bucket files",
)
def analyze(
    trace_file: Path,
    report_format: str | None,
    limit: int | None,
    output: Path | None,
    scratch_dir: Path | None,
) -> None:
    """Analyze a profiling trace and print ranked queries and connections.

    Rows are grouped by connection on disk, so traces larger than memory
    are fine. Connections whose rows cannot be replayed are skipped with
    a warning; the rest of the trace is still analyzed.
    """
    settings = get_settings()
    report_format = report_format or settings.report_format
    if limit is None:
        limit = settings.report_limit
    if scratch_dir is None:
        scratch_dir = settings.scratch_path

    try:
        analyzer = ProfileAnalyzer(scratch_dir=scratch_dir)
        report = analyzer.analyze(trace_file)
        text = render(report, format=report_format, limit=limit or None)
    except (ProfileError, OSError, csv.Error) as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", highlight=False)
        logger.exception("Analysis failed")
        sys.exit(1)

    if output:
        output.write_text(text, encoding=TRACE_ENCODING, errors=TRACE_ERRORS)
        err_console.print(f"[green]Report saved to {escape(str(output))}[/green]", highlight=False)
    else:
        # Query text must reach stdout untouched by rich rendering, raw bytes included.
        click.echo(text.encode(TRACE_ENCODING, TRACE_ERRORS), nl=False)


@cli.command()
def config() -> None:
    """Show current configuration.

    Settings come from PGPROF_* environment variables or a .env file.
    """
    settings = get_settings()

    console.print(Panel.fit(
        "[bold]pgprof Configuration[/bold]",
        title="Config",
    ))

    table = Table(show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Log Level", settings.log_level)
    table.add_row("Scratch Dir", str(settings.scratch_path or "(system temp dir)"))
    table.add_row("Report Format", settings.report_format)
    table.add_row("Report Limit", str(settings.report_limit or "all"))

    console.print(table)


if __name__ == "__main__":
    cli()
