"""The sync command: run the Federal Register ingestion pipeline."""

import logging
from typing import Optional

import click

from regsync.models import RunOptions
from regsync.services import get_config, get_sync

logger = logging.getLogger(__name__)


@click.command()
@click.option("-d", "--document-number", help="Sync a single document only")
@click.option(
    "--public-inspection",
    is_flag=True,
    help="Sync current public inspection documents (or the public inspection version of --document-number)",
)
@click.option(
    "-t",
    "--article-type",
    type=click.Choice(["rule", "prorule", "notice"], case_sensitive=False),
    help="Limit articles to one type (ignored for public inspection documents)",
)
@click.option("--year", type=int, help="Sync a whole year, or a month of it with --month")
@click.option("--month", type=click.IntRange(1, 12), help="Month of --year to sync")
@click.option("--days", default=7, type=click.IntRange(min=1), show_default=True, help="Sync the last N days")
@click.option("-n", "--limit", type=click.IntRange(min=1), help="Process at most N documents")
@click.option("--cache", is_flag=True, help="Reuse cached detail and full text downloads")
@click.option("--skip-text", is_flag=True, help="Store metadata only, skip full text, citations and indexing")
@click.option("--debug", is_flag=True, help="Verbose tracing")
@click.option("--progress/--no-progress", default=True, help="Show a progress bar")
def sync(
    document_number: Optional[str],
    public_inspection: bool,
    article_type: Optional[str],
    year: Optional[int],
    month: Optional[int],
    days: int,
    limit: Optional[int],
    cache: bool,
    skip_text: bool,
    debug: bool,
    progress: bool,
) -> None:
    """Sync proposed rules, final rules and notices from FederalRegister.gov."""
    if month and not year:
        click.echo(click.style("Warning: --month has no effect without --year", fg="yellow"))

    options = RunOptions(
        document_number=document_number,
        article_type=article_type,
        public_inspection=public_inspection,
        year=year,
        month=month,
        days=days,
        limit=limit,
        cache=cache,
        skip_text=skip_text,
        debug=debug,
    )

    report = get_sync().run(options, progress=progress)

    click.echo(click.style("\nSync Summary", fg="bright_white", bold=True))
    click.echo("=" * 50)
    for line in report.summary_lines():
        color = "green" if line in report.successes else ("white" if line.startswith("  ") else "yellow")
        click.echo(click.style(line, fg=color))

    try:
        path = report.write(get_config().reports_dir)
        click.echo(f"\nReport written to {path}")
    except OSError as e:
        logger.warning(f"Could not write run report: {e}")
