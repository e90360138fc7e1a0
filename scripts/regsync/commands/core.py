"""Core top-level CLI commands (search/show/list/stats/backup)."""

import logging
import sqlite3
import sys
from typing import Optional

import click

from regsync.services import get_config, get_db, get_search_index

logger = logging.getLogger(__name__)


def register_core_commands(cli: click.Group) -> None:
    """Register core top-level commands on the main CLI group."""
    cli.add_command(search)
    cli.add_command(show)
    cli.add_command(list_regulations)
    cli.add_command(stats)
    cli.add_command(backup)


@click.command()
@click.argument("query", nargs=-1, required=True)
@click.option(
    "-n", "--limit", default=10, type=click.IntRange(1, 1000), help="Maximum results (1-1000)"
)
def search(query: tuple, limit: int) -> None:
    """Search indexed regulation text."""
    query_str = " ".join(query)
    click.echo(f"Searching for: {query_str}")

    try:
        results = get_search_index().search(get_config().index_name, query_str, limit=limit)
    except sqlite3.OperationalError as e:
        click.echo(click.style(f"Search failed: {e}", fg="red"))
        sys.exit(1)

    if not results:
        click.echo(click.style("No results found.", fg="yellow"))
        return

    for i, result in enumerate(results, 1):
        kind = result.get("stage") or result.get("article_type")
        click.echo(click.style(f"\n{i}. [{result['document_number']}] {result.get('title') or '(untitled)'}", bold=True))
        click.echo(f"   {kind} | {result.get('publication_date') or 'unpublished'} | {result.get('document_type')}")
        if result.get("excerpt"):
            click.echo(f"   {result['excerpt']}")


@click.command()
@click.argument("document_number")
def show(document_number: str) -> None:
    """Show the stored record for a document number."""
    regulation = get_db().get_regulation(document_number)
    if not regulation:
        click.echo(click.style(f"Regulation not found: {document_number}", fg="red"))
        sys.exit(1)

    click.echo(click.style(f"\n{regulation.title or '(untitled)'}", fg="bright_white", bold=True))
    click.echo("=" * 50)
    for key, value in regulation.to_row().items():
        if key == "title" or value is None:
            continue
        click.echo(f"{key:>18}: {value}")


@click.command("list")
@click.option("--document-type", type=click.Choice(["article", "public_inspection"]), help="Filter by document type")
@click.option("-t", "--article-type", help="Filter by article type (regulation, notice, ...)")
@click.option("--stage", type=click.Choice(["proposed", "final"]), help="Filter by stage")
@click.option("-n", "--limit", default=50, type=click.IntRange(1, 1000), help="Maximum results")
def list_regulations(
    document_type: Optional[str],
    article_type: Optional[str],
    stage: Optional[str],
    limit: int,
) -> None:
    """List stored regulations, newest first."""
    regulations = get_db().list_regulations(
        document_type=document_type, article_type=article_type, stage=stage, limit=limit
    )
    if not regulations:
        click.echo(click.style("No regulations found.", fg="yellow"))
        return

    for regulation in regulations:
        title = (regulation.title or "(untitled)")[:70]
        click.echo(f"{regulation.document_number:<14} {regulation.document_type:<18} {title}")


@click.command()
def stats() -> None:
    """Show store and index statistics."""
    statistics = get_db().get_statistics()
    indexed = get_search_index().count(get_config().index_name)

    click.echo(click.style("\nRegulation Store", fg="bright_white", bold=True))
    click.echo("=" * 50)
    click.echo(f"Total regulations: {statistics['total_regulations']}")
    click.echo(f"With citations:    {statistics['with_citations']}")
    click.echo(f"Searchable:        {indexed}")

    for title, key in (
        ("By document type", "by_document_type"),
        ("By article type", "by_article_type"),
        ("By stage", "by_stage"),
    ):
        if statistics[key]:
            click.echo(click.style(f"\n{title}:", bold=True))
            for name, count in sorted(statistics[key].items()):
                click.echo(f"  {name}: {count}")


@click.command()
def backup() -> None:
    """Create a backup of the regulation database."""
    path = get_db().backup()
    click.echo(click.style(f"Backup created: {path}", fg="green"))
