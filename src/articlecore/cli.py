"""Command-line interface for ArticleCore."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import IO, Optional

import click
import structlog
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from articlecore import __version__
from articlecore.config import Settings, load_settings
from articlecore.extractor import (
    ArticleExtractor,
    ExtractionError,
    InvalidBaseURLError,
    MalformedInputError,
    NoCandidateFound,
)
from articlecore.extractor.dom import describe, text_of
from articlecore.observability import configure_logging

console = Console()
error_console = Console(stderr=True)
logger = structlog.get_logger(__name__)

EXIT_FAILURE = 1
EXIT_NO_CANDIDATE = 2
EXIT_MALFORMED_INPUT = 3
EXIT_INVALID_BASE_URL = 4


def _exit_code_for(error: ExtractionError) -> int:
    if isinstance(error, NoCandidateFound):
        return EXIT_NO_CANDIDATE
    if isinstance(error, MalformedInputError):
        return EXIT_MALFORMED_INPUT
    if isinstance(error, InvalidBaseURLError):
        return EXIT_INVALID_BASE_URL
    return EXIT_FAILURE


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """ArticleCore - Extract the main article from HTML documents."""
    ctx.ensure_object(dict)
    try:
        settings = load_settings(Path(config) if config else None)
    except (ValidationError, OSError) as e:
        error_console.print(f"Invalid configuration: {e}", style="red", markup=False)
        sys.exit(EXIT_FAILURE)

    if log_level:
        settings.logging.log_level = log_level.upper()
    configure_logging(settings.logging)
    ctx.obj["settings"] = settings


def _extractor(ctx: click.Context) -> ArticleExtractor:
    settings: Settings = ctx.obj["settings"]
    return ArticleExtractor(settings.extraction)


@cli.command()
@click.argument("source", type=click.File("rb"))
@click.option("--base-url", "-u", required=True, help="Absolute URL the document was fetched from")
@click.option(
    "--format",
    "output_format",
    default="json",
    type=click.Choice(["json", "html", "text"]),
    help="Output format",
)
@click.pass_context
def extract(ctx: click.Context, source: IO[bytes], base_url: str, output_format: str) -> None:
    """Extract the article from SOURCE (a file path, or - for stdin)."""
    document = source.read()
    logger.debug("document_read", source=getattr(source, "name", "-"), size=len(document))
    try:
        article = _extractor(ctx).extract(document, base_url)
    except ExtractionError as e:
        error_console.print(f"{type(e).__name__}: {e}", style="red", markup=False)
        sys.exit(_exit_code_for(e))

    if output_format == "json":
        click.echo(article.to_json(indent=2))
    elif output_format == "html":
        click.echo(article.content)
    else:
        click.echo(article.title)
        click.echo()
        click.echo(article.text)


@cli.command()
@click.argument("source", type=click.File("rb"))
@click.option("--limit", "-n", default=10, show_default=True, type=click.IntRange(min=1), help="Rows to show")
@click.pass_context
def candidates(ctx: click.Context, source: IO[bytes], limit: int) -> None:
    """Show the best-scoring content nodes of SOURCE."""
    try:
        ranked = _extractor(ctx).candidates(source.read(), limit=limit)
    except ExtractionError as e:
        error_console.print(f"{type(e).__name__}: {e}", style="red", markup=False)
        sys.exit(_exit_code_for(e))

    table = Table(title="Content candidates")
    table.add_column("Rank", justify="right")
    table.add_column("Score", justify="right", style="cyan")
    table.add_column("Node", style="green", no_wrap=True)
    table.add_column("Depth", justify="right")
    table.add_column("Text", max_width=60)

    for rank, candidate in enumerate(ranked, start=1):
        table.add_row(
            str(rank),
            f"{candidate.score:.2f}",
            Text(describe(candidate.node)),
            str(len(candidate.ancestors)),
            Text(text_of(candidate.node)[:60]),
        )
    console.print(table)


def main() -> None:
    """Main CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
