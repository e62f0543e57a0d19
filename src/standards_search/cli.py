"""CLI interface for the standards search service."""

import asyncio
from pathlib import Path
from typing import Optional

import click

from .api.service import StandardsService
from .config import Settings
from .core.exceptions import StandardsSearchError
from .data.loader import CorpusLoader
from .utils.logging_config import setup_logging
from .utils.text_processing import TextProcessor


def _get_settings(corpus_dir: Optional[Path] = None, **overrides) -> Settings:
    if corpus_dir is not None:
        overrides["corpus_dir"] = corpus_dir
    return Settings(**overrides)


corpus_option = click.option(
    "--corpus-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory holding manifest.json (bundled seed corpus by default).",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Search and compare project-management standards."""
    setup_logging(level="DEBUG" if verbose else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@click.option("--host", default=None, help="Bind address (STANDARDS_HOST by default).")
@click.option("--port", type=int, default=None, help="Port (STANDARDS_PORT by default).")
@corpus_option
def serve(host: Optional[str], port: Optional[int], corpus_dir: Optional[Path]) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from .api.server import create_app

    settings = _get_settings(corpus_dir)
    setup_logging(level=settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@main.command()
@corpus_option
def inspect(corpus_dir: Optional[Path]) -> None:
    """Load a corpus and print its chapter and section summary."""
    loader = CorpusLoader(corpus_dir)
    try:
        repository = loader.load()
    except StandardsSearchError as e:
        raise click.ClickException(str(e))

    for standard in repository.standards():
        counts = repository.counts(standard.id)
        click.echo(f"\n{standard.title} ({standard.type or 'n/a'}, {standard.version or 'n/a'})")
        click.echo(f"  Sections: {counts['sections']}  Chapters: {counts['chapters']}")
        sections = repository.get_sections(standard_id=standard.id)
        for chapter in repository.get_chapters(standard.id):
            in_chapter = sum(1 for s in sections if s.chapter_id == chapter.id)
            click.echo(f"    {chapter.number}. {chapter.title}: {in_chapter} sections")

    report = loader.get_report()
    click.echo(
        f"\nLoaded {report['sections_loaded']} sections, skipped {report['sections_skipped']}, "
        f"{repository.total_words()} words in total."
    )


async def _search(settings: Settings, query: str, standard_id: Optional[int], limit: int):
    async with StandardsService.create(settings=settings) as service:
        return service.search_all(query, standard_id=standard_id, limit=limit)


@main.command()
@click.argument("query")
@click.option("--standard-id", "-s", type=int, default=None, help="Only search this standard.")
@click.option("--limit", "-n", type=int, default=10, help="Number of results to return.")
@corpus_option
def search(query: str, standard_id: Optional[int], limit: int, corpus_dir: Optional[Path]) -> None:
    """Search every loaded standard for QUERY."""
    settings = _get_settings(corpus_dir, gemini_api_key=None)
    try:
        response = asyncio.run(_search(settings, query, standard_id, limit))
    except StandardsSearchError as e:
        raise click.ClickException(str(e))

    if not response["totalResults"]:
        click.echo("No results found.")
        return

    strip = TextProcessor().strip_highlights
    for group in response["results"]:
        standard = group["standard"]
        click.echo(f"\n{standard['title']}  (average score {group['averageScore']:.2f})")
        for section in group["sections"]:
            click.echo(f"  [{section['rank']}] {section['sectionNumber']} {section['title']}  {section['similarity']:.2f}")
            click.echo(f"      {strip(section['snippet'])}")


if __name__ == "__main__":
    main()
