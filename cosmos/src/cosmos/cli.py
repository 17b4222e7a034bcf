import sys
import json
import click
import logging
from datetime import date
from importlib import metadata
from pathlib import Path
from .errors import format_error
from .logging import configure_logging
from .models.search import SearchOptions, HeadlineOptions
from .factory import build_search_service
from .export.report_export import export_report
from .topics import load_topics
from . import brief as topic_brief

DIST_NAME = "cosmos-search"


def get_version():
    """Installed distribution version; pyproject.toml is the only place it is set."""
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        # running from a source checkout without an install
        return "0+unknown"


__version__ = get_version()

# Configure logging at module level
configure_logging()
logger = logging.getLogger(__name__)

TYPE_CHOICES = ["news", "blogs", "general", "all"]
RECENCY_CHOICES = ["hour", "day", "week", "month"]
SORT_CHOICES = ["relevancy", "popularity", "publishedAt"]
HEADLINE_CATEGORIES = ["business", "entertainment", "general", "health", "science", "sports", "technology"]


def _clean_list(values):
    cleaned = [v.strip() for v in values or () if v and v.strip()]
    return cleaned or None


def _required_text(ctx, param, value):
    text = " ".join((value or "").split())
    if not text:
        raise click.BadParameter("must be a non-empty string.")
    return text


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """cosmos: news and web search aggregator."""
    if verbose:
        configure_logging(logging.DEBUG)


@cli.command()
@click.option("--query", required=True, callback=_required_text, help="Search query")
@click.option("--type", "content_type", default="all", show_default=True, type=click.Choice(TYPE_CHOICES), help="Content type")
@click.option("--recency", default="week", show_default=True, type=click.Choice(RECENCY_CHOICES), help="Time window")
@click.option("--source", "sources", multiple=True, help="NewsAPI source id (repeatable)")
@click.option("--domain", "domains", multiple=True, help="Domain filter (repeatable)")
@click.option("--language", default="en", show_default=True, help="Article language")
@click.option("--sort-by", default="publishedAt", show_default=True, type=click.Choice(SORT_CHOICES), help="Result ordering")
@click.option("--limit", default=20, show_default=True, type=click.IntRange(min=1), help="Maximum results")
@click.option("--out", default=None, help="Also export JSON/CSV/MD under this directory")
def search(query, content_type, recency, sources, domains, language, sort_by, limit, out):
    """Search news and the web for a query."""
    options = SearchOptions(
        type=content_type,
        recency=recency,
        sources=_clean_list(sources),
        domains=_clean_list(domains),
        language=language,
        sort_by=sort_by,
        limit=limit,
    )
    report = build_search_service().search_report(query, options)

    meta = {
        "query": query,
        "sources": [
            {"source": o.source, "count": len(o.results), "error": o.error}
            for o in report.outcomes
        ],
    }
    if out:
        meta["exports"] = export_report(report, out_root=out)

    _print_json([r.model_dump(mode="json", by_alias=True) for r in report.results], **meta)


@cli.command()
@click.option("--country", default="us", show_default=True, help="Two-letter country code")
@click.option("--category", default=None, type=click.Choice(HEADLINE_CATEGORIES), help="Headline category")
@click.option("--source", "sources", multiple=True, help="NewsAPI source id (repeatable)")
@click.option("--limit", default=20, show_default=True, type=click.IntRange(min=1), help="Maximum headlines")
def headlines(country, category, sources, limit):
    """Fetch top headlines."""
    sources = _clean_list(sources)
    if sources and (category or country):
        # NewsAPI rejects sources mixed with country/category
        logger.info("Ignoring --country/--category because --source was given")
        country = category = None

    results = build_search_service().get_top_headlines(HeadlineOptions(
        country=(country or "").strip().lower() or None,
        category=category,
        sources=sources,
        limit=limit,
    ))
    _print_json([r.model_dump(mode="json", by_alias=True) for r in results])


@cli.command()
@click.option("--category", default=None, type=click.Choice(HEADLINE_CATEGORIES), help="Source category")
@click.option("--language", default=None, help="Source language")
@click.option("--country", default=None, help="Source country")
def sources(category, language, country):
    """List news outlets known to NewsAPI."""
    service = build_search_service()
    items = service.news_client.get_sources(category=category, language=language, country=country)
    _print_json([s.model_dump(mode="json") for s in items])


@cli.command()
@click.option("--topics", "topics_path", default="topics.yaml", show_default=True, help="Topic watchlist YAML")
@click.option("--out", default="./exports", help="Export root directory")
@click.option("--type", "content_type", default="all", show_default=True, type=click.Choice(TYPE_CHOICES), help="Content type")
@click.option("--recency", default="day", show_default=True, type=click.Choice(RECENCY_CHOICES), help="Time window")
@click.option("--limit", default=10, show_default=True, type=click.IntRange(min=1), help="Maximum results per topic")
@click.option("--workers", default=4, show_default=True, type=click.IntRange(min=1), help="Max parallel topic searches")
def brief(topics_path, out, content_type, recency, limit, workers):
    """
    Search every topic of a watchlist and write a Markdown brief.
    """
    watchlist = load_topics(topics_path)
    logger.info(f"Loaded {len(watchlist['queries'])} topics from {topics_path}")

    options = SearchOptions(type=content_type, recency=recency, limit=limit)
    report_path = topic_brief.generate_brief(
        build_search_service(),
        watchlist["queries"],
        Path(out) / "briefs",
        name=watchlist["name"],
        options=options,
        max_workers=workers,
    )
    _print_json({
        "brief_file": str(report_path),
        "topics": watchlist["queries"],
        "date": date.today().isoformat(),
    })


@cli.command()
def version():
    """Print version information."""
    _print_json({"version": get_version()})


def _print_json(data, **meta):
    """Helper to print standard JSON envelope."""
    payload = {
        "ok": True,
        "data": data,
        "meta": {
            "version": 1,
            **meta
        }
    }
    click.echo(json.dumps(payload, indent=2))


def main():
    """Entry point for the CLI."""
    try:
        cli(standalone_mode=False)
    except Exception as e:
        if isinstance(e, click.exceptions.Exit):
            sys.exit(e.exit_code)
        if isinstance(e, click.exceptions.Abort):
            sys.exit(130)

        print(format_error(e))
        sys.exit(1)

if __name__ == "__main__":
    main()
