import csv
import datetime
import logging
import re
import concurrent.futures
from pathlib import Path
from typing import List, Dict, Optional, Tuple

from .models.search import SearchOptions, SearchReport
from .search.service import SearchService
from .export.md_export import render_results_md

logger = logging.getLogger(__name__)

_STOP_WORDS = {
    "the", "and", "for", "with", "from", "that", "this", "into", "over",
    "after", "before", "ahead", "amid", "as", "at", "by", "on", "in",
    "to", "of", "a", "an", "is", "are", "be", "its", "it", "their",
    "new", "news", "says", "said", "how", "why", "what", "will", "result",
    "results", "search", "blog", "general", "you", "your", "about",
}

_LINK_HEADERS = ["topic", "published_at", "title", "source", "type", "url"]


def extract_themes(reports: List[SearchReport], limit: int = 8) -> List[Tuple[str, int]]:
    """Most frequent title words across all reports, ties broken alphabetically."""
    counts: Dict[str, int] = {}
    for report in reports:
        for result in report.results:
            for w in re.findall(r"[a-z0-9]+", result.title.lower()):
                if len(w) < 3 or w in _STOP_WORDS:
                    continue
                counts[w] = counts.get(w, 0) + 1
    items = sorted(counts.items(), key=lambda x: (-x[1], x[0]))
    return items[:limit]


def run_topic_searches(
    service: SearchService,
    queries: List[str],
    options: SearchOptions,
    *,
    max_workers: int = 4,
) -> List[SearchReport]:
    """One search_report per query, returned in query order."""
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(service.search_report, q, options) for q in queries]
        return [f.result() for f in futures]


def generate_brief(
    service: SearchService,
    queries: List[str],
    out_dir: Path,
    *,
    name: str = "Topic Brief",
    options: Optional[SearchOptions] = None,
    brief_date: Optional[datetime.date] = None,
    max_workers: int = 4,
) -> Path:
    """
    Search every topic and write a Markdown brief plus a CSV of links.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    options = options or SearchOptions()

    day_str = (brief_date or datetime.date.today()).isoformat()
    out_path = out_dir / f"brief_{day_str}.md"
    csv_path = out_dir / f"brief_{day_str}_links.csv"

    logger.info(f"Running {len(queries)} topic searches (workers={max_workers})")
    reports = run_topic_searches(service, queries, options, max_workers=max_workers)

    lines = []
    lines.append(f"# {name} ({day_str})")
    lines.append(
        f"**Type**: {options.type} | **Recency**: {options.recency} "
        f"| **Limit per topic**: {options.limit}"
    )
    lines.append("")

    lines.append("## Top Themes")
    themes = extract_themes(reports)
    if themes:
        for word, count in themes:
            lines.append(f"- {word} ({count})")
    else:
        lines.append("- No headline themes available.")
    lines.append("")

    lines.append("## Source Health")
    failures = [(r.query, o) for r in reports for o in r.outcomes if not o.ok]
    if failures:
        for query, outcome in failures:
            lines.append(f"- {query}: {outcome.source} unavailable ({outcome.error})")
    else:
        lines.append("- All sources responded.")
    lines.append("")

    csv_rows: List[Dict[str, str]] = []
    for report in reports:
        rows = [r.model_dump(mode="json") for r in report.results]
        lines.extend(render_results_md(rows, heading=f"Topic: {report.query}", level=2))
        for row in rows:
            csv_rows.append({"topic": report.query, **{k: row.get(k) for k in _LINK_HEADERS[1:]}})

    with open(out_path, "w") as f:
        f.write("\n".join(lines))

    with open(csv_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_LINK_HEADERS)
        writer.writeheader()
        writer.writerows(csv_rows)

    logger.info(f"Brief written to {out_path} ({len(csv_rows)} links)")
    return out_path
