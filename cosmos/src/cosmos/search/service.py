import calendar
import logging
import math
import re
import concurrent.futures
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from ..errors import ProviderError
from ..models.newsapi import NewsApiArticle
from ..models.search import (
    HeadlineOptions,
    SearchOptions,
    SearchReport,
    SearchResult,
    SourceOutcome,
)
from ..providers.newsapi import NewsClient, MAX_PAGE_SIZE
from ..providers.perplexity import PerplexitySearchClient
from .parser import make_result_id, parse_answer

logger = logging.getLogger(__name__)

# Perplexity category -> SearchResult.type
RESULT_TYPES = {"blogs": "blog", "general": "general", "news": "news"}

# Quota divisor when every stream is tapped
ALL_STREAMS_DIVISOR = 3

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)
_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


def get_date_from_recency(recency: str, now: Optional[datetime] = None) -> str:
    """
    Start date (YYYY-MM-DD, UTC) of the window named by recency.
    Unknown values fall back to one week.
    """
    now = (now or datetime.now(timezone.utc))
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)

    if recency == "hour":
        start = now - timedelta(hours=1)
    elif recency == "day":
        start = now - timedelta(days=1)
    elif recency == "month":
        start = _subtract_month(now)
    else:
        start = now - timedelta(days=7)
    return start.date().isoformat()


def _subtract_month(dt: datetime) -> datetime:
    year, month = (dt.year - 1, 12) if dt.month == 1 else (dt.year, dt.month - 1)
    # Mar 31 -> Feb 28/29
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def parse_timestamp(value: Optional[str]) -> datetime:
    """Aware datetime for an ISO-8601 string; unparseable values sort last."""
    if not value:
        return _EPOCH
    text = value.strip().replace("Z", "+00:00")
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return _EPOCH
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def sort_results(results: List[SearchResult], sort_by: str) -> List[SearchResult]:
    if sort_by == "publishedAt":
        # sorted() is stable with reverse=True, ties keep merge order
        return sorted(results, key=lambda r: parse_timestamp(r.published_at), reverse=True)
    # relevancy/popularity: upstream order is kept
    return list(results)


def article_to_result(article: NewsApiArticle, prefix: str, fallback_title: str) -> SearchResult:
    return SearchResult(
        id=make_result_id(prefix),
        title=(article.title or "").strip() or fallback_title,
        description=article.description or "",
        url=article.url or "",
        image_url=article.url_to_image or None,
        published_at=article.published_at or "",
        source=article.source.name or "Unknown",
        type="news",
        author=article.author or None,
        content=article.content or None,
    )


class SearchService:
    """
    Fans one query out to NewsAPI and Perplexity and merges the results.

    Upstream failures never surface here: each tap degrades to an empty
    contribution and the outcome is recorded on the SearchReport.
    """

    def __init__(
        self,
        news_client: NewsClient,
        perplexity_client: PerplexitySearchClient,
        max_workers: int = 2,
    ):
        self.news_client = news_client
        self.perplexity_client = perplexity_client
        self.max_workers = max_workers

    def search(self, query: str, options: Optional[SearchOptions] = None) -> List[SearchResult]:
        """Merged, sorted results, at most options.limit of them."""
        return self.search_report(query, options).results

    def search_report(self, query: str, options: Optional[SearchOptions] = None) -> SearchReport:
        options = options or SearchOptions()
        per_source_limit = self._per_source_limit(options)

        taps: List[Tuple[str, Callable[[], List[SearchResult]]]] = []
        if options.type in ("news", "all"):
            taps.append(("newsapi", lambda: self._search_news(query, options, per_source_limit)))
        if options.type in ("blogs", "general", "all"):
            category = "general" if options.type == "all" else options.type
            taps.append((
                f"perplexity:{category}",
                lambda: self._search_perplexity(query, category, options, per_source_limit),
            ))

        outcomes = self._run_taps(taps)

        merged: List[SearchResult] = []
        for outcome in outcomes:
            merged.extend(outcome.results)

        results = sort_results(merged, options.sort_by)[:options.limit]
        logger.info(
            f"Search {query!r} type={options.type}: {len(results)} results "
            f"({', '.join(f'{o.source}={len(o.results)}' for o in outcomes)})"
        )
        return SearchReport(query=query, options=options, results=results, outcomes=outcomes)

    def get_top_headlines(self, options: Optional[HeadlineOptions] = None) -> List[SearchResult]:
        """Top headlines mapped to news results; [] when NewsAPI fails."""
        options = options or HeadlineOptions()
        try:
            response = self.news_client.get_top_headlines(
                country=options.country,
                category=options.category,
                sources=options.sources,
                page_size=min(options.limit, MAX_PAGE_SIZE),
            )
        except ProviderError as e:
            logger.warning(f"Headlines unavailable: {e.message}")
            return []

        return [
            article_to_result(a, "headline", "Untitled headline")
            for a in response.articles
        ]

    @staticmethod
    def _per_source_limit(options: SearchOptions) -> int:
        divisor = ALL_STREAMS_DIVISOR if options.type == "all" else 1
        return math.ceil(options.limit / divisor)

    def _run_taps(self, taps) -> List[SourceOutcome]:
        if len(taps) == 1:
            name, fn = taps[0]
            return [self._safe_tap(name, fn)]

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self._safe_tap, name, fn) for name, fn in taps]
            # Merge order follows tap order, not completion order
            return [f.result() for f in futures]

    @staticmethod
    def _safe_tap(name: str, fn: Callable[[], List[SearchResult]]) -> SourceOutcome:
        try:
            return SourceOutcome(source=name, results=fn())
        except ProviderError as e:
            logger.warning(f"{name} contributed no results: {e.message}")
            return SourceOutcome(source=name, results=[], error=e.message)

    def _search_news(self, query: str, options: SearchOptions, limit: int) -> List[SearchResult]:
        response = self.news_client.search_everything(
            query,
            sources=options.sources,
            domains=options.domains,
            language=options.language,
            sort_by=options.sort_by,
            from_date=get_date_from_recency(options.recency),
            page_size=min(limit, MAX_PAGE_SIZE),
        )
        fallback_title = f'news result for "{query}"'
        return [article_to_result(a, "news", fallback_title) for a in response.articles]

    def _search_perplexity(self, query: str, category: str, options: SearchOptions, limit: int) -> List[SearchResult]:
        response = self.perplexity_client.search_category(
            category,
            query,
            recency=options.recency,
            domains=options.domains,
        )
        results = parse_answer(response.answer, RESULT_TYPES[category], query)
        return results[:limit]
