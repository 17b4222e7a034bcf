"""
Turn a free-text, citation-style answer into discrete SearchResults.

The answer is scanned line by line with a two-state machine:

    state              | url-line                    | text-line          | end
    -------------------+-----------------------------+--------------------+--------
    NO_ACTIVE_RESULT   | open draft on url           | fill pending draft | discard
    ACCUMULATING       | flush, open draft on url    | fill draft         | flush

A text line fills the first empty slot of the draft: a line of 10-199
characters becomes the title, otherwise a line of 20+ characters becomes
the description. Lines before the first URL seed the first draft.

When the answer holds no URL at all a single synthetic result wrapping the
raw text is returned instead.
"""
import enum
import logging
import re
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlparse

from ..models.search import SearchResult

logger = logging.getLogger(__name__)

URL_RE = re.compile(r"https?://[^\s)\]>]+")

TITLE_MIN_LEN = 10
TITLE_MAX_LEN = 200
DESCRIPTION_MIN_LEN = 20
FALLBACK_DESCRIPTION_LEN = 200
FALLBACK_SOURCE = "Perplexity AI"


def extract_domain(url: str) -> str:
    """Hostname of url without a leading "www.", or "Unknown"."""
    try:
        host = urlparse(url or "").hostname
    except ValueError:
        return "Unknown"
    if not host:
        return "Unknown"
    if host.startswith("www."):
        host = host[len("www."):]
    return host


def make_result_id(prefix: str) -> str:
    """Wall-clock millis plus a random suffix. Unique, not stable."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def utc_now_iso(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ParserState(enum.Enum):
    NO_ACTIVE_RESULT = "no_active_result"
    ACCUMULATING_RESULT = "accumulating_result"


@dataclass
class _Draft:
    url: str = ""
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None

    def feed(self, text: str) -> None:
        if self.title is None and TITLE_MIN_LEN <= len(text) < TITLE_MAX_LEN:
            self.title = text
        elif self.description is None and len(text) >= DESCRIPTION_MIN_LEN:
            self.description = text


class CitationParser:
    """
    Single-pass parser for one answer. result_type is the SearchResult
    type to stamp on every record ("blog" or "general").
    """

    def __init__(self, result_type: str, query: str, now: Optional[datetime] = None):
        self.result_type = result_type
        self.query = query
        self.timestamp = utc_now_iso(now)
        self.state = ParserState.NO_ACTIVE_RESULT
        self.draft = _Draft()
        self.results: List[SearchResult] = []

    def parse(self, content: str) -> List[SearchResult]:
        content = content or ""
        for line in content.split("\n"):
            match = URL_RE.search(line)
            if match:
                self._on_url_line(match.group(0), line.strip())
            elif line.strip():
                self.draft.feed(line.strip())
        self._on_end()

        if not self.results and content.strip():
            self.results.append(self._fallback(content))

        logger.debug(f"Parsed {len(self.results)} {self.result_type} results from {len(content)} chars")
        return self.results

    def _on_url_line(self, url: str, line: str) -> None:
        if self.state is ParserState.ACCUMULATING_RESULT:
            self._flush()
            self.draft = _Draft(url=url, content=line)
        else:
            self.draft.url = url
            self.draft.content = line
            self.state = ParserState.ACCUMULATING_RESULT

    def _on_end(self) -> None:
        if self.state is ParserState.ACCUMULATING_RESULT:
            self._flush()
        # Text seen without any URL is covered by the fallback result
        self.draft = _Draft()
        self.state = ParserState.NO_ACTIVE_RESULT

    def _flush(self) -> None:
        draft = self.draft
        self.results.append(SearchResult(
            id=make_result_id(self.result_type),
            title=draft.title or f'{self.result_type} result for "{self.query}"',
            description=draft.description or "",
            url=draft.url,
            published_at=self.timestamp,
            source=extract_domain(draft.url),
            type=self.result_type,
            content=draft.content,
        ))

    def _fallback(self, content: str) -> SearchResult:
        return SearchResult(
            id=make_result_id(self.result_type),
            title=f'{self.result_type} search results for "{self.query}"',
            description=content[:FALLBACK_DESCRIPTION_LEN] + "...",
            url="",
            published_at=self.timestamp,
            source=FALLBACK_SOURCE,
            type=self.result_type,
            content=content,
        )


def parse_answer(content: str, result_type: str, query: str, now: Optional[datetime] = None) -> List[SearchResult]:
    """Parse one free-text answer into SearchResults."""
    return CitationParser(result_type, query, now=now).parse(content)
