from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "cosmos" / "src"
sys.path.insert(0, str(SRC))

from cosmos.errors import ProviderError
from cosmos.models.newsapi import NewsApiResponse, NewsApiSource
from cosmos.models.perplexity import PerplexityResponse


def make_article(title, published_at, *, url=None, source="Example News", description="Summary"):
    return {
        "source": {"id": None, "name": source},
        "author": "Jane Reporter",
        "title": title,
        "description": description,
        "url": url or f"https://example.com/{abs(hash(title))}",
        "urlToImage": None,
        "publishedAt": published_at,
        "content": "Body text",
    }


def make_completion(content, **extra):
    payload = {
        "id": "cmpl-1",
        "model": "llama-3.1-sonar-small-128k-online",
        "choices": [{"index": 0, "finish_reason": "stop", "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
    }
    payload.update(extra)
    return PerplexityResponse.model_validate(payload)


def answer_with_urls(count, domain="blog.example.org"):
    lines = []
    for i in range(count):
        lines.append(f"[{i + 1}] https://{domain}/post-{i}")
        lines.append(f"Citation number {i} headline")
    return "\n".join(lines)


class FakeNewsClient:
    """Records calls; returns canned articles or raises."""

    def __init__(self, articles=None, error=None, sources=None):
        self.articles = articles or []
        self.error = error
        self.sources = sources or []
        self.calls = []

    def search_everything(self, q=None, **kwargs):
        self.calls.append(("everything", q, kwargs))
        if self.error:
            raise self.error
        return NewsApiResponse.model_validate(
            {"status": "ok", "totalResults": len(self.articles), "articles": self.articles}
        )

    def get_top_headlines(self, **kwargs):
        self.calls.append(("top-headlines", None, kwargs))
        if self.error:
            raise self.error
        return NewsApiResponse.model_validate(
            {"status": "ok", "totalResults": len(self.articles), "articles": self.articles}
        )

    def get_sources(self, **kwargs):
        self.calls.append(("sources", None, kwargs))
        if self.error:
            raise self.error
        return [NewsApiSource.model_validate(s) for s in self.sources]


class FakePerplexityClient:
    def __init__(self, content="", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def search_category(self, category, query, **kwargs):
        self.calls.append((category, query, kwargs))
        if self.error:
            raise self.error
        return make_completion(self.content)


def upstream_down(name="upstream"):
    return ProviderError(f"{name} unavailable")
