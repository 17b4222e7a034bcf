import requests
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import ProviderError, UpstreamHTTPError, NetworkError
from ..models.perplexity import PerplexityMessage, PerplexityResponse
from ..config import PERPLEXITY_BASE_URL

logger = logging.getLogger(__name__)

SMALL_MODEL = "llama-3.1-sonar-small-128k-online"
LARGE_MODEL = "llama-3.1-sonar-large-128k-online"

SYSTEM_PROMPT = (
    "You are a helpful assistant that searches for and summarizes current "
    "information from the web. Provide accurate, up-to-date information "
    "with proper citations."
)

QUERY_TEMPLATES = {
    "news": (
        "Find the latest news about: {query}. Please provide recent news "
        "articles with sources and publication dates."
    ),
    "blogs": (
        "Find recent blog posts and articles about: {query}. Focus on in-depth "
        "analysis, opinions, and detailed coverage from blogs and online publications."
    ),
    "general": (
        "Search for comprehensive information about: {query}. Include various "
        "types of content like articles, discussions, reports, and other "
        "relevant online content."
    ),
}

# Per-category request tuning: (model size, max_tokens, temperature, default recency)
CATEGORY_PARAMS = {
    "news": ("small", 1000, 0.1, "week"),
    "blogs": ("small", 1200, 0.2, "week"),
    "general": ("large", 1500, 0.3, "month"),
}


class PerplexitySearchClient:
    """
    Client for the Perplexity chat completions API (online models).
    Reference: https://docs.perplexity.ai/api-reference/chat-completions
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = PERPLEXITY_BASE_URL,
        timeout: float = 60,
        session: Optional[requests.Session] = None,
        models: Optional[Dict[str, str]] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.models = {"small": SMALL_MODEL, "large": LARGE_MODEL}
        self.models.update(models or {})

    def search(
        self,
        query: str,
        *,
        model: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.2,
        top_p: float = 0.9,
        search_domain_filter: Optional[List[str]] = None,
        return_citations: bool = True,
        search_recency_filter: Optional[str] = None,
        top_k: int = 0,
        stream: bool = False,
        presence_penalty: float = 0,
        frequency_penalty: float = 1,
    ) -> PerplexityResponse:
        """
        Send one prompt and return the completion payload as-is.
        """
        messages = [
            PerplexityMessage(role="system", content=SYSTEM_PROMPT),
            PerplexityMessage(role="user", content=query),
        ]
        body: Dict[str, Any] = {
            "model": model or self.models["small"],
            "messages": [m.model_dump() for m in messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "top_p": top_p,
            "top_k": top_k,
            "stream": stream,
            "presence_penalty": presence_penalty,
            "frequency_penalty": frequency_penalty,
            "return_citations": return_citations,
        }
        if search_domain_filter:
            body["search_domain_filter"] = list(search_domain_filter)
        if search_recency_filter:
            body["search_recency_filter"] = search_recency_filter

        data = self._post("chat/completions", body)
        try:
            return PerplexityResponse.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Perplexity payload did not validate: {e}")
            raise ProviderError(f"Perplexity returned an unexpected payload: {e}")

    def search_category(
        self,
        category: str,
        query: str,
        *,
        recency: Optional[str] = None,
        domains: Optional[List[str]] = None,
        max_tokens: Optional[int] = None,
    ) -> PerplexityResponse:
        """Templated search for one of "news", "blogs", "general"."""
        if category not in QUERY_TEMPLATES:
            raise ValueError(f"Unknown Perplexity search category: {category!r}")

        size, default_tokens, temperature, default_recency = CATEGORY_PARAMS[category]
        return self.search(
            QUERY_TEMPLATES[category].format(query=query),
            model=self.models[size],
            max_tokens=max_tokens or default_tokens,
            temperature=temperature,
            search_recency_filter=recency or default_recency,
            search_domain_filter=domains,
            return_citations=True,
        )

    def search_news(self, query: str, **kwargs) -> PerplexityResponse:
        return self.search_category("news", query, **kwargs)

    def search_blogs(self, query: str, **kwargs) -> PerplexityResponse:
        return self.search_category("blogs", query, **kwargs)

    def search_general(self, query: str, **kwargs) -> PerplexityResponse:
        return self.search_category("general", query, **kwargs)

    def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ProviderError(
                "PERPLEXITY_API_KEY is missing or invalid. "
                "Please add it to your .env file."
            )

        url = f"{self.base_url}/{endpoint}"
        try:
            resp = self.session.post(
                url,
                json=body,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Perplexity request failed: {e}")
            raise NetworkError(f"Perplexity request failed: {e}", {"endpoint": endpoint})

        if resp.status_code != 200:
            logger.error(f"Perplexity returned {resp.status_code}: {(resp.text or '')[:200]}")
            raise UpstreamHTTPError(
                f"Perplexity API error: {resp.status_code}",
                status=resp.status_code,
                details={"endpoint": endpoint},
            )

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Perplexity returned invalid JSON: {e}")
            raise ProviderError(f"Perplexity returned invalid JSON: {e}", {"endpoint": endpoint})
