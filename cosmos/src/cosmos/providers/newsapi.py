import requests
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import ProviderError, UpstreamHTTPError, NetworkError
from ..models.newsapi import NewsApiResponse, NewsApiSource, NewsApiSourcesResponse
from ..config import NEWSAPI_BASE_URL

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _join(values: Optional[List[str]]) -> Optional[str]:
    if not values:
        return None
    return ",".join(v.strip() for v in values if v and v.strip()) or None


class NewsClient:
    """
    Client for the NewsAPI v2 article search API.
    Reference: https://newsapi.org/docs/endpoints
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = NEWSAPI_BASE_URL,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def search_everything(
        self,
        q: Optional[str] = None,
        *,
        sources: Optional[List[str]] = None,
        domains: Optional[List[str]] = None,
        exclude_domains: Optional[List[str]] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        language: Optional[str] = None,
        sort_by: Optional[str] = None,
        page_size: Optional[int] = None,
        page: Optional[int] = None,
    ) -> NewsApiResponse:
        """Search all indexed articles (/everything)."""
        params = {
            "q": q,
            "sources": _join(sources),
            "domains": _join(domains),
            "excludeDomains": _join(exclude_domains),
            "from": from_date,
            "to": to_date,
            "language": language,
            "sortBy": sort_by,
            "pageSize": min(page_size, MAX_PAGE_SIZE) if page_size else None,
            "page": page,
        }
        data = self._get("everything", params)
        return self._parse(NewsApiResponse, data, "everything")

    def get_top_headlines(
        self,
        *,
        country: Optional[str] = None,
        category: Optional[str] = None,
        sources: Optional[List[str]] = None,
        q: Optional[str] = None,
        page_size: Optional[int] = None,
        page: Optional[int] = None,
    ) -> NewsApiResponse:
        """Breaking headlines (/top-headlines)."""
        params = {
            "country": country,
            "category": category,
            "sources": _join(sources),
            "q": q,
            "pageSize": min(page_size, MAX_PAGE_SIZE) if page_size else None,
            "page": page,
        }
        data = self._get("top-headlines", params)
        return self._parse(NewsApiResponse, data, "top-headlines")

    def get_sources(
        self,
        *,
        category: Optional[str] = None,
        language: Optional[str] = None,
        country: Optional[str] = None,
    ) -> List[NewsApiSource]:
        """Outlets available to top-headlines (/sources)."""
        params = {"category": category, "language": language, "country": country}
        data = self._get("sources", params)
        return self._parse(NewsApiSourcesResponse, data, "sources").sources

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ProviderError(
                "NEWSAPI_API_KEY is missing or invalid. "
                "Please add it to your .env file."
            )

        url = f"{self.base_url}/{endpoint}"
        params = {k: v for k, v in params.items() if v is not None}

        try:
            resp = self.session.get(
                url,
                params=params,
                headers={"X-Api-Key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"NewsAPI {endpoint} request failed: {e}")
            raise NetworkError(f"NewsAPI request failed: {e}", {"endpoint": endpoint})

        if resp.status_code != 200:
            message = _error_message(resp)
            logger.error(f"NewsAPI {endpoint} returned {resp.status_code}: {message}")
            raise UpstreamHTTPError(
                f"NewsAPI error: {resp.status_code}",
                status=resp.status_code,
                details={"endpoint": endpoint, "upstream_message": message},
            )

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(f"NewsAPI {endpoint} returned invalid JSON: {e}")
            raise ProviderError(f"NewsAPI returned invalid JSON: {e}", {"endpoint": endpoint})

        # NewsAPI reports some failures as 200 + status=error
        if isinstance(data, dict) and data.get("status") == "error":
            message = data.get("message") or data.get("code") or "unknown error"
            logger.error(f"NewsAPI {endpoint} error body: {message}")
            raise UpstreamHTTPError(
                f"NewsAPI error: {message}",
                status=resp.status_code,
                details={"endpoint": endpoint, "code": data.get("code")},
            )
        return data

    @staticmethod
    def _parse(model, data, endpoint: str):
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"NewsAPI {endpoint} payload did not validate: {e}")
            raise ProviderError(f"NewsAPI returned an unexpected payload: {e}", {"endpoint": endpoint})


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or "")[:200]
    if isinstance(body, dict):
        return body.get("message") or body.get("code") or ""
    return ""
