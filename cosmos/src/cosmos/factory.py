from typing import Callable, Optional

import requests

from . import config
from .providers.newsapi import NewsClient
from .providers.perplexity import PerplexitySearchClient
from .search.service import SearchService


def build_search_service(
    session_factory: Optional[Callable[[], requests.Session]] = None,
) -> SearchService:
    """
    Wire both upstream clients from environment configuration.

    Each client gets its own requests.Session so the two fan-out threads never
    share one. `brief` still runs several searches through the same clients
    at once; requests makes no thread-safety promise for a Session, so keep
    that to plain GET/POST calls and don't mutate session state (headers,
    cookies, adapters) while a search is running.
    """
    session_factory = session_factory or requests.Session
    news_client = NewsClient(
        api_key=config.get_newsapi_key(),
        base_url=config.get_newsapi_base_url(),
        timeout=config.get_http_timeout(10),
        session=session_factory(),
    )
    perplexity_client = PerplexitySearchClient(
        api_key=config.get_perplexity_key(),
        base_url=config.get_perplexity_base_url(),
        timeout=config.get_http_timeout(60),
        session=session_factory(),
        models=config.get_perplexity_models(),
    )
    return SearchService(news_client, perplexity_client)
