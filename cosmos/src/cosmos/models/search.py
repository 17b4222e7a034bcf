from typing import List, Literal, Optional
from pydantic import BaseModel, Field

ResultType = Literal["news", "blog", "general"]
ContentType = Literal["news", "blogs", "general", "all"]
Recency = Literal["hour", "day", "week", "month"]
SortBy = Literal["relevancy", "popularity", "publishedAt"]


class SearchResult(BaseModel):
    """
    Normalized search result shared by every upstream.
    """
    id: str = Field(min_length=1)  # Unique per call, not stable across calls
    title: str = Field(min_length=1)
    description: str = ""
    url: str = ""
    image_url: Optional[str] = Field(None, alias="imageUrl")
    published_at: str = Field(alias="publishedAt")  # ISO-8601
    source: str
    type: ResultType
    author: Optional[str] = None
    content: Optional[str] = None

    class Config:
        populate_by_name = True


class SearchOptions(BaseModel):
    """
    Options for a single aggregated search.
    """
    type: ContentType = "all"
    recency: Recency = "week"
    sources: Optional[List[str]] = None
    domains: Optional[List[str]] = None
    language: str = "en"
    sort_by: SortBy = Field("publishedAt", alias="sortBy")
    limit: int = Field(20, ge=1)

    class Config:
        populate_by_name = True


class HeadlineOptions(BaseModel):
    country: Optional[str] = None
    category: Optional[str] = None
    sources: Optional[List[str]] = None
    limit: int = Field(20, ge=1)


class SourceOutcome(BaseModel):
    """
    Contribution of one upstream tap. A failed tap carries the reason
    and an empty result list.
    """
    source: str
    results: List[SearchResult] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SearchReport(BaseModel):
    query: str
    options: SearchOptions
    results: List[SearchResult] = Field(default_factory=list)
    outcomes: List[SourceOutcome] = Field(default_factory=list)

    @property
    def failed_sources(self) -> List[str]:
        return [o.source for o in self.outcomes if not o.ok]
