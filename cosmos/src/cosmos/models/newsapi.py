from typing import Optional, List
from pydantic import BaseModel, Field


class ArticleSource(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None


class NewsApiArticle(BaseModel):
    """
    Raw article record as returned by /everything and /top-headlines.
    """
    source: ArticleSource = Field(default_factory=ArticleSource)
    author: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    url_to_image: Optional[str] = Field(None, alias="urlToImage")
    published_at: Optional[str] = Field(None, alias="publishedAt")
    content: Optional[str] = None

    class Config:
        populate_by_name = True


class NewsApiResponse(BaseModel):
    status: str
    total_results: int = Field(0, alias="totalResults")
    articles: List[NewsApiArticle] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class NewsApiSource(BaseModel):
    """
    Outlet listed by /sources.
    """
    id: str
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    language: Optional[str] = None
    country: Optional[str] = None


class NewsApiSourcesResponse(BaseModel):
    status: str
    sources: List[NewsApiSource] = Field(default_factory=list)
