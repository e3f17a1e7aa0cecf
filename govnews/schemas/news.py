"""
News item and article data models.

Lifecycle within one pipeline run:

    RawItem (extractor) → NewsItem (dates normalized) → FilteredArticle (Gemini)
    → row in news_articles (store assigns id / created_at)

Only FilteredArticle ever leaves the process; the others live in memory for a
single run.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator

from .base import Category, Relevance, Source
from ..dates import normalize_date

logger = logging.getLogger(__name__)


class RawItem(BaseModel):
    """Item as pulled out of a source page, date still in source format."""
    title: str
    link: str = ""
    raw_date: str = ""
    source: Source

    def normalize(self, keep_unparsed: bool = False) -> "NewsItem":
        return NewsItem(
            title=self.title,
            link=self.link,
            publish_date=normalize_date(self.raw_date, keep_unparsed=keep_unparsed),
            source=self.source,
        )


class NewsItem(BaseModel):
    """Candidate news item with an ISO ``YYYY-MM-DD`` date (or "")."""
    title: str
    link: str = ""
    publish_date: str = ""
    source: Source

    class Config:
        use_enum_values = True


class FilteredArticle(NewsItem):
    """
    News item enriched by the relevance filter.

    The model's free-form output is coerced rather than rejected: an unknown
    relevance becomes "medium" and an unknown category becomes "その他", so
    one sloppy selection never drops the article.
    """
    summary: Optional[str] = None
    relevance: Relevance = Relevance.MEDIUM
    category: Category = Category.OTHER

    class Config:
        use_enum_values = True
        validate_default = True

    @field_validator('summary', mode='before')
    @classmethod
    def validate_summary(cls, v):
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator('relevance', mode='before')
    @classmethod
    def validate_relevance(cls, v):
        if isinstance(v, Enum):
            v = v.value
        v_str = str(v).strip().lower() if v is not None else ""
        if v_str in {e.value for e in Relevance}:
            return v_str
        if v_str:
            logger.debug(f"Unknown relevance '{v}', defaulting to 'medium'")
        return Relevance.MEDIUM.value

    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        if isinstance(v, Enum):
            v = v.value
        v_str = str(v).strip() if v is not None else ""
        if v_str in {e.value for e in Category}:
            return v_str
        if v_str:
            logger.debug(f"Unknown category '{v}', defaulting to 'その他'")
        return Category.OTHER.value

    def to_row(self) -> Dict[str, Any]:
        """Row payload for the news_articles table."""
        return {
            "title": self.title,
            "link": self.link or None,
            "publish_date": self.publish_date or None,
            "source": self.source,
            "summary": self.summary or None,
            "relevance": self.relevance or Relevance.MEDIUM.value,
            "category": self.category or Category.OTHER.value,
        }
