"""
Schemas package — data models for the government news service.

  - base.py: Source / Relevance / Category enums
  - news.py: RawItem, NewsItem, FilteredArticle
"""

from govnews.schemas.base import Source, Relevance, Category
from govnews.schemas.news import RawItem, NewsItem, FilteredArticle

__all__ = [
    "Source", "Relevance", "Category",
    "RawItem", "NewsItem", "FilteredArticle",
]
