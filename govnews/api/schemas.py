"""API response schemas -- field names match the dashboard frontend (camelCase)."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# -- News read --

class NewsListResponse(BaseModel):
    articles: List[Dict[str, Any]] = Field(default_factory=list)
    summary: str
    totalCount: int = 0
    lastUpdated: Optional[str] = None


# -- Fetch trigger --

class FetchNewsResponse(BaseModel):
    message: str
    fetched: int
    filtered: int
    stored: int
    aiFiltered: bool


class NoItemsResponse(BaseModel):
    message: str = "No items fetched"
    fetched: int = 0
    stored: int = 0


# -- Errors --

class ErrorResponse(BaseModel):
    error: str
