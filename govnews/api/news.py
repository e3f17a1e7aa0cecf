"""News read router -- newest stored articles plus a dashboard summary line."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Response

from govnews.api.dependencies import AppSettings, HttpClient
from govnews.api.schemas import ErrorResponse, NewsListResponse
from govnews.schemas import Relevance
from govnews.tools.store import ArticleStore, StoreReadError

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
CACHE_CONTROL = "s-maxage=60, stale-while-revalidate=30"
EMPTY_SUMMARY = "まだニュースが取得されていません。「ニュース取得」ボタンを押してください。"


def parse_limit(raw: Optional[str]) -> int:
    """Non-numeric or < 1 → default; anything above MAX_LIMIT is clamped."""
    try:
        limit = int(raw) if raw is not None else DEFAULT_LIMIT
    except (TypeError, ValueError):
        limit = DEFAULT_LIMIT
    if limit < 1:
        limit = DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def build_summary(total: int, articles: list) -> str:
    if not articles:
        return EMPTY_SUMMARY
    high = sum(1 for a in articles if a.get("relevance") == Relevance.HIGH.value)
    return f"{total}件の記事を蓄積中（表示: {len(articles)}件、重要: {high}件）"


@router.get(
    "/api/news",
    response_model=NewsListResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_news(
    response: Response,
    settings: AppSettings,
    client: HttpClient,
    source: str = "all",
    limit: Optional[str] = None,
):
    """Newest articles first, optionally for one source (``all`` = every source)."""
    if not settings.store_configured:
        raise HTTPException(status_code=500, detail="Database not configured")

    store = ArticleStore(settings, client)
    try:
        articles = await store.list_articles(source=source, limit=parse_limit(limit))
        total = await store.count_articles()
        last_updated = await store.latest_created_at()
    except StoreReadError as e:
        logger.error(f"News read failed: {e}")
        raise HTTPException(status_code=500, detail="Database read failed")
    except Exception as e:
        logger.error(f"News read error: {type(e).__name__}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    response.headers["Cache-Control"] = CACHE_CONTROL
    return NewsListResponse(
        articles=articles,
        summary=build_summary(total, articles),
        totalCount=total,
        lastUpdated=last_updated,
    )
