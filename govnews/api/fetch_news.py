"""Fetch trigger router -- runs the fetch/filter/store pipeline once per call.

Called by the scheduler (GET with ``Authorization: Bearer <CRON_SECRET>``) and
by the dashboard's manual "fetch" button (POST).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from govnews.api.dependencies import AppSettings, HttpClient, verify_cron_secret
from govnews.api.schemas import ErrorResponse, FetchNewsResponse, NoItemsResponse
from govnews.pipeline import run_fetch_and_store

logger = logging.getLogger(__name__)

router = APIRouter()

TRIGGER_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route(
    "/api/fetch-news",
    methods=TRIGGER_METHODS,
    dependencies=[Depends(verify_cron_secret)],
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def fetch_news(settings: AppSettings, client: HttpClient):
    if not settings.pipeline_configured:
        logger.error("Fetch trigger: Gemini or Supabase configuration missing")
        raise HTTPException(status_code=500, detail="Missing configuration")

    try:
        result = await run_fetch_and_store(settings, client)
    except Exception as e:
        logger.error(f"Fetch pipeline failed: {type(e).__name__}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch news")

    if result.fetched == 0:
        return NoItemsResponse()

    return FetchNewsResponse(
        message="News fetched and stored",
        fetched=result.fetched,
        filtered=result.filtered,
        stored=result.stored,
        aiFiltered=result.ai_filtered,
    )
