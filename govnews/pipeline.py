"""
Fetch → filter → store pipeline.

One run:
  1. Fetch all sources concurrently (failed sources contribute nothing)
  2. Send the concatenated candidates to the Gemini relevance filter
  3. Bulk insert the selected articles, ignoring duplicates

Steps 2 and 3 are skipped when no source returned anything.
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import httpx

from .config import Settings
from .schemas import NewsItem
from .tools.llm_tool import LLMTool
from .tools.relevance_filter import RelevanceFilter
from .tools.source_tool import SourceFetcher, collect_items
from .tools.store import ArticleStore

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    fetched: int = 0
    filtered: int = 0
    stored: int = 0
    ai_filtered: bool = True
    run_time_seconds: float = 0.0


async def run_fetch_and_store(settings: Settings, client: httpx.AsyncClient) -> PipelineResult:
    """Run the pipeline once. Source, filter and store failures are absorbed."""
    start = time.time()

    fetcher = SourceFetcher(settings, client)
    items = collect_items(await fetcher.fetch_all_sources())
    if not items:
        logger.warning("Pipeline: no items fetched from any source")
        return PipelineResult(run_time_seconds=time.time() - start)

    relevance_filter = RelevanceFilter(settings, LLMTool(settings, client))
    result = await relevance_filter.filter(items)

    store = ArticleStore(settings, client)
    stored = await store.insert_articles(result.articles)

    elapsed = time.time() - start
    logger.info(
        f"Pipeline: fetched={len(items)} filtered={len(result.articles)} "
        f"stored={stored} ai_filtered={result.ai_filtered} ({elapsed:.1f}s)"
    )
    return PipelineResult(
        fetched=len(items),
        filtered=len(result.articles),
        stored=stored,
        ai_filtered=result.ai_filtered,
        run_time_seconds=elapsed,
    )


async def preview_sources(
    settings: Settings,
    client: httpx.AsyncClient,
    source_ids: Optional[List[str]] = None,
) -> List[NewsItem]:
    """Fetch and extract only. Unparseable dates are kept as published."""
    fetcher = SourceFetcher(settings, client)
    outcomes = await fetcher.fetch_all_sources(source_ids, keep_unparsed_dates=True)
    return collect_items(outcomes)
