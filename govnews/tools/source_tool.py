"""
Source fetchers for the three government news origins.

Each fetch is one GET with its own timeout. A source that is down, slow, or
answers non-2xx contributes nothing; it never fails the run. That contract is
carried by ``FetchOutcome``: ``items`` is always a list, and ``error`` says
why it is empty when the fetch was ignored.

The three sources are fetched concurrently and results are concatenated in
source order once all of them settle. There is no quorum: a run where two
sources are empty still filters and stores what the third returned.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from ..config import DEFAULT_ACTIVE_SOURCES, GOV_SOURCES, Settings
from ..schemas import NewsItem
from .extractors import get_extractor

logger = logging.getLogger(__name__)


@dataclass
class FetchOutcome:
    """Result of fetching one source. ``error`` set = ignored fetch, no items."""
    source_id: str
    items: List[NewsItem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def ignored(cls, source_id: str, reason: str) -> "FetchOutcome":
        return cls(source_id=source_id, items=[], error=reason)


class SourceFetcher:
    """Fetches and extracts government news sources in parallel."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.settings = settings
        self.client = client

    async def fetch_all_sources(
        self,
        source_ids: Optional[List[str]] = None,
        keep_unparsed_dates: bool = False,
    ) -> List[FetchOutcome]:
        """Fetch every source concurrently. One outcome per source, in order."""
        source_ids = source_ids or DEFAULT_ACTIVE_SOURCES
        tasks = [
            self.fetch_source(sid, keep_unparsed_dates=keep_unparsed_dates)
            for sid in source_ids
        ]
        outcomes = await asyncio.gather(*tasks)

        ok = sum(1 for o in outcomes if o.ok)
        total = sum(len(o.items) for o in outcomes)
        logger.info(f"[SOURCES] {total} candidates from {ok}/{len(outcomes)} sources")
        return list(outcomes)

    async def fetch_source(self, source_id: str, keep_unparsed_dates: bool = False) -> FetchOutcome:
        """Fetch one source. Never raises; failures come back as ignored outcomes."""
        source = GOV_SOURCES.get(source_id)
        if not source:
            logger.warning(f"[FAIL] Unknown source '{source_id}'")
            return FetchOutcome.ignored(source_id, "unknown source")

        name = source["source"].value
        try:
            response = await self.client.get(
                source["url"],
                headers=source["headers"],
                timeout=self.settings.source_timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException:
            logger.warning(f"[TIMEOUT] {name}: no response within {self.settings.source_timeout}s, skipping")
            return FetchOutcome.ignored(source_id, "timeout")
        except httpx.HTTPError as e:
            logger.warning(f"[FAIL] {name}: {type(e).__name__}: {e}")
            return FetchOutcome.ignored(source_id, f"transport error: {type(e).__name__}")

        if not response.is_success:
            logger.warning(f"[FAIL] {name}: HTTP {response.status_code}")
            return FetchOutcome.ignored(source_id, f"HTTP {response.status_code}")

        try:
            extractor = get_extractor(source_id, max_items=self.settings.source_max_items)
            items = extractor.extract(response.text, keep_unparsed_dates=keep_unparsed_dates)
        except Exception as e:
            logger.warning(f"[FAIL] {name}: extraction error: {e}")
            return FetchOutcome.ignored(source_id, f"extraction error: {type(e).__name__}")

        logger.info(f"[OK] {name}: {len(items)} items")
        return FetchOutcome(source_id=source_id, items=items)


def collect_items(outcomes: List[FetchOutcome]) -> List[NewsItem]:
    """Concatenate outcome items in source order (ignored outcomes add nothing)."""
    items: List[NewsItem] = []
    for outcome in outcomes:
        items.extend(outcome.items)
    return items
