"""
Supabase (PostgREST) adapter for the news_articles table.

Writes: one bulk insert per pipeline run with
``Prefer: resolution=ignore-duplicates`` so rows colliding on the natural key
(``on_conflict`` columns, source + link by default) are skipped server-side.
A failed insert is logged and reported as 0 stored rows.

Reads: the article page, an exact total count (read from the Content-Range
header of a zero-width range request), and the latest created_at.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings
from ..schemas import FilteredArticle

logger = logging.getLogger(__name__)


class StoreReadError(RuntimeError):
    """The store could not serve the article page."""


def parse_content_range_total(content_range: Optional[str]) -> int:
    """Total from a PostgREST Content-Range header: ``0-0/123`` → 123, ``*/0`` → 0."""
    if not content_range or "/" not in content_range:
        return 0
    total = content_range.rsplit("/", 1)[1].strip()
    return int(total) if total.isdigit() else 0


class ArticleStore:
    """REST adapter bound to one Settings object and one HTTP client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.settings = settings
        self.client = client

    def _headers(self, **extra: str) -> Dict[str, str]:
        key = self.settings.supabase_anon_key
        headers = {"apikey": key, "Authorization": f"Bearer {key}"}
        headers.update(extra)
        return headers

    # ── Writes ───────────────────────────────────────────────────────────────

    async def insert_articles(self, articles: List[FilteredArticle]) -> int:
        """Bulk insert, ignoring duplicates. Returns rows sent, or 0 on failure."""
        if not articles:
            return 0

        rows = [a.to_row() for a in articles]
        params = {}
        if self.settings.store_conflict_columns:
            params["on_conflict"] = self.settings.store_conflict_columns

        try:
            response = await self.client.post(
                self.settings.store_rest_url,
                params=params,
                json=rows,
                headers=self._headers(**{
                    "Content-Type": "application/json",
                    "Prefer": "resolution=ignore-duplicates,return=minimal",
                }),
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase insert error: {type(e).__name__}: {e}")
            return 0

        if not response.is_success:
            logger.error(f"Supabase insert error: HTTP {response.status_code}: {response.text[:500]}")
            return 0

        logger.info(f"Stored {len(rows)} articles (duplicates ignored server-side)")
        return len(rows)

    # ── Reads ────────────────────────────────────────────────────────────────

    async def list_articles(self, source: str = "all", limit: int = 50) -> List[Dict[str, Any]]:
        """Newest articles first, optionally for one source. Raises StoreReadError."""
        params = {"select": "*", "order": "created_at.desc", "limit": str(limit)}
        if source and source != "all":
            params["source"] = f"eq.{source}"

        try:
            response = await self.client.get(
                self.settings.store_rest_url, params=params, headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise StoreReadError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise StoreReadError(f"HTTP {response.status_code}: {response.text[:500]}")

        data = response.json()
        if not isinstance(data, list):
            raise StoreReadError(f"Unexpected article payload: {str(data)[:200]}")
        return data

    async def count_articles(self) -> int:
        """Exact row count of the whole table; 0 when the count cannot be read."""
        try:
            response = await self.client.get(
                self.settings.store_rest_url,
                params={"select": "source"},
                headers=self._headers(Prefer="count=exact", Range="0-0"),
            )
        except httpx.HTTPError as e:
            logger.warning(f"Supabase count query failed: {type(e).__name__}: {e}")
            return 0

        if not response.is_success:
            logger.warning(f"Supabase count query failed: HTTP {response.status_code}")
            return 0
        return parse_content_range_total(response.headers.get("content-range"))

    async def latest_created_at(self) -> Optional[str]:
        """created_at of the newest row; None when empty or unreadable."""
        try:
            response = await self.client.get(
                self.settings.store_rest_url,
                params={"select": "created_at", "order": "created_at.desc", "limit": "1"},
                headers=self._headers(),
            )
            if not response.is_success:
                logger.warning(f"Supabase latest query failed: HTTP {response.status_code}")
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Supabase latest query failed: {type(e).__name__}: {e}")
            return None

        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0].get("created_at") or None
        return None
