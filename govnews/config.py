"""
Configuration management for the government news service.

Settings come from environment variables (or a local .env file). The store,
Gemini and cron-secret values have no usable defaults: endpoints check
``store_configured`` / ``pipeline_configured`` at request time and answer 500
instead of starting work with half a configuration.
"""

from functools import lru_cache
from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings

from .schemas import Source


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Datastore (Supabase PostgREST)
    supabase_url: str = Field(default="", alias="SUPABASE_URL")
    supabase_anon_key: str = Field(default="", alias="SUPABASE_ANON_KEY")
    store_table: str = Field(default="news_articles", alias="STORE_TABLE")
    # Natural key for ignore-duplicates inserts; needs a matching unique index
    store_conflict_columns: str = Field(default="source,link", alias="STORE_CONFLICT_COLUMNS")

    # Gemini relevance filter
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
    )
    gemini_temperature: float = Field(default=0.1, alias="GEMINI_TEMPERATURE")
    gemini_timeout: float = Field(default=45.0, alias="GEMINI_TIMEOUT")
    filter_fallback_limit: int = Field(default=20, alias="FILTER_FALLBACK_LIMIT")

    # Source fetching
    source_timeout: float = Field(default=10.0, alias="SOURCE_TIMEOUT")
    source_max_items: int = Field(default=30, alias="SOURCE_MAX_ITEMS")

    # Fetch trigger gate. Empty = anyone may trigger.
    cron_secret: str = Field(default="", alias="CRON_SECRET")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def pipeline_configured(self) -> bool:
        return bool(self.gemini_api_key) and self.store_configured

    @property
    def store_rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1/{self.store_table}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# ══════════════════════════════════════════════════════════════════════════════
# GOVERNMENT SOURCES
# ══════════════════════════════════════════════════════════════════════════════

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_HTML_HEADERS = {
    "User-Agent": _BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml",
    "Accept-Language": "ja,en;q=0.9",
}

MOJ_ORIGIN = "https://www.moj.go.jp"

GOV_SOURCES: Dict[str, Dict] = {
    "mhlw": {
        "id": "mhlw",
        "source": Source.MHLW,
        "source_type": "rss",
        "url": "https://www.mhlw.go.jp/stf/news.rdf",
        "headers": {"User-Agent": "Mozilla/5.0 (compatible; NewsBot/1.0)"},
    },
    "isa": {
        "id": "isa",
        "source": Source.ISA,
        "source_type": "html",
        "url": f"{MOJ_ORIGIN}/isa/news/index.html",
        "headers": _HTML_HEADERS,
    },
    "moj": {
        "id": "moj",
        "source": Source.MOJ,
        "source_type": "html",
        "url": f"{MOJ_ORIGIN}/hisho/kouhou/press_index.html",
        "headers": _HTML_HEADERS,
    },
}

DEFAULT_ACTIVE_SOURCES = list(GOV_SOURCES.keys())
