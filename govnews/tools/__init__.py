# Tools module
from .extractors import FeedExtractor, ISAPageExtractor, MOJPageExtractor, get_extractor
from .source_tool import FetchOutcome, SourceFetcher, collect_items
from .llm_tool import LLMTool
from .relevance_filter import FilterResult, RelevanceFilter
from .store import ArticleStore, StoreReadError

__all__ = [
    # Fetch & extract
    "FeedExtractor",
    "ISAPageExtractor",
    "MOJPageExtractor",
    "get_extractor",
    "FetchOutcome",
    "SourceFetcher",
    "collect_items",
    # Filter
    "LLMTool",
    "FilterResult",
    "RelevanceFilter",
    # Store
    "ArticleStore",
    "StoreReadError",
]
