"""
Per-source content extractors.

None of the three agencies offers an API, so each source gets its own
extraction strategy behind the same ``extract(body) -> List[NewsItem]`` call:

  - FeedExtractor: MHLW RSS 1.0 (RDF) feed, parsed with feedparser
  - ISAPageExtractor / MOJPageExtractor: anchor scan over the news index HTML,
    with the publish date inferred from text just before each link

Extraction is tolerant. A record that does not parse is skipped,
a body that does not parse yields [], and nothing here raises to the fetcher.
Every extractor caps its output so the Gemini prompt stays bounded.
"""

import html
import logging
import re
from typing import Dict, List, Optional, Tuple

import feedparser

from ..config import GOV_SOURCES, MOJ_ORIGIN
from ..dates import YMD_PATTERN, format_ymd
from ..schemas import NewsItem, RawItem, Source

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 30

# Anchor with a double-quoted href; group 1 = href, group 2 = inner markup
_ANCHOR_RE = re.compile(r'<a\s+href="([^"]*)"[^>]*>([\s\S]*?)</a>', re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")

# Date search window around an anchor, relative to the anchor start
_DATE_LOOKBEHIND = 150
_DATE_LOOKAHEAD = 10


class FeedExtractor:
    """RSS / RDF feed extractor (MHLW)."""

    def __init__(self, source: Source, max_items: int = DEFAULT_MAX_ITEMS):
        self.source = source
        self.max_items = max_items

    def extract(self, body: str, keep_unparsed_dates: bool = False) -> List[NewsItem]:
        if not body:
            return []
        try:
            feed = feedparser.parse(body)
        except Exception as e:
            logger.warning(f"Feed parse failed for {self.source.value}: {e}")
            return []

        items: List[NewsItem] = []
        for entry in feed.entries:
            if len(items) >= self.max_items:
                break
            raw = self._parse_entry(entry)
            if raw is not None:
                items.append(raw.normalize(keep_unparsed=keep_unparsed_dates))
        return items

    def _parse_entry(self, entry: Dict) -> Optional[RawItem]:
        try:
            title = (entry.get("title") or "").strip()
            if not title:
                return None
            # feedparser maps dc:date to "updated" and pubDate to "published"
            raw_date = entry.get("updated") or entry.get("published") or ""
            return RawItem(
                title=title,
                link=(entry.get("link") or "").strip(),
                raw_date=str(raw_date).strip(),
                source=self.source,
            )
        except Exception as e:
            logger.debug(f"Skipping malformed feed entry: {e}")
            return None


class LinkListExtractor:
    """
    Anchor-scan extractor for an agency news index page.

    Government index pages mix real announcements with navigation chrome.
    Title length bounds drop icons and breadcrumb fragments; ``accepts_link``
    keeps only links under the agency's news paths. Subclasses supply that
    predicate.
    """

    min_title_length = 8
    max_title_length = 200

    def __init__(self, source: Source, origin: str = MOJ_ORIGIN, max_items: int = DEFAULT_MAX_ITEMS):
        self.source = source
        self.origin = origin.rstrip("/")
        self.max_items = max_items

    def accepts_link(self, link: str) -> bool:
        raise NotImplementedError

    def extract(self, body: str, keep_unparsed_dates: bool = False) -> List[NewsItem]:
        """HTML dates are either normalized or left empty; ``keep_unparsed_dates`` has no effect."""
        if not body:
            return []

        items: List[NewsItem] = []
        for match in _ANCHOR_RE.finditer(body):
            if len(items) >= self.max_items:
                break
            try:
                item = self._parse_anchor(body, match)
            except Exception as e:
                logger.debug(f"Skipping malformed anchor in {self.source.value} page: {e}")
                continue
            if item is not None:
                items.append(item)
        return items

    def _parse_anchor(self, body: str, match: "re.Match") -> Optional[NewsItem]:
        title = self._clean_title(match.group(2))
        if not self._title_in_bounds(title):
            return None

        link = self._absolute_link(match.group(1).strip())
        if not self.accepts_link(link):
            return None

        return NewsItem(
            title=title,
            link=link,
            publish_date=self._infer_date(body, match.start()),
            source=self.source,
        )

    def _clean_title(self, inner_html: str) -> str:
        text = html.unescape(_TAG_RE.sub("", inner_html))
        return _SPACE_RE.sub(" ", text).strip()

    def _title_in_bounds(self, title: str) -> bool:
        return bool(title) and self.min_title_length <= len(title) <= self.max_title_length

    def _absolute_link(self, href: str) -> str:
        if href.startswith("/") and not href.startswith("//"):
            return self.origin + href
        return href

    def _infer_date(self, body: str, anchor_start: int) -> str:
        window = body[max(0, anchor_start - _DATE_LOOKBEHIND):anchor_start + _DATE_LOOKAHEAD]
        match = YMD_PATTERN.search(window)
        if not match:
            return ""
        try:
            return format_ymd(*match.groups())
        except ValueError:
            return ""


class ISAPageExtractor(LinkListExtractor):
    """Immigration Services Agency news index: anything under /isa/."""

    def accepts_link(self, link: str) -> bool:
        return "/isa/" in link and not link.endswith("index.html")


class MOJPageExtractor(LinkListExtractor):
    """Ministry of Justice press index: secretariat and immigration pages."""

    _NEWS_SEGMENTS: Tuple[str, ...] = ("/hisho/", "/nyuukokukanri/")

    def accepts_link(self, link: str) -> bool:
        if link.endswith("index.html"):
            return False
        return any(segment in link for segment in self._NEWS_SEGMENTS)


_EXTRACTOR_CLASSES = {
    "mhlw": FeedExtractor,
    "isa": ISAPageExtractor,
    "moj": MOJPageExtractor,
}


def get_extractor(source_id: str, max_items: int = DEFAULT_MAX_ITEMS):
    """Build the extractor registered for a GOV_SOURCES id."""
    source_cfg = GOV_SOURCES.get(source_id)
    extractor_cls = _EXTRACTOR_CLASSES.get(source_id)
    if source_cfg is None or extractor_cls is None:
        raise KeyError(f"No extractor for source '{source_id}'")
    return extractor_cls(source_cfg["source"], max_items=max_items)
