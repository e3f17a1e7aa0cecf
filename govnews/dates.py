"""Publish-date normalization for scraped government news."""

import re
from datetime import date
from email.utils import parsedate_to_datetime

# 2024年3月5日 / 2024-3-5 / 2024/03/05, also the date part of ISO-8601 timestamps
YMD_PATTERN = re.compile(r"(\d{4})[年/\-](\d{1,2})[月/\-](\d{1,2})")


def format_ymd(year: str, month: str, day: str) -> str:
    """Zero-padded ``YYYY-MM-DD``. Raises ValueError for impossible dates (2024年2月30日)."""
    return date(int(year), int(month), int(day)).isoformat()


def normalize_date(raw: str, keep_unparsed: bool = False) -> str:
    """
    Convert a source date string to ``YYYY-MM-DD``.

    The calendar date is taken as written in the source (no timezone shift),
    so a JST timestamp just after midnight keeps its Japanese date.

    Args:
        raw: Date text from a feed field or page.
        keep_unparsed: Return ``raw`` instead of "" when nothing matches.
            The preview path keeps it for display; the store path must not,
            because publish_date is a typed column.
    """
    if not raw:
        return ""
    text = raw.strip()
    if not text:
        return ""

    match = YMD_PATTERN.search(text)
    if match:
        try:
            return format_ymd(*match.groups())
        except ValueError:
            return text if keep_unparsed else ""

    # RFC 2822 (RSS 2.0 pubDate)
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is not None:
        return parsed.strftime("%Y-%m-%d")

    return text if keep_unparsed else ""
