"""Shared fixtures: settings without .env, and HTTP clients backed by httpx.MockTransport."""

import httpx
import pytest

from govnews.config import Settings

SUPABASE_URL = "https://db.example.supabase.co"
STORE_URL = f"{SUPABASE_URL}/rest/v1/news_articles"

RDF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/"
         xmlns:dc="http://purl.org/dc/elements/1.1/">
<channel rdf:about="https://www.mhlw.go.jp/stf/news.rdf">
<title>厚生労働省 新着情報</title>
<link>https://www.mhlw.go.jp/</link>
<description>厚生労働省の新着情報</description>
</channel>
{items}
</rdf:RDF>
"""

RDF_ITEM_TEMPLATE = """<item rdf:about="{link}">
<title><![CDATA[{title}]]></title>
<link>{link}</link>
<dc:date>{date}</dc:date>
</item>"""


def build_rdf(entries):
    """entries: iterable of (title, link, date)."""
    items = "\n".join(
        RDF_ITEM_TEMPLATE.format(title=title, link=link, date=date)
        for title, link, date in entries
    )
    return RDF_TEMPLATE.replace("{items}", items)


@pytest.fixture
def make_settings():
    def _make(**overrides):
        values = {
            "SUPABASE_URL": SUPABASE_URL,
            "SUPABASE_ANON_KEY": "anon-key",
            "GEMINI_API_KEY": "gemini-key",
            "CRON_SECRET": "",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def mock_client():
    """Build an AsyncClient whose every request is answered by ``handler``."""
    def _make(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def rdf_feed():
    return build_rdf
