"""Tests for the HTTP surface: /api/news, /api/fetch-news and /health."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from govnews.main import create_app
from govnews.pipeline import PipelineResult


class FakeSupabase:
    """PostgREST stand-in for the three read queries."""

    def __init__(self, rows=None, total=None, fail_page=False, fail_count=False):
        self.rows = rows or []
        self.total = len(self.rows) if total is None else total
        self.fail_page = fail_page
        self.fail_count = fail_count
        self.page_requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if request.headers.get("prefer") == "count=exact":
            if self.fail_count:
                return httpx.Response(500, text="count failed")
            return httpx.Response(206, headers={"Content-Range": f"0-0/{self.total}"}, json=[])
        if params.get("select") == "created_at":
            latest = [{"created_at": self.rows[0]["created_at"]}] if self.rows else []
            return httpx.Response(200, json=latest)

        self.page_requests.append(dict(params))
        if self.fail_page:
            return httpx.Response(503, text="unavailable")
        rows = self.rows
        if "source" in params:
            wanted = params["source"][len("eq."):]
            rows = [r for r in rows if r["source"] == wanted]
        return httpx.Response(200, json=rows[:int(params["limit"])])


def make_rows(n, high=0):
    return [
        {
            "id": i,
            "title": f"在留資格に関するお知らせ{i}",
            "link": f"https://www.moj.go.jp/isa/{i}.html",
            "publish_date": "2024-03-05",
            "source": "出入国在留管理庁",
            "summary": None,
            "relevance": "high" if i < high else "medium",
            "category": "在留資格",
            "created_at": f"2024-03-05T00:00:{59 - i % 60:02d}+00:00",
        }
        for i in range(n)
    ]


@pytest.fixture
def api(settings, mock_client):
    """TestClient factory bound to a fake upstream handler."""
    def _make(handler, app_settings=None):
        app = create_app(settings=app_settings or settings, http_client=mock_client(handler))
        return TestClient(app)
    return _make


class TestNewsEndpoint:

    def test_returns_page_summary_and_totals(self, api):
        fake = FakeSupabase(rows=make_rows(3, high=1), total=123)

        with api(fake) as client:
            response = client.get("/api/news")

        assert response.status_code == 200
        body = response.json()
        assert len(body["articles"]) == 3
        assert body["totalCount"] == 123
        assert body["summary"] == "123件の記事を蓄積中（表示: 3件、重要: 1件）"
        assert body["lastUpdated"] == "2024-03-05T00:00:59+00:00"
        assert response.headers["cache-control"] == "s-maxage=60, stale-while-revalidate=30"

    def test_limit_is_clamped(self, api):
        fake = FakeSupabase(rows=make_rows(120))

        with api(fake) as client:
            response = client.get("/api/news", params={"limit": "500"})

        assert response.status_code == 200
        assert fake.page_requests[0]["limit"] == "100"
        assert len(response.json()["articles"]) <= 100

    @pytest.mark.parametrize("raw", ["abc", "0", "-3", ""])
    def test_invalid_limit_uses_default(self, api, raw):
        fake = FakeSupabase()

        with api(fake) as client:
            client.get("/api/news", params={"limit": raw})

        assert fake.page_requests[0]["limit"] == "50"

    def test_source_filter(self, api):
        fake = FakeSupabase(rows=make_rows(2))

        with api(fake) as client:
            response = client.get("/api/news", params={"source": "出入国在留管理庁"})

        assert fake.page_requests[0]["source"] == "eq.出入国在留管理庁"
        assert len(response.json()["articles"]) == 2

    def test_unknown_source_is_empty_not_an_error(self, api):
        fake = FakeSupabase(rows=make_rows(2))

        with api(fake) as client:
            response = client.get("/api/news", params={"source": "気象庁"})

        assert response.status_code == 200
        body = response.json()
        assert body["articles"] == []
        assert body["summary"] == "まだニュースが取得されていません。「ニュース取得」ボタンを押してください。"

    def test_all_source_has_no_filter(self, api):
        fake = FakeSupabase()

        with api(fake) as client:
            client.get("/api/news", params={"source": "all"})

        assert "source" not in fake.page_requests[0]

    def test_other_methods_are_rejected(self, api):
        with api(FakeSupabase()) as client:
            response = client.post("/api/news")

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}

    def test_missing_store_config(self, api, make_settings):
        def handler(request):
            raise AssertionError("no request expected")

        with api(handler, make_settings(SUPABASE_URL="")) as client:
            response = client.get("/api/news")

        assert response.status_code == 500
        assert response.json() == {"error": "Database not configured"}

    def test_page_query_failure(self, api):
        with api(FakeSupabase(fail_page=True)) as client:
            response = client.get("/api/news")

        assert response.status_code == 500
        assert response.json() == {"error": "Database read failed"}

    def test_count_failure_degrades(self, api):
        with api(FakeSupabase(rows=make_rows(1), fail_count=True)) as client:
            response = client.get("/api/news")

        assert response.status_code == 200
        assert response.json()["totalCount"] == 0

    def test_unexpected_error(self, api):
        def handler(request):
            raise RuntimeError("unexpected")

        with api(handler) as client:
            response = client.get("/api/news")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


RUN_RESULT = PipelineResult(fetched=12, filtered=4, stored=4, ai_filtered=True)


def no_upstream(request):
    raise AssertionError("no upstream request expected")


class TestFetchNewsEndpoint:

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    def test_post_without_secret(self, mock_run, api):
        mock_run.return_value = RUN_RESULT

        with api(no_upstream) as client:
            response = client.post("/api/fetch-news")

        assert response.status_code == 200
        assert response.json() == {
            "message": "News fetched and stored",
            "fetched": 12,
            "filtered": 4,
            "stored": 4,
            "aiFiltered": True,
        }
        mock_run.assert_awaited_once()

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    def test_get_without_bearer_is_unauthorized(self, mock_run, api, make_settings):
        with api(no_upstream, make_settings(CRON_SECRET="s3cret")) as client:
            response = client.get("/api/fetch-news")
            wrong = client.get("/api/fetch-news", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert wrong.status_code == 401
        mock_run.assert_not_awaited()

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    def test_get_with_matching_bearer(self, mock_run, api, make_settings):
        mock_run.return_value = RUN_RESULT

        with api(no_upstream, make_settings(CRON_SECRET="s3cret")) as client:
            response = client.get("/api/fetch-news", headers={"Authorization": "Bearer s3cret"})

        assert response.status_code == 200

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    def test_post_passes_even_with_secret(self, mock_run, api, make_settings):
        mock_run.return_value = RUN_RESULT

        with api(no_upstream, make_settings(CRON_SECRET="s3cret")) as client:
            response = client.post("/api/fetch-news")

        assert response.status_code == 200

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    def test_missing_configuration(self, mock_run, api, make_settings):
        with api(no_upstream, make_settings(GEMINI_API_KEY="")) as client:
            response = client.post("/api/fetch-news")

        assert response.status_code == 500
        assert response.json() == {"error": "Missing configuration"}
        mock_run.assert_not_awaited()

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    def test_no_items_fetched(self, mock_run, api):
        mock_run.return_value = PipelineResult()

        with api(no_upstream) as client:
            response = client.post("/api/fetch-news")

        assert response.status_code == 200
        assert response.json() == {"message": "No items fetched", "fetched": 0, "stored": 0}

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    def test_pipeline_crash(self, mock_run, api):
        mock_run.side_effect = RuntimeError("boom")

        with api(no_upstream) as client:
            response = client.post("/api/fetch-news")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch news"}


class TestHealth:

    def test_reports_presence_not_values(self, api):
        with api(no_upstream) as client:
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["config"]["gemini_api_key"] is True
        assert body["config"]["cron_secret"] is False
        assert "gemini-key" not in response.text
        assert "anon-key" not in response.text


class TestFetchNewsMethods:

    @patch("govnews.api.fetch_news.run_fetch_and_store", new_callable=AsyncMock)
    @pytest.mark.parametrize("method", ["HEAD", "OPTIONS", "PUT", "DELETE"])
    def test_bearer_gate_applies_to_every_method(self, mock_run, method, api, make_settings):
        mock_run.return_value = RUN_RESULT

        with api(no_upstream, make_settings(CRON_SECRET="s3cret")) as client:
            denied = client.request(method, "/api/fetch-news")
            allowed = client.request(method, "/api/fetch-news", headers={"Authorization": "Bearer s3cret"})

        assert denied.status_code == 401
        assert allowed.status_code == 200
        mock_run.assert_awaited_once()
