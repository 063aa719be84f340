"""Tests for web/app.py — HTTP contract via the Flask test client."""

from __future__ import annotations

import random
from unittest.mock import MagicMock

import pytest

from config.settings import Settings
from trendsage.analytics import AnalyticsStore
from trendsage.charts import publication_trend
from trendsage.documents import MockDocumentSource
from trendsage.errors import ProviderError
from trendsage.models import SearchResults
from trendsage.search import SearchOrchestrator
from trendsage.summarizer import MockSummarizer
from web.app import create_app


def seeded_chart(query: str):
    return publication_trend(query, rng=random.Random(3), year=2026)


def make_client(**overrides):
    parts = {
        "documents": MockDocumentSource(),
        "summarizer": MockSummarizer(),
        "analytics": AnalyticsStore(),
        "chart": seeded_chart,
    }
    parts.update(overrides)
    orchestrator = SearchOrchestrator(**parts)
    app = create_app(settings=Settings(app_env="test"), orchestrator=orchestrator)
    app.testing = True
    return app.test_client(), orchestrator


@pytest.fixture
def client():
    test_client, _ = make_client()
    return test_client


# ── Search ─────────────────────────────────────────────────────────────────────


class TestSearchEndpoint:
    def test_full_response_shape(self, client):
        resp = client.post(
            "/api/search",
            json={"query": "AI in healthcare"},
            headers={"x-session-id": "sess-1"},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["query"] == "AI in healthcare"
        assert "timestamp" in body
        assert "message" not in body
        results = body["results"]
        for key in [
            "overview", "keyTakeaways", "watchList", "confidenceScore",
            "trendDirection", "timeHorizon", "sources", "subTopics",
            "chartData", "metadata",
        ]:
            assert key in results
        assert results["trendDirection"] == "rising"
        assert results["timeHorizon"] == "medium-term"
        assert results["metadata"]["totalDocuments"] == 5
        assert results["sources"][0]["index"] == 1
        assert len(results["chartData"]) == 6

    def test_records_session_from_header(self):
        test_client, orch = make_client()
        test_client.post("/api/search", json={"query": "web3 funding"},
                         headers={"x-session-id": "sess-42"})
        event = list(orch.analytics._searches)[0]
        assert event.session_id == "sess-42"

    def test_anonymous_session_by_default(self):
        test_client, orch = make_client()
        test_client.post("/api/search", json={"query": "web3 funding"})
        assert list(orch.analytics._searches)[0].session_id == "anonymous"

    def test_option_limit(self, client):
        resp = client.post("/api/search", json={"query": "AI in healthcare", "options": {"limit": 2}})
        assert len(resp.get_json()["results"]["sources"]) == 2

    def test_invalid_limit_is_400(self, client):
        resp = client.post("/api/search", json={"query": "AI in healthcare", "options": {"limit": "lots"}})
        assert resp.status_code == 400

    def test_one_character_query_is_400(self, client):
        resp = client.post("/api/search", json={"query": "a"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Query too short"
        assert "at least 2 characters" in body["message"]

    def test_two_character_query_passes(self, client):
        resp = client.post("/api/search", json={"query": "ab"})
        assert resp.status_code == 200

    def test_missing_or_non_string_query_is_400(self, client):
        assert client.post("/api/search", json={}).status_code == 400
        assert client.post("/api/search", json={"query": 12}).status_code == 400
        assert client.post("/api/search", data="not json").status_code == 400

    def test_no_documents(self):
        documents = MagicMock()
        documents.search.return_value = SearchResults()
        summarizer = MagicMock()
        test_client, _ = make_client(documents=documents, summarizer=summarizer)

        resp = test_client.post("/api/search", json={"query": "nothing here"})

        body = resp.get_json()
        assert resp.status_code == 200
        assert body["results"] is None
        assert body["message"].startswith("No relevant documents found")
        assert summarizer.summarize.call_count == 0
        assert summarizer.sub_topics.call_count == 0

    def test_provider_error_is_502(self):
        documents = MagicMock()
        documents.search.side_effect = ProviderError("veritus", "HTTP 500")
        test_client, _ = make_client(documents=documents)

        resp = test_client.post("/api/search", json={"query": "AI in healthcare"})

        assert resp.status_code == 502
        assert resp.get_json()["error"] == "Provider error"


class TestQuickSearch:
    def test_returns_documents(self, client):
        resp = client.get("/api/search/quick?q=carbon-neutral%20startups&limit=2")
        body = resp.get_json()
        assert resp.status_code == 200
        assert body["query"] == "carbon-neutral startups"
        assert len(body["documents"]) == 2
        assert body["totalResults"] == 3
        assert "publishedDate" in body["documents"][0]

    def test_missing_q_is_400(self, client):
        assert client.get("/api/search/quick").status_code == 400

    def test_blank_q_is_400(self, client):
        resp = client.get("/api/search/quick?q=%20%20%20")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid query"

    def test_one_character_q_is_400(self, client):
        resp = client.get("/api/search/quick?q=a")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Query too short"

    def test_q_is_sanitized_before_search(self):
        documents = MagicMock()
        documents.search.return_value = SearchResults()
        test_client, _ = make_client(documents=documents)

        resp = test_client.get("/api/search/quick", query_string={"q": "<b>" + "x" * 900})

        sent = documents.search.call_args.args[0]
        assert resp.status_code == 200
        assert len(sent) <= 500
        assert "<" not in sent and ">" not in sent
        assert resp.get_json()["query"] == sent


class TestRegenerate:
    def test_regenerates_from_documents(self, client):
        docs = [
            {"id": "a", "title": "Paper A", "source": "J1", "publishedDate": "2024"},
            {"id": "b", "title": "Paper B", "source": "J2", "publishedDate": "2023"},
        ]
        resp = client.post("/api/search/regenerate", json={"query": "ev market", "documents": docs})
        body = resp.get_json()
        assert resp.status_code == 200
        assert body["query"] == "ev market"
        for key in ["overview", "keyTakeaways", "watchList", "confidenceScore",
                    "trendDirection", "subTopics", "regeneratedAt"]:
            assert key in body

    def test_missing_documents_is_400(self, client):
        resp = client.post("/api/search/regenerate", json={"query": "ev market"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid request"

    def test_empty_documents_is_400(self, client):
        resp = client.post("/api/search/regenerate", json={"query": "ev market", "documents": []})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Invalid request"
        assert body["message"] == "Please provide query and documents array"

    def test_malformed_documents_is_400(self, client):
        resp = client.post(
            "/api/search/regenerate",
            json={"query": "ev market", "documents": [{"abstract": "no title"}]},
        )
        assert resp.status_code == 400


class TestSuggestionsEndpoint:
    def test_matches(self, client):
        body = client.get("/api/search/suggestions?q=fintech").get_json()
        assert body["suggestions"] == ["fintech regulation", "fintech innovation"]

    def test_short_query_empty(self, client):
        assert client.get("/api/search/suggestions?q=f").get_json() == {"suggestions": []}


# ── Trending ───────────────────────────────────────────────────────────────────


class TestTrendingEndpoints:
    def test_trending_topics(self, client):
        body = client.get("/api/trending?limit=3").get_json()
        assert len(body["topics"]) == 3
        assert {"query", "searchCount", "lastSearched"} <= set(body["topics"][0])
        assert "updatedAt" in body

    def test_trending_invalid_limit_is_400(self, client):
        resp = client.get("/api/trending?limit=abc")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid limit"
        assert client.get("/api/trending?limit=0").status_code == 400

    def test_categories(self, client):
        body = client.get("/api/trending/categories").get_json()
        assert set(body["categories"]) == {"technology", "sustainability", "finance", "business"}

    def test_chart(self, client):
        body = client.get("/api/trending/chart/AI%20in%20healthcare").get_json()
        assert body["query"] == "AI in healthcare"
        assert len(body["trend"]) == 6
        assert "growthRate" in body and "totalPublications" in body

    def test_featured(self, client):
        body = client.get("/api/trending/featured").get_json()
        assert len(body["featured"]) == 6


# ── Analytics ──────────────────────────────────────────────────────────────────


class TestAnalyticsEndpoints:
    def test_card_view(self, client):
        resp = client.post("/api/analytics/card-view", json={"cardId": "c1", "query": "ev"})
        body = resp.get_json()
        assert body["success"] is True
        assert body["eventId"]

    def test_card_view_requires_card_id(self, client):
        resp = client.post("/api/analytics/card-view", json={"query": "ev"})
        assert resp.status_code == 400

    def test_share_requires_platform_and_query(self, client):
        assert client.post("/api/analytics/share", json={"platform": "x"}).status_code == 400
        assert client.post("/api/analytics/share", json={"query": "ev"}).status_code == 400

    def test_share_uses_body_session_over_header(self):
        test_client, orch = make_client()
        test_client.post(
            "/api/analytics/share",
            json={"platform": "twitter", "query": "ev", "sessionId": "body-session"},
            headers={"x-session-id": "header-session"},
        )
        assert list(orch.analytics._shares)[0].session_id == "body-session"

    def test_summary_reflects_events(self, client):
        client.post("/api/search", json={"query": "web3 funding"}, headers={"x-session-id": "u1"})
        client.post("/api/analytics/share", json={"platform": "twitter", "query": "web3 funding"})
        client.post("/api/analytics/card-view", json={"cardId": "c1"})

        body = client.get("/api/analytics/summary?range=24h").get_json()
        assert body["summary"]["totalSearches"] == 1
        assert body["summary"]["uniqueUsers"] == 1
        assert body["summary"]["cardViews"] == 1
        assert body["summary"]["timeRange"] == "24h"
        assert body["sharesByPlatform"] == {"twitter": 1}
        assert body["topQueries"] == [{"query": "web3 funding", "count": 1}]

    def test_goal_progress(self, client):
        body = client.get("/api/analytics/goal-progress").get_json()
        assert body["goal"] == 69
        assert body["current"] == 0
        assert body["remaining"] == 69
        assert body["progress"] == 0


# ── Misc ───────────────────────────────────────────────────────────────────────


class TestMisc:
    def test_health(self, client):
        body = client.get("/health").get_json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"

    def test_unknown_route_is_404(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Endpoint not found"}
