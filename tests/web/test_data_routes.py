"""Tests for the data and health API routes."""

import pytest
from fastapi.testclient import TestClient

from marketfeed.core.client import MarketFeedClient
from marketfeed.web.app import create_app


@pytest.fixture
def feed(config, stub_chain, synthesizer, metrics) -> MarketFeedClient:
    return MarketFeedClient(config, chain=stub_chain, synthesizer=synthesizer, metrics=metrics)


@pytest.fixture
def client(feed) -> TestClient:
    return TestClient(create_app(feed))


class TestQuoteRoute:
    def test_quote(self, client):
        response = client.get("/api/v1/quote/bbca", headers={"X-Request-ID": "req-1"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["success"] is True
        assert payload["data"]["symbol"] == "BBCA"
        assert payload["data"]["source"] == "live"
        assert payload["request_id"] == "req-1"

    def test_second_quote_is_served_from_cache(self, client, stub_chain):
        client.get("/api/v1/quote/BBCA")
        response = client.get("/api/v1/quote/BBCA")

        assert response.json()["data"]["source"] == "cache"
        assert stub_chain.quote_calls == 1

    def test_invalid_market(self, client):
        response = client.get("/api/v1/quote/BBCA", params={"market": "LSE"})

        assert response.status_code == 400
        payload = response.json()
        assert payload["success"] is False
        assert payload["error"] == "HTTPException"
        assert "Unsupported market" in payload["message"]


class TestBarsRoute:
    def test_bars_with_range_alias(self, client):
        response = client.get("/api/v1/bars/AAPL", params={"market": "US", "range": "5d"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["range"] == "5D"
        assert data["interval"] == "15m"
        assert len(data["bars"]) == 3

    def test_invalid_range(self, client):
        response = client.get("/api/v1/bars/AAPL", params={"range": "10Y"})

        assert response.status_code == 400
        assert "Unsupported range" in response.json()["message"]

    def test_synthetic_fallback(self, config, failing_chain, synthesizer, metrics):
        feed = MarketFeedClient(config, chain=failing_chain, synthesizer=synthesizer, metrics=metrics)
        client = TestClient(create_app(feed))

        response = client.get("/api/v1/bars/XYZ", params={"range": "1M"})

        data = response.json()["data"]
        assert data["source"] == "synthetic"
        assert len(data["bars"]) >= 20


class TestWatchlistRoutes:
    def test_watchlist_with_symbols(self, client):
        response = client.get("/api/v1/watchlist", params={"symbols": "BBCA, TLKM"})

        data = response.json()["data"]
        assert [row["symbol"] for row in data] == ["BBCA", "TLKM"]
        assert data[1]["name"] == "Telkom Indonesia"

    def test_watchlist_defaults_to_trending(self, client):
        response = client.get("/api/v1/watchlist")

        assert len(response.json()["data"]) == 8

    def test_search(self, client):
        response = client.get("/api/v1/search", params={"q": "bank"})

        assert response.status_code == 200
        assert len(response.json()["data"]) == 6

    def test_search_requires_query(self, client):
        assert client.get("/api/v1/search", params={"q": ""}).status_code == 422

    def test_clear_cache(self, client, stub_chain):
        client.get("/api/v1/quote/BBCA")

        response = client.post("/api/v1/cache/clear")
        client.get("/api/v1/quote/BBCA")

        assert response.json()["message"] == "Cache cleared"
        assert stub_chain.quote_calls == 2


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "healthy"
    assert data["cache"]["quote_ttl_seconds"] == 30.0
    assert set(data["markets_open"]) == {"IDX", "US", "CRYPTO"}
    assert data["markets_open"]["CRYPTO"] is True
    assert data["relays"] == 1


def test_injected_client_survives_lifespan(feed, stub_chain):
    with TestClient(create_app(feed)) as client:
        assert client.get("/api/v1/quote/BBCA").status_code == 200

    assert not stub_chain.closed
