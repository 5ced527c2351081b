"""Tests for the FastAPI widget endpoints."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from cryptoticker.cache import MemoryCache, PriceCache
from cryptoticker.config import Settings
from cryptoticker.engine import PriceService
from cryptoticker.errors import UpstreamFailure
from cryptoticker.models import PriceRecord
from cryptoticker.security import create_nonce
from cryptoticker.web import create_app

SECRET = "test-secret"


def _mock_resolver():
    resolver = MagicMock()
    resolver.resolve.side_effect = lambda s, c: PriceRecord.build(s, c, 0.0712, 1_700_000_000)
    return resolver


@pytest.fixture
def resolver():
    return _mock_resolver()


@pytest.fixture
def client(resolver):
    settings = Settings(currency="USD", cache_seconds=60, nonce_secret=SECRET, _env_file=None)
    service = PriceService(resolver, PriceCache(MemoryCache()))
    return TestClient(create_app(settings, service))


class TestPriceTagEndpoint:
    def test_renders_fragment(self, client):
        resp = client.get("/widgets/price", params={"symbol": "doge", "refresh": "30"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "0.071200 USD" in resp.text
        assert 'data-refresh="30"' in resp.text
        assert 'data-endpoint="/api/price"' in resp.text

    def test_upstream_failure_renders_placeholder(self, client, resolver):
        resolver.resolve.side_effect = UpstreamFailure()
        resp = client.get("/widgets/price", params={"symbol": "BTC"})
        assert resp.status_code == 200
        assert '<span class="cpt-price-value">—</span>' in resp.text


class TestSidebarEndpoint:
    def test_renders_widget(self, client):
        resp = client.get(
            "/widgets/sidebar",
            params={"title": "Doge", "symbol": "doge", "currency": "eur", "refresh": "1"},
        )
        assert resp.status_code == 200
        assert '<h2 class="cpt-widget-title">Doge</h2>' in resp.text
        assert "0.071200 EUR" in resp.text
        assert 'data-refresh="5"' in resp.text


class TestFetchEndpoint:
    def test_success(self, client):
        resp = client.post(
            "/api/price",
            json={"symbol": "DOGE", "currency": "USD", "nonce": create_nonce(SECRET)},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["formatted"] == "0.071200 USD"

    def test_missing_parameters(self, client):
        resp = client.post("/api/price", json={"symbol": "DOGE", "nonce": create_nonce(SECRET)})
        assert resp.status_code == 200
        assert resp.json() == {"success": False, "data": {"message": "Missing parameters"}}

    def test_upstream_failure(self, client, resolver):
        resolver.resolve.side_effect = UpstreamFailure()
        resp = client.post(
            "/api/price",
            json={"symbol": "BTC", "currency": "USD", "nonce": create_nonce(SECRET)},
        )
        assert resp.json() == {"success": False, "data": {"message": "Failed to fetch price"}}

    def test_bad_nonce_forbidden(self, client, resolver):
        resp = client.post(
            "/api/price",
            json={"symbol": "BTC", "currency": "USD", "nonce": create_nonce("wrong")},
        )
        assert resp.status_code == 403
        resolver.resolve.assert_not_called()

    def test_missing_nonce_forbidden(self, client):
        resp = client.post("/api/price", json={"symbol": "BTC", "currency": "USD"})
        assert resp.status_code == 403


class TestStatic:
    def test_serves_polling_script(self, client):
        resp = client.get("/static/ticker.js")
        assert resp.status_code == 200
        assert "setInterval" in resp.text
