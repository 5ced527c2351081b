"""Tests for widget rendering and fetch payloads."""

from unittest.mock import MagicMock

import redis

from cryptoticker.cache import PriceCache, RedisCache
from cryptoticker.config import Settings
from cryptoticker.engine import PriceService
from cryptoticker.errors import NetworkFailure
from cryptoticker.models import PriceRecord
from cryptoticker.widgets import (
    PLACEHOLDER,
    WidgetInstance,
    fetch_price_payload,
    render_price_tag,
    render_widget,
)


def _settings():
    return Settings(currency="USD", cache_seconds=60, nonce_secret="test", _env_file=None)


def _mock_service(record=None, error=None):
    service = MagicMock()
    if error is not None:
        service.get_price.side_effect = error
    else:
        service.get_price.return_value = record or PriceRecord.build(
            "BTC", "USD", 42350.12, 1_700_000_000
        )
    return service


class TestRenderPriceTag:
    def test_renders_formatted_price_and_caption(self):
        html = render_price_tag(_mock_service(), _settings(), symbol="btc")

        assert '<span class="cpt-price-value">42350.12 USD</span>' in html
        assert "Updated: 2023-11-14 22:13" in html
        assert 'data-symbol="BTC"' in html
        assert 'data-currency="USD"' in html
        assert 'data-refresh="60"' in html

    def test_blank_currency_uses_default(self):
        service = _mock_service()
        html = render_price_tag(service, _settings(), symbol="BTC", currency="")
        assert 'data-currency="USD"' in html
        assert service.get_price.call_args.args[:2] == ("BTC", "USD")

    def test_refresh_clamped_to_five(self):
        html = render_price_tag(_mock_service(), _settings(), refresh_seconds="2")
        assert 'data-refresh="5"' in html

    def test_failure_renders_placeholder(self):
        service = _mock_service(error=NetworkFailure("timed out"))
        html = render_price_tag(service, _settings(), symbol="BTC")

        assert f'<span class="cpt-price-value">{PLACEHOLDER}</span>' in html
        assert '<small class="cpt-price-meta"></small>' in html
        assert "USD</span>" not in html

    def test_attributes_escaped(self):
        html = render_price_tag(_mock_service(), _settings(), symbol='"><script>')
        assert "<script>" not in html
        assert "&quot;&gt;&lt;SCRIPT&gt;" in html

    def test_nonce_and_endpoint_embedded(self):
        html = render_price_tag(_mock_service(), _settings(), nonce="123.abc", endpoint="/api/price")
        assert 'data-nonce="123.abc"' in html
        assert 'data-endpoint="/api/price"' in html


class TestWidgetInstance:
    def test_sanitizes_fields(self):
        w = WidgetInstance(title="  Bitcoin  ", symbol="btc", currency="eur", refresh="3")
        assert w.title == "Bitcoin"
        assert w.symbol == "BTC"
        assert w.currency == "EUR"
        assert w.refresh == 5

    def test_defaults(self):
        w = WidgetInstance()
        assert w.symbol == "BTC"
        assert w.currency == ""
        assert w.refresh == 60


class TestRenderWidget:
    def test_title_and_tag(self):
        instance = WidgetInstance(title="My <Coin>", symbol="ETH", refresh=30)
        service = _mock_service(PriceRecord.build("ETH", "USD", 2000.0, 1_700_000_000))
        html = render_widget(service, _settings(), instance)

        assert html.startswith('<section class="cpt-widget">')
        assert '<h2 class="cpt-widget-title">My &lt;Coin&gt;</h2>' in html
        assert "2000.00 USD" in html
        assert 'data-refresh="30"' in html

    def test_no_title(self):
        html = render_widget(_mock_service(), _settings(), WidgetInstance())
        assert "cpt-widget-title" not in html


class TestFetchPricePayload:
    def test_success(self):
        payload = fetch_price_payload(_mock_service(), _settings(), "BTC", "USD")
        assert payload["success"] is True
        assert payload["data"]["formatted"] == "42350.12 USD"
        assert payload["data"]["updated_at"] == 1_700_000_000

    def test_missing_parameters(self):
        service = _mock_service()
        payload = fetch_price_payload(service, _settings(), "BTC", "")
        assert payload == {"success": False, "data": {"message": "Missing parameters"}}
        service.get_price.assert_not_called()

    def test_error_message(self):
        service = _mock_service(error=NetworkFailure("connection reset"))
        payload = fetch_price_payload(service, _settings(), "BTC", "USD")
        assert payload == {"success": False, "data": {"message": "connection reset"}}


class TestCacheOutage:
    def _service_with_dead_redis(self):
        client = MagicMock()
        client.get.side_effect = redis.exceptions.ConnectionError("Connection refused")
        client.set.side_effect = redis.exceptions.ConnectionError("Connection refused")
        resolver = MagicMock()
        resolver.resolve.side_effect = lambda s, c: PriceRecord.build(s, c, 5.0, 1_700_000_000)
        return PriceService(resolver, PriceCache(RedisCache(client)))

    def test_render_still_shows_price(self):
        html = render_price_tag(self._service_with_dead_redis(), _settings(), symbol="BTC")
        assert '<span class="cpt-price-value">5.00 USD</span>' in html

    def test_payload_still_succeeds(self):
        payload = fetch_price_payload(self._service_with_dead_redis(), _settings(), "BTC", "USD")
        assert payload["success"] is True
        assert payload["data"]["formatted"] == "5.00 USD"
