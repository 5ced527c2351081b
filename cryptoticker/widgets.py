"""HTML fragments and JSON payloads for embeddable price widgets.

render_price_tag produces the server-rendered first paint; the client script
(web/static/ticker.js) then keeps it fresh through the fetch endpoint, whose
body is built by fetch_price_payload.
"""

from __future__ import annotations

import logging
from html import escape
from typing import Any

from pydantic import BaseModel, field_validator

from .config import Settings, absint
from .engine import PriceService
from .errors import InvalidInput, PriceError
from .models import PriceRecord

logger = logging.getLogger(__name__)

PLACEHOLDER = "—"  # em-dash shown instead of a price on any failure
MIN_REFRESH_SECONDS = 5
DEFAULT_REFRESH_SECONDS = 60
DEFAULT_ENDPOINT = "/api/price"


def clamp_refresh(refresh: Any) -> int:
    return max(absint(refresh), MIN_REFRESH_SECONDS)


class WidgetInstance(BaseModel):
    """Saved sidebar widget options, sanitized on save."""

    title: str = ""
    symbol: str = "BTC"
    currency: str = ""  # blank means the settings default
    refresh: int = DEFAULT_REFRESH_SECONDS

    @field_validator("title", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("symbol", "currency", mode="before")
    @classmethod
    def _uppercase(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("refresh", mode="before")
    @classmethod
    def _clamp_refresh(cls, value: Any) -> int:
        return clamp_refresh(value)


def _lookup(
    service: PriceService, settings: Settings, symbol: str, currency: str | None
) -> PriceRecord | None:
    try:
        return service.get_price(symbol, currency, settings)
    except PriceError as e:
        logger.info(f"Rendering placeholder for {symbol}/{currency or settings.currency}: {e.message}")
        return None


def render_price_tag(
    service: PriceService,
    settings: Settings,
    symbol: str = "BTC",
    currency: str | None = None,
    refresh_seconds: Any = DEFAULT_REFRESH_SECONDS,
    nonce: str = "",
    endpoint: str = DEFAULT_ENDPOINT,
) -> str:
    """Render the price span with its current value and last-updated caption."""
    symbol = (symbol or "").strip().upper()
    currency = (currency or "").strip().upper() or settings.currency
    refresh = clamp_refresh(refresh_seconds)

    record = _lookup(service, settings, symbol, currency)
    value = record.formatted if record is not None else PLACEHOLDER
    meta = ""
    if record is not None:
        meta = f"Updated: {record.updated_at_datetime.strftime(settings.date_format)}"

    return (
        f'<span class="cpt-price" data-symbol="{escape(symbol)}"'
        f' data-currency="{escape(currency)}" data-refresh="{refresh}"'
        f' data-nonce="{escape(nonce)}" data-endpoint="{escape(endpoint)}">'
        f'<span class="cpt-price-value">{escape(value)}</span>'
        f'<small class="cpt-price-meta">{escape(meta)}</small>'
        "</span>"
    )


def render_widget(
    service: PriceService,
    settings: Settings,
    instance: WidgetInstance,
    nonce: str = "",
    endpoint: str = DEFAULT_ENDPOINT,
) -> str:
    """Render a sidebar widget: optional title plus a price tag."""
    title = ""
    if instance.title:
        title = f'<h2 class="cpt-widget-title">{escape(instance.title)}</h2>'
    tag = render_price_tag(
        service,
        settings,
        symbol=instance.symbol,
        currency=instance.currency or None,
        refresh_seconds=instance.refresh,
        nonce=nonce,
        endpoint=endpoint,
    )
    return f'<section class="cpt-widget">{title}{tag}</section>'


def fetch_price_payload(
    service: PriceService, settings: Settings, symbol: str | None, currency: str | None
) -> dict[str, Any]:
    """Build the fetch endpoint body: success flag plus record or message."""
    try:
        if not (symbol or "").strip() or not (currency or "").strip():
            raise InvalidInput()
        record = service.get_price(symbol, currency, settings)
    except PriceError as e:
        return {"success": False, "data": {"message": e.message}}
    return {"success": True, "data": record.model_dump()}
