"""Price records as cached and served to widgets.

A PriceRecord is what the resolver produces, what the cache stores, and what
the fetch endpoint returns. ``formatted`` is always derived from ``price`` and
``currency`` via format_price; it is stored only so cached entries can be
served without recomputation.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def format_price(price: float, currency: str) -> str:
    """Render a price for display.

    Sub-unit prices get 6 decimals, everything else 2:
    - (0.5, "usd") -> "0.500000 USD"
    - (42350.12, "USD") -> "42350.12 USD"
    """
    decimals = 6 if price < 1 else 2
    return f"{price:.{decimals}f} {currency.upper()}"


class PriceRecord(BaseModel):
    """A normalized price for one (symbol, currency) pair."""

    symbol: str  # "BTC"
    currency: str  # "USD"
    price: float = Field(ge=0, allow_inf_nan=False)
    formatted: str
    updated_at: int  # Unix seconds, upstream-reported or local fetch time

    @classmethod
    def build(cls, symbol: str, currency: str, price: float, updated_at: int) -> PriceRecord:
        symbol = symbol.upper()
        currency = currency.upper()
        return cls(
            symbol=symbol,
            currency=currency,
            price=price,
            formatted=format_price(price, currency),
            updated_at=updated_at,
        )

    @property
    def updated_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.updated_at, tz=UTC)
