"""CoinGecko /simple/price client that resolves one symbol in one fiat currency."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import requests

from ..errors import NetworkFailure, PriceUnavailable, UpstreamFailure
from ..models import PriceRecord

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Popular tickers -> CoinGecko asset ids. Anything else is guessed as symbol.lower().
SYMBOL_TO_COINGECKO_ID = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "LTC": "litecoin",
    "BCH": "bitcoin-cash",
    "DOGE": "dogecoin",
    "XRP": "ripple",
    "ADA": "cardano",
    "SOL": "solana",
    "DOT": "polkadot",
}


def map_symbol_to_id(symbol: str) -> str:
    """Return the CoinGecko id for a ticker, falling back to the lowercased ticker."""
    symbol = symbol.upper()
    return SYMBOL_TO_COINGECKO_ID.get(symbol, symbol.lower())


def _parse_price(raw_price: Any) -> float | None:
    """Parse a vendor price into a non-negative float, or None if unusable."""
    if raw_price is None or isinstance(raw_price, bool):
        return None
    try:
        parsed = float(raw_price)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed) or parsed < 0:
        return None
    return parsed


def _parse_timestamp(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        parsed = int(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed <= 0:
        return None
    try:
        datetime.fromtimestamp(parsed, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
    return parsed


class PriceResolver:
    """Fetches and normalizes a single price from CoinGecko.

    Build one per process and pass it to PriceService; the underlying
    requests.Session is reused across lookups.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._clock = clock

    @property
    def price_url(self) -> str:
        return f"{self.base_url}/simple/price"

    def resolve(self, symbol: str, currency: str) -> PriceRecord:
        """Fetch the current price of ``symbol`` in ``currency``.

        Raises NetworkFailure, UpstreamFailure or PriceUnavailable.
        """
        symbol = symbol.upper()
        currency = currency.upper()
        asset_id = map_symbol_to_id(symbol)
        vs_currency = currency.lower()

        params = {
            "ids": asset_id,
            "vs_currencies": vs_currency,
            "include_last_updated_at": "true",
        }
        logger.debug(f"Requesting {self.price_url} ids={asset_id} vs_currencies={vs_currency}")
        try:
            response = self.session.get(self.price_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Network error fetching {symbol}/{currency}: {e}")
            raise NetworkFailure(str(e)) from e

        if response.status_code != 200:
            logger.warning(
                f"CoinGecko returned HTTP {response.status_code} for {symbol}/{currency}"
            )
            raise UpstreamFailure()

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"Unparseable CoinGecko body for {symbol}/{currency}: {e}")
            raise UpstreamFailure() from e
        if not isinstance(data, dict):
            logger.warning(f"Unexpected CoinGecko payload type {type(data).__name__}")
            raise UpstreamFailure()

        # data example: {"bitcoin": {"usd": 42350.12, "last_updated_at": 1700000000}}
        item = data.get(asset_id)
        if not isinstance(item, dict):
            logger.warning(f"No CoinGecko entry for id {asset_id!r} ({symbol})")
            raise PriceUnavailable()

        price = _parse_price(item.get(vs_currency))
        if price is None:
            logger.warning(
                f"No usable {vs_currency} price for {asset_id!r}: {item.get(vs_currency)!r}"
            )
            raise PriceUnavailable()

        updated_at = _parse_timestamp(item.get("last_updated_at"))
        if updated_at is None:
            updated_at = int(self._clock())

        return PriceRecord.build(symbol, currency, price, updated_at)
