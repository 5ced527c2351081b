"""Orchestrator: normalized inputs -> cache -> CoinGecko resolver."""

from __future__ import annotations

import logging
from functools import partial

import requests

from .cache import PriceCache, build_cache_backend
from .config import Settings
from .errors import InvalidInput
from .market.coingecko_client import PriceResolver
from .models import PriceRecord

logger = logging.getLogger(__name__)


class PriceService:
    """Price lookups for request handlers.

    Construct once with build_service() and hand it to whatever serves
    requests. Settings are passed per call so admin changes apply without
    rebuilding the service.
    """

    def __init__(self, resolver: PriceResolver, cache: PriceCache):
        self.resolver = resolver
        self.cache = cache

    def get_price(self, symbol: str, currency: str | None, settings: Settings) -> PriceRecord:
        """Return the price of ``symbol`` in ``currency`` (or the default currency).

        Raises InvalidInput for a blank symbol, and whatever the resolver raises
        on a cache miss. Failures are never cached.
        """
        symbol = (symbol or "").strip().upper()
        currency = (currency or "").strip().upper() or settings.currency
        if not symbol or not currency:
            raise InvalidInput()

        return self.cache.get_or_fetch(
            symbol,
            currency,
            settings.cache_seconds,
            partial(self.resolver.resolve, symbol, currency),
        )


def build_service(settings: Settings, session: requests.Session | None = None) -> PriceService:
    """Wire a PriceService from settings."""
    resolver = PriceResolver(
        session=session,
        base_url=settings.coingecko_base_url,
        timeout=settings.request_timeout_seconds,
    )
    cache = PriceCache(build_cache_backend(settings))
    logger.info(
        f"Price service ready: default currency {settings.currency}, "
        f"cache {settings.cache_seconds}s"
    )
    return PriceService(resolver, cache)
