"""Market data layer (CoinGecko)."""

from .coingecko_client import SYMBOL_TO_COINGECKO_ID, PriceResolver, map_symbol_to_id

__all__ = ["PriceResolver", "SYMBOL_TO_COINGECKO_ID", "map_symbol_to_id"]
