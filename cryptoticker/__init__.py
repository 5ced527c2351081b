"""cryptoticker: cached cryptocurrency prices for embeddable widgets."""

from .cache import MemoryCache, PriceCache, RedisCache, cache_key
from .config import Settings, get_settings, validate_settings
from .engine import PriceService, build_service
from .errors import InvalidInput, NetworkFailure, PriceError, PriceUnavailable, UpstreamFailure
from .market import PriceResolver
from .models import PriceRecord, format_price

__all__ = [
    "build_service",
    "cache_key",
    "format_price",
    "get_settings",
    "validate_settings",
    "InvalidInput",
    "MemoryCache",
    "NetworkFailure",
    "PriceCache",
    "PriceError",
    "PriceRecord",
    "PriceResolver",
    "PriceService",
    "PriceUnavailable",
    "RedisCache",
    "Settings",
    "UpstreamFailure",
]
