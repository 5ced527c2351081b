"""Failures raised while resolving a price.

Every error is terminal for the current request. Callers show a placeholder
or an error payload; retries happen only through the widget polling interval.
"""

from __future__ import annotations


class PriceError(Exception):
    """Base class for price lookup failures."""

    default_message = "Failed to fetch price"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NetworkFailure(PriceError):
    """Upstream unreachable: timeout, DNS failure, connection reset."""


class UpstreamFailure(PriceError):
    """Upstream answered with a non-200 status or an unparseable body."""


class PriceUnavailable(PriceError):
    """Well-formed payload without the requested asset/currency pair."""

    default_message = "Price not available"


class InvalidInput(PriceError):
    """Symbol or currency missing from the inbound request."""

    default_message = "Missing parameters"
