"""Signed, time-limited anti-forgery tokens for the fetch endpoint."""

from __future__ import annotations

import hashlib
import hmac
import time

FETCH_PRICE_ACTION = "cpt_fetch_price"


def _sign(secret: str, action: str, issued_at: int) -> str:
    return hmac.new(
        secret.encode(),
        f"{action}:{issued_at}".encode(),
        hashlib.sha256,
    ).hexdigest()


def create_nonce(secret: str, action: str = FETCH_PRICE_ACTION, now: float | None = None) -> str:
    """Create a token of the form ``<issued_at>.<signature>``."""
    issued_at = int(time.time() if now is None else now)
    return f"{issued_at}.{_sign(secret, action, issued_at)}"


def verify_nonce(
    token: str,
    secret: str,
    action: str = FETCH_PRICE_ACTION,
    max_age: int = 43200,
    now: float | None = None,
) -> bool:
    """Check signature and age of a token produced by create_nonce."""
    if not token:
        return False

    parts = token.split(".", 1)
    if len(parts) != 2:
        return False
    issued_raw, signature = parts
    try:
        issued_at = int(issued_raw)
    except ValueError:
        return False

    if not hmac.compare_digest(signature, _sign(secret, action, issued_at)):
        return False

    current = time.time() if now is None else now
    age = current - issued_at
    return 0 <= age <= max_age
