"""FastAPI application serving embeddable price widgets."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..engine import PriceService, build_service
from ..security import create_nonce, verify_nonce
from ..widgets import (
    DEFAULT_REFRESH_SECONDS,
    WidgetInstance,
    fetch_price_payload,
    render_price_tag,
    render_widget,
)

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"
FETCH_PRICE_PATH = "/api/price"

router = APIRouter()


class FetchPriceRequest(BaseModel):
    symbol: str = ""
    currency: str = ""
    nonce: str = ""


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _service(request: Request) -> PriceService:
    return request.app.state.price_service


@router.get("/widgets/price", response_class=HTMLResponse)
def price_tag(
    request: Request,
    symbol: str = "BTC",
    currency: str = "",
    refresh: str = str(DEFAULT_REFRESH_SECONDS),
):
    """Server-rendered price tag, like the [crypto_price] shortcode."""
    settings = _settings(request)
    return render_price_tag(
        _service(request),
        settings,
        symbol=symbol,
        currency=currency or None,
        refresh_seconds=refresh,
        nonce=create_nonce(settings.nonce_secret),
        endpoint=FETCH_PRICE_PATH,
    )


@router.get("/widgets/sidebar", response_class=HTMLResponse)
def sidebar_widget(
    request: Request,
    title: str = "",
    symbol: str = "BTC",
    currency: str = "",
    refresh: str = str(DEFAULT_REFRESH_SECONDS),
):
    """Sidebar widget: optional title plus a price tag."""
    settings = _settings(request)
    instance = WidgetInstance(title=title, symbol=symbol, currency=currency, refresh=refresh)
    return render_widget(
        _service(request),
        settings,
        instance,
        nonce=create_nonce(settings.nonce_secret),
        endpoint=FETCH_PRICE_PATH,
    )


@router.post(FETCH_PRICE_PATH)
def fetch_price(request: Request, body: FetchPriceRequest):
    """Asynchronous refresh endpoint used by the client polling script."""
    settings = _settings(request)
    if not verify_nonce(body.nonce, settings.nonce_secret, max_age=settings.nonce_ttl_seconds):
        logger.warning("Rejected price fetch with invalid nonce")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid nonce")
    return fetch_price_payload(_service(request), settings, body.symbol, body.currency)


def create_app(settings: Settings | None = None, service: PriceService | None = None) -> FastAPI:
    """Build the app; settings and the price service are injected via app.state."""
    settings = settings or get_settings()
    app = FastAPI(
        title="cryptoticker",
        description="Cached cryptocurrency price widgets",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.price_service = service or build_service(settings)

    app.include_router(router, tags=["widgets"])
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    return app
