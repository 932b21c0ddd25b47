"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse

from market_pulse.core.config import PulseConfig
from market_pulse.equities.yahoo import YahooChartClient
from market_pulse.tokens.ohlcv import PoolCandleFetcher
from market_pulse.tokens.resolver import TokenPriceResolver
from market_pulse.tokens.stats import StatsResolver


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan.

    The services hold configuration only; each request opens its own
    HTTP clients.
    """

    config: PulseConfig
    equities: YahooChartClient
    prices: TokenPriceResolver
    stats: StatsResolver
    pool_candles: PoolCandleFetcher

    @classmethod
    def from_config(cls, config: PulseConfig) -> AppState:
        return cls(
            config=config,
            equities=YahooChartClient(config.yahoo),
            prices=TokenPriceResolver(config.tokens),
            stats=StatsResolver(config.tokens),
            pool_candles=PoolCandleFetcher(config.tokens),
        )


def get_equities(request: Request) -> YahooChartClient:
    return request.app.state.app_state.equities


def get_prices(request: Request) -> TokenPriceResolver:
    return request.app.state.app_state.prices


def get_stats(request: Request) -> StatsResolver:
    return request.app.state.app_state.stats


def get_pool_candles(request: Request) -> PoolCandleFetcher:
    return request.app.state.app_state.pool_candles


EXEMPT_PATHS = {"/api/health"}


async def api_key_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Middleware: validate X-API-Key header when authentication is enabled."""
    if request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    config = request.app.state.app_state.config
    if config.api.api_key:
        api_key = request.headers.get("X-API-Key")
        if api_key != config.api.api_key:
            return JSONResponse(
                status_code=401,
                content={"error": "Unauthorized", "detail": "Invalid or missing API key"},
            )
    return await call_next(request)
