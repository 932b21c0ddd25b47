"""FastAPI route definitions for the market-pulse API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

import market_pulse
from market_pulse.api.deps import get_equities, get_pool_candles, get_prices, get_stats
from market_pulse.api.schemas import ErrorResponse, HealthResponse, PoolCandlesResponse
from market_pulse.core.models import (
    EquityQuote,
    PriceSource,
    StockChart,
    TokenPriceResult,
    TokenStats,
    normalize_chain,
)
from market_pulse.equities.yahoo import YahooChartClient
from market_pulse.tokens.gecko import gecko_network
from market_pulse.tokens.ohlcv import TIMEFRAMES, PoolCandleFetcher
from market_pulse.tokens.resolver import TokenPriceResolver
from market_pulse.tokens.stats import StatsResolver

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    }
)


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe; makes no outbound calls."""
    return HealthResponse(
        status="ok",
        version=market_pulse.__version__,
        price_sources=[s.value for s in PriceSource],
    )


# -- Equities --


@router.get("/stocks/{symbol}/quote", response_model=EquityQuote)
async def get_stock_quote(
    symbol: str,
    equities: YahooChartClient = Depends(get_equities),
):
    """Session-aware quote for an equity symbol."""
    return await equities.fetch_quote(symbol.upper())


@router.get("/stocks/{symbol}/candles", response_model=StockChart)
async def get_stock_candles(
    symbol: str,
    interval: str = Query("1d", pattern=r"^\d+(m|h|d|wk|mo)$"),
    range_: str = Query("1mo", alias="range", pattern=r"^(\d+(d|mo|y)|ytd|max)$"),
    equities: YahooChartClient = Depends(get_equities),
):
    """Candle history plus day summary for an equity symbol."""
    return await equities.fetch_chart(symbol.upper(), interval, range_)


# -- Tokens --


@router.get("/tokens/{chain}/{address}/price", response_model=TokenPriceResult)
async def get_token_price(
    chain: str,
    address: str,
    pair_address: str | None = Query(None),
    preferred_source: str | None = Query(None, pattern="^(gecko|dexscreener)$"),
    prices: TokenPriceResolver = Depends(get_prices),
):
    """Current token price from the first provider that can supply one."""
    return await prices.resolve(
        normalize_chain(chain),
        address,
        pair_address=pair_address,
        preferred_source=preferred_source,
    )


@router.get("/tokens/{chain}/{address}/stats", response_model=TokenStats)
async def get_token_stats(
    chain: str,
    address: str,
    pair_address: str | None = Query(None),
    stats: StatsResolver = Depends(get_stats),
):
    """Best-effort 24h change and volume for a token."""
    return await stats.resolve_stats(normalize_chain(chain), address, pair_address=pair_address)


@router.get("/tokens/{chain}/{address}/candles", response_model=PoolCandlesResponse)
async def get_token_candles(
    chain: str,
    address: str,
    timeframe: str = Query("1h"),
    pool_address: str | None = Query(None),
    pool_candles: PoolCandleFetcher = Depends(get_pool_candles),
):
    """OHLCV candles for the token's liquidity pool."""
    if timeframe not in TIMEFRAMES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported timeframe {timeframe!r}; expected one of {sorted(TIMEFRAMES)}",
        )

    chain = normalize_chain(chain)
    if gecko_network(chain) is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported network for charts: {chain}",
        )

    candles = await pool_candles.fetch_candles(
        chain, address, timeframe=timeframe, pool_address=pool_address
    )
    return PoolCandlesResponse(
        chain=chain,
        address=address,
        timeframe=timeframe,
        candles=candles,
    )
