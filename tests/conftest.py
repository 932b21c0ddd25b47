"""Shared pytest fixtures for market-pulse."""

import pytest

from market_pulse.core.config import PulseConfig, TokensConfig, YahooConfig
from market_pulse.core.models import TradingPeriod, TradingPeriodCalendar

# 2024-01-16 (a Tuesday), US/Eastern trading day expressed in UTC epoch seconds
PRE_START = 1705395600  # 04:00 ET
REGULAR_START = 1705415400  # 09:30 ET
REGULAR_END = 1705438800  # 16:00 ET
POST_END = 1705453200  # 20:00 ET


@pytest.fixture
def calendar() -> TradingPeriodCalendar:
    return TradingPeriodCalendar(
        pre=TradingPeriod(start=PRE_START, end=REGULAR_START),
        regular=TradingPeriod(start=REGULAR_START, end=REGULAR_END),
        post=TradingPeriod(start=REGULAR_END, end=POST_END),
    )


@pytest.fixture
def calendar_json() -> dict:
    """Yahoo ``meta.currentTradingPeriod`` for the same day."""
    return {
        "pre": {"timezone": "EST", "start": PRE_START, "end": REGULAR_START, "gmtoffset": -18000},
        "regular": {"timezone": "EST", "start": REGULAR_START, "end": REGULAR_END, "gmtoffset": -18000},
        "post": {"timezone": "EST", "start": REGULAR_END, "end": POST_END, "gmtoffset": -18000},
    }


@pytest.fixture
def tokens_config() -> TokensConfig:
    return TokensConfig(
        jupiter_url="https://jup.test",
        raydium_url="https://raydium.test",
        gecko_url="https://gecko.test/api/v2",
        dexscreener_url="https://dex.test",
        price_timeout=1.0,
        stats_timeout=1.0,
    )


@pytest.fixture
def yahoo_config() -> YahooConfig:
    return YahooConfig(base_url="https://yahoo.test", timeout=1.0)


@pytest.fixture
def pulse_config(tokens_config, yahoo_config) -> PulseConfig:
    return PulseConfig(yahoo=yahoo_config, tokens=tokens_config)


@pytest.fixture
def chart_response():
    """Factory wrapping a meta block and bar arrays in Yahoo's chart envelope."""

    def _make(meta: dict, timestamps=None, quote=None) -> dict:
        result: dict = {"meta": meta, "indicators": {"quote": [quote or {}]}}
        if timestamps is not None:
            result["timestamp"] = timestamps
        return {"chart": {"result": [result], "error": None}}

    return _make


@pytest.fixture
def make_pair():
    """Factory for DexScreener pair objects."""

    def _make(
        chain: str = "solana",
        pair_address: str = "PAIR1",
        price: str | None = "1.50",
        liquidity: float | None = 1000.0,
        change: float | None = 3.2,
        volume: float | None = 12345.0,
    ) -> dict:
        pair: dict = {"chainId": chain, "pairAddress": pair_address, "priceUsd": price}
        if liquidity is not None:
            pair["liquidity"] = {"usd": liquidity}
        if change is not None:
            pair["priceChange"] = {"h24": change}
        if volume is not None:
            pair["volume"] = {"h24": volume}
        return pair

    return _make
