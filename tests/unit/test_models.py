"""Tests for market_pulse.core.models."""

import pytest
from pydantic import ValidationError

from market_pulse.core.models import (
    Candle,
    PriceSource,
    TokenPriceResult,
    TokenRef,
    TokenStats,
    TradingPeriod,
    TradingSession,
    normalize_chain,
)


class TestTradingPeriod:
    def test_start_inclusive_end_exclusive(self):
        period = TradingPeriod(start=100, end=200)
        assert period.contains(100)
        assert period.contains(199.5)
        assert not period.contains(200)
        assert not period.contains(99)


class TestCandle:
    def test_volume_defaults_to_zero(self):
        c = Candle(time=1_000, open=1.0, high=2.0, low=0.5, close=1.5)
        assert c.volume == 0

    def test_negative_volume_rejected(self):
        with pytest.raises(ValueError, match="volume must be >= 0"):
            Candle(time=1_000, open=1.0, high=2.0, low=0.5, close=1.5, volume=-1)

    def test_frozen(self):
        c = Candle(time=1_000, open=1.0, high=2.0, low=0.5, close=1.5)
        with pytest.raises(ValidationError):
            c.close = 3.0


class TestTokenResults:
    def test_stats_allow_zero_price(self):
        stats = TokenStats(price=0.0, source=PriceSource.DEXSCREENER)
        assert stats.price == 0.0
        assert stats.pair_address == ""
        assert stats.change_24h == 0.0

    def test_price_result_rejects_zero(self):
        with pytest.raises(ValidationError):
            TokenPriceResult(price=0.0, source=PriceSource.GECKO)

    def test_price_result_is_stats(self):
        result = TokenPriceResult(price=1.5, source=PriceSource.JUPITER)
        assert isinstance(result, TokenStats)

    def test_source_serializes_as_lowercase_name(self):
        result = TokenPriceResult(price=1.5, source=PriceSource.RAYDIUM)
        assert result.model_dump(mode="json")["source"] == "raydium"


class TestTokenRef:
    def test_chain_normalized(self):
        ref = TokenRef(chain=" Solana ", address="So11111111111111111111111111111111111111112")
        assert ref.chain == "solana"

    def test_empty_address_rejected(self):
        with pytest.raises(ValidationError, match="address must not be empty"):
            TokenRef(chain="ethereum", address="  ")

    def test_from_symbol(self):
        ref = TokenRef.from_symbol("dex:Base:0xabc")
        assert ref.chain == "base"
        assert ref.address == "0xabc"
        assert ref.symbol == "dex:base:0xabc"

    @pytest.mark.parametrize("symbol", ["AAPL", "dex:solana", "cex:solana:abc", "dex:a:b:c"])
    def test_from_symbol_rejects_other_forms(self, symbol):
        with pytest.raises(ValueError, match="Expected 'dex:<chain>:<address>'"):
            TokenRef.from_symbol(symbol)


def test_normalize_chain():
    assert normalize_chain("  ETHEREUM ") == "ethereum"


def test_session_values():
    assert [s.value for s in TradingSession] == ["pre", "regular", "post", "closed"]
