"""Tests for chain-aware token price resolution."""

import httpx
import pytest
import respx

from market_pulse.core.exceptions import PriceValidationError, ResolutionError, TransportError
from market_pulse.core.models import PriceSource, TokenPriceResult
from market_pulse.tokens.resolver import TokenPriceResolver, resolution_plan

MINT = "So11111111111111111111111111111111111111112"


class FakeAdapter:
    """Records calls and returns a fixed price or raises a fixed error."""

    def __init__(self, source, price=None, error=None):
        self.source = source
        self.price = price
        self.error = error
        self.calls = []

    async def fetch_price(self, chain, address, pair_address=None):
        self.calls.append((chain, address, pair_address))
        if self.error is not None:
            raise self.error
        return TokenPriceResult(price=self.price, pair_address=pair_address or "", source=self.source)


class FlakyAdapter(FakeAdapter):
    """Fails the first ``failures`` calls, then returns ``price``."""

    def __init__(self, source, price, failures):
        super().__init__(source, price=price)
        self.failures = failures

    async def fetch_price(self, chain, address, pair_address=None):
        self.error = (
            PriceValidationError(f"{self.source.value}: not yet")
            if len(self.calls) < self.failures
            else None
        )
        return await super().fetch_price(chain, address, pair_address)


def _adapters(**behaviour):
    """Build one FakeAdapter per source; unnamed sources fail."""
    adapters = {}
    for source in PriceSource:
        price = behaviour.get(source.value)
        error = None if price else PriceValidationError(f"{source.value}: nothing")
        adapters[source] = FakeAdapter(source, price=price, error=error)
    return adapters


class TestResolutionPlan:
    def test_solana_default(self):
        assert resolution_plan("solana") == [
            PriceSource.JUPITER,
            PriceSource.RAYDIUM,
            PriceSource.GECKO,
            PriceSource.DEXSCREENER,
        ]

    def test_solana_preference_never_precedes_jupiter(self):
        assert resolution_plan("Solana", "dexscreener") == [
            PriceSource.JUPITER,
            PriceSource.RAYDIUM,
            PriceSource.DEXSCREENER,
            PriceSource.GECKO,
            PriceSource.DEXSCREENER,
        ]

    def test_evm_default(self):
        assert resolution_plan("ethereum") == [PriceSource.GECKO, PriceSource.DEXSCREENER]

    def test_preferred_dexscreener_is_also_terminal(self):
        assert resolution_plan("base", "DexScreener") == [
            PriceSource.DEXSCREENER,
            PriceSource.GECKO,
            PriceSource.DEXSCREENER,
        ]

    def test_preferred_gecko_not_repeated(self):
        assert resolution_plan("base", "gecko") == [PriceSource.GECKO, PriceSource.DEXSCREENER]

    @pytest.mark.parametrize("preferred", ["jupiter", "raydium", "coingecko", ""])
    def test_non_preferable_sources_ignored(self, preferred):
        assert resolution_plan("ethereum", preferred) == [PriceSource.GECKO, PriceSource.DEXSCREENER]

    def test_unmapped_chain_still_has_plan(self):
        assert resolution_plan("tron") == [PriceSource.GECKO, PriceSource.DEXSCREENER]


class TestTokenPriceResolver:
    async def test_first_success_wins(self, tokens_config):
        adapters = _adapters(jupiter=1.0, raydium=2.0)
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        result = await resolver.resolve("solana", MINT)

        assert result.source is PriceSource.JUPITER
        assert result.price == 1.0
        assert adapters[PriceSource.RAYDIUM].calls == []

    async def test_falls_through_in_order(self, tokens_config):
        adapters = _adapters(gecko=3.0, dexscreener=4.0)
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        result = await resolver.resolve("solana", MINT, pair_address="POOL")

        assert result.source is PriceSource.GECKO
        assert len(adapters[PriceSource.JUPITER].calls) == 1
        assert len(adapters[PriceSource.RAYDIUM].calls) == 1
        assert adapters[PriceSource.DEXSCREENER].calls == []
        assert adapters[PriceSource.GECKO].calls == [("solana", MINT, "POOL")]

    async def test_preference_honoured_after_solana_sources(self, tokens_config):
        adapters = _adapters(gecko=3.0, dexscreener=4.0)
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        result = await resolver.resolve("solana", MINT, preferred_source="dexscreener")

        assert result.source is PriceSource.DEXSCREENER
        assert len(adapters[PriceSource.JUPITER].calls) == 1
        assert len(adapters[PriceSource.RAYDIUM].calls) == 1
        assert adapters[PriceSource.GECKO].calls == []

    async def test_evm_never_calls_solana_sources(self, tokens_config):
        adapters = _adapters(jupiter=1.0, raydium=1.0, dexscreener=4.0)
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        result = await resolver.resolve("Ethereum", "0xabc")

        assert result.source is PriceSource.DEXSCREENER
        assert adapters[PriceSource.JUPITER].calls == []
        assert adapters[PriceSource.RAYDIUM].calls == []
        assert adapters[PriceSource.GECKO].calls == [("ethereum", "0xabc", None)]

    async def test_preferred_dexscreener_retried_after_gecko(self, tokens_config):
        adapters = _adapters()
        adapters[PriceSource.DEXSCREENER] = FlakyAdapter(
            PriceSource.DEXSCREENER, price=2.5, failures=1
        )
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        result = await resolver.resolve("ethereum", "0xabc", preferred_source="dexscreener")

        assert result.source is PriceSource.DEXSCREENER
        assert result.price == 2.5
        assert len(adapters[PriceSource.DEXSCREENER].calls) == 2
        assert len(adapters[PriceSource.GECKO].calls) == 1

    async def test_gecko_attempted_once_when_preferred(self, tokens_config):
        adapters = _adapters()
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        with pytest.raises(ResolutionError) as exc_info:
            await resolver.resolve("polygon", "0xabc", preferred_source="gecko")

        assert len(adapters[PriceSource.GECKO].calls) == 1
        assert len(adapters[PriceSource.DEXSCREENER].calls) == 1
        assert [f["source"] for f in exc_info.value.context["failures"]] == ["gecko", "dexscreener"]

    async def test_total_failure_lists_every_attempt(self, tokens_config):
        adapters = _adapters()
        adapters[PriceSource.GECKO].error = TransportError("Gecko request timed out")
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        with pytest.raises(ResolutionError, match="No price available for solana") as exc_info:
            await resolver.resolve("solana", MINT)

        failures = exc_info.value.context["failures"]
        assert [f["source"] for f in failures] == ["jupiter", "raydium", "gecko", "dexscreener"]
        assert failures[2]["reason"] == "Gecko request timed out"

    async def test_failures_are_logged(self, tokens_config, caplog):
        adapters = _adapters(dexscreener=4.0)
        resolver = TokenPriceResolver(tokens_config, adapters=adapters)

        with caplog.at_level("WARNING", logger="market_pulse.tokens.resolver"):
            await resolver.resolve("bsc", "0xabc")

        assert "gecko price failed for bsc:0xabc" in caplog.text


class TestResolverOverHttp:
    @respx.mock(assert_all_called=False)
    async def test_raydium_after_jupiter_miss(self, respx_mock, tokens_config):
        respx_mock.get(host="jup.test", path="/price/v3").mock(
            return_value=httpx.Response(200, json={})
        )
        respx_mock.get(host="raydium.test", path="/mint/price").mock(
            return_value=httpx.Response(200, json={"data": {MINT: "150.5"}})
        )
        gecko = respx_mock.get(host="gecko.test")

        result = await TokenPriceResolver(tokens_config).resolve("solana", MINT)

        assert result.source is PriceSource.RAYDIUM
        assert result.price == 150.5
        assert not gecko.called

    @respx.mock
    async def test_unmapped_chain_reaches_dexscreener(self, tokens_config, make_pair):
        respx.get("https://dex.test/latest/dex/tokens/T123").mock(
            return_value=httpx.Response(200, json={"pairs": [make_pair(chain="tron", price="0.12")]})
        )

        result = await TokenPriceResolver(tokens_config).resolve("tron", "T123")

        assert result.source is PriceSource.DEXSCREENER
        assert result.price == 0.12

    @respx.mock(assert_all_called=False)
    async def test_jupiter_hit_leaves_raydium_untouched(self, respx_mock, tokens_config):
        respx_mock.get(host="jup.test", path="/price/v3").mock(
            return_value=httpx.Response(200, json={MINT: {"usdPrice": 1.23, "priceChange24h": 5.0}})
        )
        raydium = respx_mock.get(host="raydium.test")

        result = await TokenPriceResolver(tokens_config).resolve("solana", MINT)

        assert result.source is PriceSource.JUPITER
        assert result.price == 1.23
        assert result.change_24h == 5.0
        assert not raydium.called
