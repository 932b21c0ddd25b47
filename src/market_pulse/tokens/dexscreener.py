"""DexScreener API access, pair selection, and the DexScreener price adapter.

DexScreener answers per pool ("pair"), not per token, so a token price is
the price of one chosen pair:

1. If the caller knows the pair address, ask for that pair directly.
2. Otherwise, list every pair trading the token, keep those on the
   requested chain, and take the one with the deepest USD liquidity.
"""

from __future__ import annotations

import logging
from typing import Any

from market_pulse.core.config import TokensConfig
from market_pulse.core.exceptions import ParseError, PriceValidationError, ProviderError
from market_pulse.core.http import fetch_json
from market_pulse.core.models import PriceSource, TokenPriceResult, TokenStats, normalize_chain
from market_pulse.tokens.base import optional_float, parse_price, require_price

logger = logging.getLogger(__name__)

_PAIRS_PATH = "/latest/dex/pairs"
_TOKENS_PATH = "/latest/dex/tokens"


def _nested_float(pair: dict, key: str, subkey: str) -> float:
    section = pair.get(key)
    if not isinstance(section, dict):
        return 0.0
    return optional_float(section.get(subkey))


def pair_liquidity(pair: dict) -> float:
    """USD liquidity of a pair; absent liquidity counts as zero."""
    return _nested_float(pair, "liquidity", "usd")


def select_best_pair(pairs: list[dict], chain: str) -> dict | None:
    """Deepest-liquidity pair on ``chain``.

    Chain comparison is case-insensitive and ties go to the pair listed
    last. If no pair is on the requested chain, the first pair overall is
    used; None only for an empty list.
    """
    wanted = normalize_chain(chain)
    on_chain = [
        p for p in pairs
        if isinstance(p.get("chainId"), str) and p["chainId"].lower() == wanted
    ]
    if on_chain:
        # max() keeps the first of equal elements, so scan from the end
        return max(reversed(on_chain), key=pair_liquidity)
    return pairs[0] if pairs else None


def pair_to_stats(pair: dict) -> TokenStats:
    """Best-effort stats for a pair; an unusable price becomes 0.0."""
    price = parse_price(pair.get("priceUsd"))
    return TokenStats(
        price=price if price is not None and price > 0 else 0.0,
        change_24h=_nested_float(pair, "priceChange", "h24"),
        volume_24h=_nested_float(pair, "volume", "h24"),
        pair_address=pair.get("pairAddress") or "",
        source=PriceSource.DEXSCREENER,
    )


def pair_to_price(pair: dict, context: dict[str, Any]) -> TokenPriceResult:
    """Strict variant of ``pair_to_stats``: the price must be positive."""
    price = require_price(pair.get("priceUsd"), "DexScreener", context)
    return TokenPriceResult(
        price=price,
        change_24h=_nested_float(pair, "priceChange", "h24"),
        volume_24h=_nested_float(pair, "volume", "h24"),
        pair_address=pair.get("pairAddress") or "",
        source=PriceSource.DEXSCREENER,
    )


class DexScreenerAPI:
    """Thin wrapper over the two DexScreener endpoints.

    Parameters
    ----------
    config : TokensConfig
        Base URL and user agent.
    timeout : float
        Per-request timeout; price lookups and stats use different values.
    """

    def __init__(self, config: TokensConfig, timeout: float) -> None:
        self._config = config
        self._timeout = timeout

    async def _get(self, url: str) -> dict:
        data = await fetch_json(
            url,
            source="DexScreener",
            timeout=self._timeout,
            user_agent=self._config.user_agent,
        )
        if not isinstance(data, dict):
            raise ParseError("DexScreener parse: expected an object", context={"url": url})
        return data

    async def get_pair(self, chain: str, pair_address: str) -> dict:
        """Fetch one pair. Accepts both ``{"pairs": [...]}`` and ``{"pair": {...}}``."""
        url = f"{self._config.dexscreener_url}{_PAIRS_PATH}/{chain}/{pair_address}"
        data = await self._get(url)

        pairs = data.get("pairs")
        if isinstance(pairs, list) and pairs and isinstance(pairs[0], dict):
            return pairs[0]
        if isinstance(data.get("pair"), dict):
            return data["pair"]
        raise PriceValidationError(
            "DexScreener: pair not found",
            context={"source": "dexscreener", "url": url, "pair_address": pair_address},
        )

    async def get_token_pairs(self, address: str) -> list[dict]:
        """Every pair trading ``address`` across all chains (possibly empty)."""
        url = f"{self._config.dexscreener_url}{_TOKENS_PATH}/{address}"
        data = await self._get(url)

        pairs = data.get("pairs")
        if not isinstance(pairs, list):
            raise PriceValidationError(
                "DexScreener: no pairs",
                context={"source": "dexscreener", "url": url, "address": address},
            )
        return [p for p in pairs if isinstance(p, dict)]


class DexScreenerAdapter:
    """Price adapter using DexScreener's pair-then-token strategy.

    A failure on the pair endpoint is not fatal; the token endpoint is
    always the second chance.
    """

    source = PriceSource.DEXSCREENER

    def __init__(self, config: TokensConfig | None = None) -> None:
        self._config = config or TokensConfig()
        self._api = DexScreenerAPI(self._config, timeout=self._config.price_timeout)

    async def fetch_price(
        self,
        chain: str,
        address: str,
        pair_address: str | None = None,
    ) -> TokenPriceResult:
        context = {"source": self.source.value, "chain": chain, "address": address}

        if pair_address:
            try:
                pair = await self._api.get_pair(chain, pair_address)
                result = pair_to_price(pair, context)
            except ProviderError as e:
                logger.debug("DexScreener pair lookup failed for %s: %s", pair_address, e)
            else:
                logger.info("DexScreener price OK for %s (pair): $%s", address, result.price)
                return result

        pairs = await self._api.get_token_pairs(address)
        best = select_best_pair(pairs, chain)
        if best is None:
            raise PriceValidationError("DexScreener: no suitable pair", context=context)

        result = pair_to_price(best, context)
        logger.info("DexScreener price OK for %s: $%s", address, result.price)
        return result
