"""Pool candles for on-chain tokens from GeckoTerminal's OHLCV endpoint."""

from __future__ import annotations

import logging
from typing import Any

from market_pulse.core.config import TokensConfig
from market_pulse.core.exceptions import ParseError, PriceValidationError
from market_pulse.core.http import fetch_json
from market_pulse.core.models import Candle, normalize_chain
from market_pulse.tokens.dexscreener import DexScreenerAPI
from market_pulse.tokens.gecko import gecko_network

logger = logging.getLogger(__name__)

# Chart timeframe → (GeckoTerminal timeframe, aggregate). Timeframes without
# a native equivalent map to the nearest finer one.
TIMEFRAMES: dict[str, tuple[str, int]] = {
    "1m": ("minute", 1),
    "3m": ("minute", 1),
    "5m": ("minute", 5),
    "15m": ("minute", 15),
    "30m": ("minute", 15),
    "1h": ("hour", 1),
    "4h": ("hour", 4),
    "1d": ("day", 1),
    "1w": ("day", 1),
    "1M": ("day", 1),
}


def _row_to_candle(row: Any) -> Candle | None:
    """``[ts, open, high, low, close, volume]`` → Candle; None if incomplete."""
    if not isinstance(row, list | tuple) or len(row) < 5:
        return None
    ts, o, h, lo, c = row[:5]
    if any(x is None for x in (ts, o, h, lo, c)):
        return None
    v = row[5] if len(row) > 5 and row[5] is not None else 0
    try:
        return Candle(
            time=int(ts) * 1000,
            open=float(o),
            high=float(h),
            low=float(lo),
            close=float(c),
            volume=max(int(float(v)), 0),
        )
    except (TypeError, ValueError):
        return None


class PoolCandleFetcher:
    """Fetches OHLCV candles for a token's liquidity pool.

    When no pool address is known, one is discovered on DexScreener: the
    first pair on the requested chain, or else the first pair overall.
    """

    def __init__(self, config: TokensConfig | None = None) -> None:
        self._config = config or TokensConfig()
        self._dexscreener = DexScreenerAPI(self._config, timeout=self._config.stats_timeout)

    async def discover_pool(self, chain: str, address: str) -> str:
        """Pool address to chart for ``address``."""
        pairs = await self._dexscreener.get_token_pairs(address)
        wanted = normalize_chain(chain)
        pair = next(
            (p for p in pairs if str(p.get("chainId", "")).lower() == wanted),
            pairs[0] if pairs else None,
        )
        if pair is None or not pair.get("pairAddress"):
            raise PriceValidationError(
                "Could not find pool address for token",
                context={"source": "dexscreener", "chain": chain, "address": address},
            )
        return pair["pairAddress"]

    async def fetch_candles(
        self,
        chain: str,
        address: str,
        timeframe: str = "1h",
        pool_address: str | None = None,
    ) -> list[Candle]:
        """Candles for the token's pool, oldest first.

        Raises
        ------
        PriceValidationError
            Unsupported chain or timeframe, or no pool could be found.
        ProviderError
            Any request failure.
        """
        chain = normalize_chain(chain)
        network = gecko_network(chain)
        if network is None:
            raise PriceValidationError(
                f"Unsupported network for charts: {chain}",
                context={"source": "gecko", "chain": chain},
            )
        if timeframe not in TIMEFRAMES:
            raise PriceValidationError(
                f"Unsupported timeframe: {timeframe!r}",
                context={"source": "gecko", "timeframe": timeframe},
            )

        pool = pool_address or await self.discover_pool(chain, address)
        gecko_tf, aggregate = TIMEFRAMES[timeframe]

        url = f"{self._config.gecko_url}/networks/{network}/pools/{pool}/ohlcv/{gecko_tf}"
        data = await fetch_json(
            url,
            source="GeckoTerminal",
            timeout=self._config.stats_timeout,
            user_agent=self._config.user_agent,
            params={"aggregate": str(aggregate), "limit": str(self._config.ohlcv_limit)},
        )

        try:
            rows = data["data"]["attributes"]["ohlcv_list"]
        except (KeyError, TypeError) as e:
            raise ParseError(
                "GeckoTerminal parse: missing ohlcv_list",
                context={"source": "gecko", "url": url},
            ) from e
        if not isinstance(rows, list):
            raise ParseError(
                "GeckoTerminal parse: ohlcv_list is not a list",
                context={"source": "gecko", "url": url},
            )

        candles = [c for c in (_row_to_candle(r) for r in rows) if c is not None]
        candles.sort(key=lambda c: c.time)
        logger.info("Loaded %d candles for pool %s from GeckoTerminal", len(candles), pool)
        return candles
