"""On-chain token prices, 24h stats, and pool candles.

Architecture
------------
Each provider is an adapter implementing ``PriceSourceAdapter``:

    provider JSON → adapter.fetch_price() → TokenPriceResult | ProviderError

``TokenPriceResolver`` walks an ordered list of adapters chosen from the
chain and the caller's preference and returns the first success.
``StatsResolver`` and ``PoolCandleFetcher`` are single-provider helpers.

Adding a new price source:
1. Write a class with a ``source`` and an async ``fetch_price``.
2. Add it to ``default_adapters`` and to ``resolution_plan``.
"""

from market_pulse.tokens.base import PriceSourceAdapter, parse_price
from market_pulse.tokens.dexscreener import DexScreenerAdapter, DexScreenerAPI, select_best_pair
from market_pulse.tokens.gecko import GECKO_NETWORKS, GeckoTerminalAdapter, gecko_network
from market_pulse.tokens.jupiter import JupiterAdapter
from market_pulse.tokens.ohlcv import TIMEFRAMES, PoolCandleFetcher
from market_pulse.tokens.raydium import RaydiumAdapter
from market_pulse.tokens.resolver import TokenPriceResolver, default_adapters, resolution_plan
from market_pulse.tokens.stats import StatsResolver

__all__ = [
    # Protocol
    "PriceSourceAdapter",
    "parse_price",
    # Adapters
    "JupiterAdapter",
    "RaydiumAdapter",
    "GeckoTerminalAdapter",
    "DexScreenerAdapter",
    "DexScreenerAPI",
    "GECKO_NETWORKS",
    "gecko_network",
    "select_best_pair",
    # Orchestration
    "TokenPriceResolver",
    "default_adapters",
    "resolution_plan",
    "StatsResolver",
    "PoolCandleFetcher",
    "TIMEFRAMES",
]
