"""24h token statistics from DexScreener."""

from __future__ import annotations

import logging

from market_pulse.core.config import TokensConfig
from market_pulse.core.exceptions import PriceValidationError, ProviderError
from market_pulse.core.models import TokenStats, normalize_chain
from market_pulse.tokens.dexscreener import DexScreenerAPI, pair_to_stats, select_best_pair

logger = logging.getLogger(__name__)


class StatsResolver:
    """Best-effort 24h change/volume for a token.

    Always DexScreener, using the same pair-then-token lookup as the price
    adapter, but the price itself is secondary here: a missing or
    unparseable price is reported as 0.0 instead of failing the call.
    """

    def __init__(self, config: TokensConfig | None = None) -> None:
        self._config = config or TokensConfig()
        self._api = DexScreenerAPI(self._config, timeout=self._config.stats_timeout)

    async def resolve_stats(
        self,
        chain: str,
        address: str,
        pair_address: str | None = None,
    ) -> TokenStats:
        """Fetch 24h stats for ``address`` on ``chain``.

        Raises
        ------
        ProviderError
            The token endpoint failed or returned no pairs at all.
        """
        chain = normalize_chain(chain)

        if pair_address:
            try:
                pair = await self._api.get_pair(chain, pair_address)
            except ProviderError as e:
                logger.debug("Stats pair lookup failed for %s: %s", pair_address, e)
            else:
                return pair_to_stats(pair)

        pairs = await self._api.get_token_pairs(address)
        best = select_best_pair(pairs, chain)
        if best is None:
            raise PriceValidationError(
                "No pair found",
                context={"source": "dexscreener", "chain": chain, "address": address},
            )

        stats = pair_to_stats(best)
        logger.info(
            "Stats %s:%s: 24h %.2f%%, volume %.0f",
            chain,
            address,
            stats.change_24h,
            stats.volume_24h,
        )
        return stats
