"""Chain-aware token price resolution with deterministic fallback.

Providers are tried strictly one after another and the first validated
success wins:

1. Solana: Jupiter, then Raydium. These are always tried first, whatever
   the caller prefers, since they are the only real-time Solana sources.
2. The caller's preferred source, if it is ``gecko`` or ``dexscreener``.
3. GeckoTerminal, unless it was the preferred source.
4. DexScreener, the terminal fallback. It runs even when it was already
   tried as the preferred source, so a preferred DexScreener can be
   attempted twice in one call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from market_pulse.core.config import TokensConfig
from market_pulse.core.exceptions import ProviderError, ResolutionError
from market_pulse.core.models import PriceSource, TokenPriceResult, normalize_chain
from market_pulse.tokens.base import PriceSourceAdapter
from market_pulse.tokens.dexscreener import DexScreenerAdapter
from market_pulse.tokens.gecko import GeckoTerminalAdapter
from market_pulse.tokens.jupiter import JupiterAdapter
from market_pulse.tokens.raydium import RaydiumAdapter

logger = logging.getLogger(__name__)

_SOLANA = "solana"
_SOLANA_SOURCES = (PriceSource.JUPITER, PriceSource.RAYDIUM)
_PREFERABLE_SOURCES = frozenset({PriceSource.GECKO, PriceSource.DEXSCREENER})


def default_adapters(config: TokensConfig) -> dict[PriceSource, PriceSourceAdapter]:
    """One adapter per provider, all sharing ``config``."""
    return {
        PriceSource.JUPITER: JupiterAdapter(config),
        PriceSource.RAYDIUM: RaydiumAdapter(config),
        PriceSource.GECKO: GeckoTerminalAdapter(config),
        PriceSource.DEXSCREENER: DexScreenerAdapter(config),
    }


def resolution_plan(chain: str, preferred_source: str | None = None) -> list[PriceSource]:
    """Ordered providers to try for ``chain``.

    Unknown or non-preferable ``preferred_source`` values are ignored.
    DexScreener always closes the plan, even if it also appears earlier.
    """
    plan: list[PriceSource] = []
    if normalize_chain(chain) == _SOLANA:
        plan.extend(_SOLANA_SOURCES)

    if preferred_source:
        try:
            preferred = PriceSource(preferred_source.strip().lower())
        except ValueError:
            logger.debug("Ignoring unknown preferred source %r", preferred_source)
        else:
            if preferred in _PREFERABLE_SOURCES:
                plan.append(preferred)

    if PriceSource.GECKO not in plan:
        plan.append(PriceSource.GECKO)
    plan.append(PriceSource.DEXSCREENER)
    return plan


class TokenPriceResolver:
    """Resolves a token price from the first provider that can supply one.

    Parameters
    ----------
    config : TokensConfig | None
        Provider endpoints and timeouts. Defaults are used if None.
    adapters : Mapping[PriceSource, PriceSourceAdapter] | None
        Override the provider implementations (useful for testing).
    """

    def __init__(
        self,
        config: TokensConfig | None = None,
        adapters: Mapping[PriceSource, PriceSourceAdapter] | None = None,
    ) -> None:
        self._config = config or TokensConfig()
        self._adapters = dict(adapters) if adapters is not None else default_adapters(self._config)

    async def resolve(
        self,
        chain: str,
        address: str,
        pair_address: str | None = None,
        preferred_source: str | None = None,
    ) -> TokenPriceResult:
        """Return the first validated price along the resolution plan.

        Raises
        ------
        ResolutionError
            Every applicable provider failed. ``context["failures"]`` lists
            each attempt's source and reason in order.
        """
        chain = normalize_chain(chain)
        failures: list[dict[str, str]] = []

        for source in resolution_plan(chain, preferred_source):
            adapter = self._adapters.get(source)
            if adapter is None:
                continue
            try:
                return await adapter.fetch_price(chain, address, pair_address)
            except ProviderError as e:
                logger.warning("%s price failed for %s:%s: %s", source.value, chain, address, e)
                failures.append({"source": source.value, "reason": str(e)})

        summary = "; ".join(f"{f['source']}: {f['reason']}" for f in failures)
        logger.error("All price sources failed for %s:%s", chain, address)
        raise ResolutionError(
            f"No price available for {chain}:{address} ({summary or 'no sources configured'})",
            context={"chain": chain, "address": address, "failures": failures},
        )
