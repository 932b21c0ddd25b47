"""GeckoTerminal price adapter and chain → network mapping."""

from __future__ import annotations

import logging
from typing import Any

from market_pulse.core.config import TokensConfig
from market_pulse.core.exceptions import ParseError, PriceValidationError
from market_pulse.core.http import fetch_json
from market_pulse.core.models import PriceSource, TokenPriceResult, normalize_chain
from market_pulse.tokens.base import require_price

logger = logging.getLogger(__name__)

# Chain identity → GeckoTerminal network slug
GECKO_NETWORKS: dict[str, str] = {
    "solana": "solana",
    "ethereum": "eth",
    "bsc": "bsc",
    "base": "base",
    "arbitrum": "arbitrum",
    "polygon": "polygon_pos",
    "avalanche": "avax",
    "optimism": "optimism",
}


def gecko_network(chain: str) -> str | None:
    """GeckoTerminal network slug for ``chain``, or None if unsupported."""
    return GECKO_NETWORKS.get(normalize_chain(chain))


def _lookup_price(prices: dict[str, Any], address: str) -> Any:
    """Exact key first, then a case-insensitive match (EVM addresses are
    returned lowercased)."""
    if prices.get(address) is not None:
        return prices[address]
    lowered = address.lower()
    for key, value in prices.items():
        if key.lower() == lowered and value is not None:
            return value
    return None


class GeckoTerminalAdapter:
    """Reads the simple token price endpoint for one network.

    Chains missing from ``GECKO_NETWORKS`` fail before any request is made.
    """

    source = PriceSource.GECKO

    def __init__(self, config: TokensConfig | None = None) -> None:
        self._config = config or TokensConfig()

    async def fetch_price(
        self,
        chain: str,
        address: str,
        pair_address: str | None = None,
    ) -> TokenPriceResult:
        network = gecko_network(chain)
        if network is None:
            raise PriceValidationError(
                "Gecko: unsupported chain",
                context={"source": self.source.value, "chain": chain},
            )

        url = f"{self._config.gecko_url}/simple/networks/{network}/token_price/{address}"
        context = {"source": self.source.value, "url": url, "address": address}

        data = await fetch_json(
            url,
            source="Gecko",
            timeout=self._config.price_timeout,
            user_agent=self._config.user_agent,
        )

        if not isinstance(data, dict) or not isinstance(data.get("data"), dict):
            raise ParseError("Gecko: no data", context=context)
        attributes = data["data"].get("attributes")
        if not isinstance(attributes, dict):
            raise ParseError("Gecko: no attributes", context=context)
        prices = attributes.get("token_prices")
        if not isinstance(prices, dict):
            raise ParseError("Gecko: no token_prices", context=context)

        raw_price = _lookup_price(prices, address)
        if raw_price is None:
            raise PriceValidationError("Gecko: token not in results", context=context)

        price = require_price(raw_price, "Gecko", context)
        logger.info("GeckoTerminal price OK for %s on %s: $%s", address, network, price)

        return TokenPriceResult(
            price=price,
            pair_address=pair_address or "",
            source=self.source,
        )
