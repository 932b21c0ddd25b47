"""Raydium price adapter: mint → price-string map from API v3."""

from __future__ import annotations

import logging

from market_pulse.core.config import TokensConfig
from market_pulse.core.exceptions import ParseError, PriceValidationError
from market_pulse.core.http import fetch_json
from market_pulse.core.models import PriceSource, TokenPriceResult
from market_pulse.tokens.base import require_price

logger = logging.getLogger(__name__)

_PRICE_PATH = "/mint/price"


class RaydiumAdapter:
    """Reads ``{"data": {mint: "1.23"}}`` from Raydium's mint price endpoint.

    Raydium reports price only; 24h change and volume are 0.
    """

    source = PriceSource.RAYDIUM

    def __init__(self, config: TokensConfig | None = None) -> None:
        self._config = config or TokensConfig()

    async def fetch_price(
        self,
        chain: str,
        address: str,
        pair_address: str | None = None,
    ) -> TokenPriceResult:
        url = f"{self._config.raydium_url}{_PRICE_PATH}"
        context = {"source": self.source.value, "url": url, "address": address}

        data = await fetch_json(
            url,
            source="Raydium",
            timeout=self._config.price_timeout,
            user_agent=self._config.user_agent,
            params={"mints": address},
        )
        if not isinstance(data, dict):
            raise ParseError("Raydium parse: expected an object", context=context)

        prices = data.get("data")
        if not isinstance(prices, dict):
            raise PriceValidationError("Raydium: no data", context=context)
        if address not in prices:
            raise PriceValidationError("Raydium: token not found", context=context)

        price = require_price(prices[address], "Raydium", context)
        logger.info("Raydium price OK for %s: $%s", address, price)

        return TokenPriceResult(
            price=price,
            pair_address=pair_address or "",
            source=self.source,
        )
