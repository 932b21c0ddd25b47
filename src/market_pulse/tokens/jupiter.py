"""Jupiter price adapter: Solana mints via the Lite price API v3."""

from __future__ import annotations

import logging

from market_pulse.core.config import TokensConfig
from market_pulse.core.exceptions import ParseError, PriceValidationError
from market_pulse.core.http import fetch_json
from market_pulse.core.models import PriceSource, TokenPriceResult
from market_pulse.tokens.base import optional_float, require_price

logger = logging.getLogger(__name__)

_PRICE_PATH = "/price/v3"


class JupiterAdapter:
    """Looks up a single mint on Jupiter's price endpoint.

    The response is a top-level map keyed by mint with ``usdPrice`` and
    ``priceChange24h`` fields; there is no ``data`` wrapper. Jupiter has no
    notion of pools, so the caller's pair address is echoed back.
    """

    source = PriceSource.JUPITER

    def __init__(self, config: TokensConfig | None = None) -> None:
        self._config = config or TokensConfig()

    async def fetch_price(
        self,
        chain: str,
        address: str,
        pair_address: str | None = None,
    ) -> TokenPriceResult:
        url = f"{self._config.jupiter_url}{_PRICE_PATH}"
        context = {"source": self.source.value, "url": url, "address": address}

        data = await fetch_json(
            url,
            source="Jupiter",
            timeout=self._config.price_timeout,
            user_agent=self._config.user_agent,
            params={"ids": address},
        )
        if not isinstance(data, dict):
            raise ParseError("Jupiter parse: expected an object keyed by mint", context=context)

        token = data.get(address)
        if not isinstance(token, dict):
            raise PriceValidationError("Jupiter: token not found", context=context)

        price = require_price(token.get("usdPrice"), "Jupiter", context)
        change_24h = optional_float(token.get("priceChange24h"))
        logger.info("Jupiter price OK for %s: $%s (24h: %.2f%%)", address, price, change_24h)

        return TokenPriceResult(
            price=price,
            change_24h=change_24h,
            volume_24h=0.0,
            pair_address=pair_address or "",
            source=self.source,
        )
