"""Price source protocol and helpers shared by the token adapters.

Every adapter answers the same question, "what is this token worth right
now?", for one provider, and either returns a ``TokenPriceResult`` whose
price is strictly positive or raises a ``ProviderError`` subclass. The
resolver never needs to know which provider it is talking to.
"""

from __future__ import annotations

import math
from typing import Any, Protocol, runtime_checkable

from market_pulse.core.exceptions import ParseError, PriceValidationError
from market_pulse.core.models import PriceSource, TokenPriceResult


@runtime_checkable
class PriceSourceAdapter(Protocol):
    """One token price provider.

    Parameters
    ----------
    chain : str
        Normalized chain identity ("solana", "ethereum", ...).
    address : str
        Token mint / contract address.
    pair_address : str | None
        Optional pool address hint; adapters that cannot use it echo it
        back in the result.

    Raises
    ------
    ProviderError
        Any reason this provider cannot produce a price for this call.
    """

    source: PriceSource

    async def fetch_price(
        self,
        chain: str,
        address: str,
        pair_address: str | None = None,
    ) -> TokenPriceResult: ...


def parse_price(value: Any) -> float | None:
    """Coerce a provider price (number or decimal string) to a finite float.

    Returns None when the value is absent or not a usable number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def require_price(value: Any, label: str, context: dict[str, Any]) -> float:
    """Parse ``value`` and insist on a strictly positive price.

    Raises
    ------
    ParseError
        ``value`` is present but not a number.
    PriceValidationError
        ``value`` is missing, zero, or negative.
    """
    if value is None:
        raise PriceValidationError(f"{label}: no price", context=context)
    price = parse_price(value)
    if price is None:
        raise ParseError(f"{label}: invalid price {value!r}", context=context)
    if price <= 0:
        raise PriceValidationError(f"{label}: non-positive price {price}", context=context)
    return price


def optional_float(value: Any) -> float:
    """Secondary numeric fields (24h change/volume) default to 0.0."""
    parsed = parse_price(value)
    return parsed if parsed is not None else 0.0
