"""Per-session selection of an equity's current price and change."""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from market_pulse.core.models import TradingSession


class PriceSelection(NamedTuple):
    price: float
    change: float
    change_percent: float


def last_candle_close(closes: Sequence[float | None], fallback: float) -> float:
    """Most recent non-null close, scanning backward; ``fallback`` if none."""
    for close in reversed(closes):
        if close is not None:
            return float(close)
    return fallback


def change_percent(change: float, previous_close: float) -> float:
    """Percent change against ``previous_close``; 0 when there is no usable base."""
    if previous_close > 0:
        return change / previous_close * 100
    return 0.0


def select_price(
    session: TradingSession,
    regular_price: float,
    previous_close: float,
    *,
    last_candle_close: float,
    post_price: float | None = None,
    pre_price: float | None = None,
    post_change: float | None = None,
    pre_change: float | None = None,
) -> PriceSelection:
    """Pick the economically correct price for ``session``.

    Extended-hours sessions prefer the provider's extended-hours fields and
    fall back to the last traded candle. A closed market reports the regular
    session close: overnight prices are not available from the provider and
    are not approximated.
    """
    if session is TradingSession.POST:
        price = post_price if post_price is not None else last_candle_close
        change = post_change if post_change is not None else price - previous_close
    elif session is TradingSession.PRE:
        price = pre_price if pre_price is not None else last_candle_close
        change = pre_change if pre_change is not None else price - previous_close
    else:
        # CLOSED and REGULAR both report the regular market price
        price = regular_price
        change = regular_price - previous_close

    return PriceSelection(
        price=price,
        change=change,
        change_percent=change_percent(change, previous_close),
    )
