"""Equity quotes and candles.

    Yahoo chart JSON → classify_session → select_price → EquityQuote
                     → aggregate_candles → StockChart

- ``classify_session``: which of pre/regular/post/closed applies right now.
- ``select_price``: the single current price and change for that session.
- ``aggregate_candles``: parallel OHLCV arrays → validated ``Candle`` list.
- ``YahooChartClient``: the HTTP side, with an injectable clock.
"""

from market_pulse.equities.candles import aggregate_candles
from market_pulse.equities.selector import (
    PriceSelection,
    change_percent,
    last_candle_close,
    select_price,
)
from market_pulse.equities.session import classify_session, parse_calendar
from market_pulse.equities.yahoo import YahooChartClient

__all__ = [
    "PriceSelection",
    "YahooChartClient",
    "aggregate_candles",
    "change_percent",
    "classify_session",
    "last_candle_close",
    "parse_calendar",
    "select_price",
]
