"""Yahoo Finance equity client: quotes and candles from the chart API.

Uses the unauthenticated ``/v8/finance/chart/`` endpoint via httpx for both
operations: the quote request asks for one day of 1-minute bars including
extended hours, and derives the session-aware price from its ``meta``
block. There is no fallback provider, so every failure propagates.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from market_pulse.core.config import YahooConfig
from market_pulse.core.exceptions import ParseError
from market_pulse.core.http import fetch_json
from market_pulse.core.models import EquityQuote, StockChart
from market_pulse.equities.candles import aggregate_candles
from market_pulse.equities.selector import last_candle_close, select_price
from market_pulse.equities.session import classify_session, parse_calendar

logger = logging.getLogger(__name__)

_CHART_PATH = "/v8/finance/chart"
_SOURCE = "Yahoo Finance"


def _number(value: Any, default: float, field: str) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ParseError(
            f"{_SOURCE} parse: {field} is not numeric: {value!r}",
            context={"source": "yahoo", "field": field},
        ) from e


def _optional_number(value: Any, field: str) -> float | None:
    if value is None:
        return None
    return _number(value, 0.0, field)


class YahooChartClient:
    """Fetches equity quotes and candle history from Yahoo Finance.

    Parameters
    ----------
    config : YahooConfig | None
        Endpoint, user agent and timeout. Defaults are used if None.
    clock : Callable[[], float]
        Returns the current epoch seconds. Used both as the cache-buster
        and as the instant the trading session is classified at.
    """

    def __init__(
        self,
        config: YahooConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or YahooConfig()
        self._clock = clock

    async def _fetch_chart(self, symbol: str, params: dict[str, str]) -> dict:
        """Fetch raw chart data and return the ``chart.result[0]`` object."""
        url = f"{self._config.base_url}{_CHART_PATH}/{symbol}"
        data = await fetch_json(
            url,
            source=_SOURCE,
            timeout=self._config.timeout,
            user_agent=self._config.user_agent,
            params=params,
        )

        chart = data.get("chart") if isinstance(data, dict) else None
        if not isinstance(chart, dict):
            raise ParseError(
                f"{_SOURCE} parse: missing 'chart' object",
                context={"source": "yahoo", "symbol": symbol},
            )

        if chart.get("error"):
            err = chart["error"]
            logger.error(
                "Yahoo Finance API error for %s: %s (%s)",
                symbol,
                err.get("code") if isinstance(err, dict) else err,
                err.get("description") if isinstance(err, dict) else "",
            )

        results = chart.get("result")
        if not results or not isinstance(results[0], dict):
            raise ParseError(
                "No data returned from Yahoo Finance",
                context={"source": "yahoo", "symbol": symbol},
            )

        return results[0]

    @staticmethod
    def _quote_arrays(result: dict) -> dict:
        """The ``indicators.quote[0]`` object, or an empty dict."""
        quotes = (result.get("indicators") or {}).get("quote") or [{}]
        return quotes[0] or {}

    async def fetch_quote(self, symbol: str) -> EquityQuote:
        """Fetch the session-aware quote for ``symbol``.

        Raises
        ------
        ProviderError
            Any transport, status or shape failure from Yahoo Finance.
        """
        now = self._clock()
        result = await self._fetch_chart(
            symbol,
            {
                "interval": "1m",
                "range": "1d",
                "includePrePost": "true",
                "_t": str(int(now)),
            },
        )

        meta = result.get("meta") or {}
        regular_price = _number(meta.get("regularMarketPrice"), 0.0, "regularMarketPrice")
        previous_close = _number(meta.get("previousClose"), regular_price, "previousClose")

        session = classify_session(now, parse_calendar(meta.get("currentTradingPeriod")))

        timestamps = result.get("timestamp") or []
        closes = self._quote_arrays(result).get("close") or []
        last_close = last_candle_close(closes[: len(timestamps)], regular_price)

        selection = select_price(
            session,
            regular_price,
            previous_close,
            last_candle_close=last_close,
            post_price=_optional_number(meta.get("postMarketPrice"), "postMarketPrice"),
            pre_price=_optional_number(meta.get("preMarketPrice"), "preMarketPrice"),
            post_change=_optional_number(meta.get("postMarketChange"), "postMarketChange"),
            pre_change=_optional_number(meta.get("preMarketChange"), "preMarketChange"),
        )

        logger.info(
            "Quote %s [%s]: %.4f (%+.2f%%)",
            symbol,
            session.value,
            selection.price,
            selection.change_percent,
        )

        return EquityQuote(
            symbol=meta.get("symbol") or symbol,
            price=selection.price,
            change=selection.change,
            change_percent=selection.change_percent,
            high=_number(meta.get("regularMarketDayHigh"), 0.0, "regularMarketDayHigh"),
            low=_number(meta.get("regularMarketDayLow"), 0.0, "regularMarketDayLow"),
            volume=int(_number(meta.get("regularMarketVolume"), 0, "regularMarketVolume")),
            market_status=session,
        )

    async def fetch_chart(
        self,
        symbol: str,
        interval: str = "1d",
        range_: str = "1mo",
    ) -> StockChart:
        """Fetch candle history for ``symbol`` plus the day summary.

        ``current_price`` prefers the post-market price, then the pre-market
        price, then the regular market price. An empty candle list is a
        valid result.
        """
        now = self._clock()
        result = await self._fetch_chart(
            symbol,
            {"interval": interval, "range": range_, "_t": str(int(now))},
        )

        meta = result.get("meta") or {}
        regular_price = _number(meta.get("regularMarketPrice"), 0.0, "regularMarketPrice")
        post_price = _optional_number(meta.get("postMarketPrice"), "postMarketPrice")
        pre_price = _optional_number(meta.get("preMarketPrice"), "preMarketPrice")

        if post_price is not None:
            current_price = post_price
        elif pre_price is not None:
            current_price = pre_price
        else:
            current_price = regular_price

        quote = self._quote_arrays(result)
        candles = aggregate_candles(
            result.get("timestamp") or [],
            quote.get("open"),
            quote.get("high"),
            quote.get("low"),
            quote.get("close"),
            quote.get("volume"),
        )
        logger.debug("Chart %s %s/%s: %d candles", symbol, interval, range_, len(candles))

        return StockChart(
            candles=candles,
            current_price=current_price,
            previous_close=_number(meta.get("previousClose"), 0.0, "previousClose"),
            day_high=_number(meta.get("regularMarketDayHigh"), 0.0, "regularMarketDayHigh"),
            day_low=_number(meta.get("regularMarketDayLow"), 0.0, "regularMarketDayLow"),
            volume=int(_number(meta.get("regularMarketVolume"), 0, "regularMarketVolume")),
        )
