"""Turn parallel OHLCV arrays into validated candles."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from market_pulse.core.models import Candle


def _at(values: Sequence[Any] | None, i: int) -> Any:
    """Element ``i`` of ``values``, or None when the array is short or absent."""
    if values is None or i >= len(values):
        return None
    return values[i]


def aggregate_candles(
    timestamps: Sequence[int],
    opens: Sequence[float | None] | None,
    highs: Sequence[float | None] | None,
    lows: Sequence[float | None] | None,
    closes: Sequence[float | None] | None,
    volumes: Sequence[int | None] | None = None,
) -> list[Candle]:
    """Zip provider arrays into candles, one per timestamp.

    Indices missing any of open/high/low/close are skipped entirely, so the
    result can be shorter than ``timestamps``. Timestamps are converted from
    seconds to milliseconds; a missing volume becomes 0.
    """
    candles: list[Candle] = []
    for i, ts in enumerate(timestamps):
        o, h, lo, c = (_at(arr, i) for arr in (opens, highs, lows, closes))

        # Skip rows with null OHLC values (halts, gaps in the feed)
        if any(x is None for x in (o, h, lo, c)):
            continue

        v = _at(volumes, i)
        candles.append(
            Candle(
                time=int(ts) * 1000,
                open=float(o),
                high=float(h),
                low=float(lo),
                close=float(c),
                volume=int(v) if v is not None else 0,
            )
        )

    return candles
