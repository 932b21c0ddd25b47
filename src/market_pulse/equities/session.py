"""Trading-session classification from a provider-supplied calendar."""

from __future__ import annotations

from typing import Any

from market_pulse.core.models import TradingPeriod, TradingPeriodCalendar, TradingSession


def classify_session(
    now: float,
    calendar: TradingPeriodCalendar | None,
) -> TradingSession:
    """Return the session that ``now`` (epoch seconds) falls into.

    Periods are half-open and checked pre, regular, post in that order;
    the first match wins. An instant outside every usable period is CLOSED,
    including when the calendar exists but none of its periods are usable.
    With no calendar at all the market is assumed to be in its regular
    session.
    """
    if calendar is None:
        return TradingSession.REGULAR

    checks = (
        (calendar.pre, TradingSession.PRE),
        (calendar.regular, TradingSession.REGULAR),
        (calendar.post, TradingSession.POST),
    )
    for period, session in checks:
        if period is not None and period.contains(now):
            return session
    return TradingSession.CLOSED


def _parse_period(entry: Any) -> TradingPeriod | None:
    if not isinstance(entry, dict):
        return None
    start, end = entry.get("start"), entry.get("end")
    if start is None or end is None:
        return None
    return TradingPeriod(start=int(start), end=int(end))


def parse_calendar(raw: Any) -> TradingPeriodCalendar | None:
    """Build a calendar from Yahoo's ``meta.currentTradingPeriod`` object.

    Returns None only when the object itself is absent. A period that is
    missing or lacks a bound is kept as None on the calendar.
    """
    if not isinstance(raw, dict):
        return None

    return TradingPeriodCalendar(
        pre=_parse_period(raw.get("pre")),
        regular=_parse_period(raw.get("regular")),
        post=_parse_period(raw.get("post")),
    )
