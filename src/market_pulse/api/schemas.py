"""API-specific response schemas (Pydantic v2)."""

from __future__ import annotations

from pydantic import BaseModel

from market_pulse.core.models import Candle


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Service liveness and version."""

    status: str
    version: str
    price_sources: list[str]


class PoolCandlesResponse(BaseModel):
    """Pool candles for a token, oldest first."""

    chain: str
    address: str
    timeframe: str
    candles: list[Candle]
