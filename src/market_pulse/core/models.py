"""Pydantic data models: the system's type contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Type Aliases ---

Symbol = str
ChainIdentity = str
TokenAddress = str

DEX_SYMBOL_PREFIX = "dex"


def normalize_chain(chain: str) -> ChainIdentity:
    """Lowercase and trim a chain name ("Solana " -> "solana")."""
    return chain.strip().lower()


# --- Enumerations ---


class TradingSession(StrEnum):
    """Equity trading session for a given instant."""

    PRE = "pre"
    REGULAR = "regular"
    POST = "post"
    CLOSED = "closed"


class PriceSource(StrEnum):
    """Token price providers, named as they appear in results."""

    JUPITER = "jupiter"
    RAYDIUM = "raydium"
    GECKO = "gecko"
    DEXSCREENER = "dexscreener"


# --- Equity Models ---


class TradingPeriod(BaseModel):
    """Half-open interval [start, end) in epoch seconds."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    def contains(self, ts: float) -> bool:
        return self.start <= ts < self.end


class TradingPeriodCalendar(BaseModel):
    """Pre, regular and post periods supplied by the equity provider.

    Intervals are assumed non-overlapping and are not validated. A period
    the provider left out or sent without both bounds is None and never
    matches.
    """

    model_config = ConfigDict(frozen=True)

    pre: TradingPeriod | None = None
    regular: TradingPeriod | None = None
    post: TradingPeriod | None = None


class Candle(BaseModel):
    """A single OHLCV bar.

    ``time`` is epoch milliseconds. Volume defaults to 0 when the provider
    did not report one.
    """

    model_config = ConfigDict(frozen=True)

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int = 0

    @field_validator("volume")
    @classmethod
    def volume_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"volume must be >= 0, got {v}")
        return v


class EquityQuote(BaseModel):
    """Session-aware quote for a single equity symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    price: float
    change: float
    change_percent: float
    high: float
    low: float
    volume: int
    market_status: TradingSession


class StockChart(BaseModel):
    """Candle history plus the day summary for an equity."""

    model_config = ConfigDict(frozen=True)

    candles: list[Candle]
    current_price: float
    previous_close: float
    day_high: float
    day_low: float
    volume: int


# --- Token Models ---


class TokenStats(BaseModel):
    """24h statistics for a token.

    Price is best-effort here and may be 0.0 when the provider omitted it.
    """

    model_config = ConfigDict(frozen=True)

    price: float = Field(ge=0)
    change_24h: float = 0.0
    volume_24h: float = 0.0
    pair_address: str = ""
    source: PriceSource


class TokenPriceResult(TokenStats):
    """Authoritative token price produced by exactly one provider."""

    price: float = Field(gt=0)


class TokenRef(BaseModel):
    """A token identified by chain and contract/mint address."""

    model_config = ConfigDict(frozen=True)

    chain: ChainIdentity
    address: TokenAddress

    @field_validator("chain")
    @classmethod
    def chain_normalized(cls, v: str) -> str:
        v = normalize_chain(v)
        if not v:
            raise ValueError("chain must not be empty")
        return v

    @field_validator("address")
    @classmethod
    def address_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("address must not be empty")
        return v

    @classmethod
    def from_symbol(cls, symbol: str) -> TokenRef:
        """Parse the ``dex:<chain>:<address>`` symbol form."""
        parts = symbol.split(":")
        if len(parts) != 3 or parts[0].lower() != DEX_SYMBOL_PREFIX:
            raise ValueError(
                f"Expected 'dex:<chain>:<address>', got: {symbol!r}"
            )
        return cls(chain=parts[1], address=parts[2])

    @property
    def symbol(self) -> str:
        return f"{DEX_SYMBOL_PREFIX}:{self.chain}:{self.address}"
