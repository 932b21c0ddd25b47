"""market_pulse.core — Foundation types, config, and exceptions."""

from market_pulse.core.config import (
    APIConfig,
    LoggingConfig,
    PulseConfig,
    TokensConfig,
    YahooConfig,
    load_config,
)
from market_pulse.core.exceptions import (
    ConfigError,
    MarketPulseError,
    ParseError,
    PriceValidationError,
    ProtocolError,
    ProviderError,
    ResolutionError,
    TransportError,
)
from market_pulse.core.models import (
    Candle,
    ChainIdentity,
    EquityQuote,
    PriceSource,
    StockChart,
    Symbol,
    TokenAddress,
    TokenPriceResult,
    TokenRef,
    TokenStats,
    TradingPeriod,
    TradingPeriodCalendar,
    TradingSession,
    normalize_chain,
)

__all__ = [
    # Type aliases
    "Symbol",
    "ChainIdentity",
    "TokenAddress",
    "normalize_chain",
    # Enums
    "TradingSession",
    "PriceSource",
    # Equity models
    "TradingPeriod",
    "TradingPeriodCalendar",
    "Candle",
    "EquityQuote",
    "StockChart",
    # Token models
    "TokenStats",
    "TokenPriceResult",
    "TokenRef",
    # Config
    "PulseConfig",
    "YahooConfig",
    "TokensConfig",
    "APIConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "MarketPulseError",
    "ConfigError",
    "ProviderError",
    "TransportError",
    "ProtocolError",
    "ParseError",
    "PriceValidationError",
    "ResolutionError",
]
