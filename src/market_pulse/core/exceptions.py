"""Custom exception hierarchy for market-pulse."""

from typing import Any


class MarketPulseError(Exception):
    """Base exception for all market-pulse errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(MarketPulseError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value
    """


class ProviderError(MarketPulseError):
    """A single market-data provider is unusable for this call.

    Policy: inside a fallback chain, log and move to the next provider.
    Outside one (equity endpoints), propagate to the caller.

    Context keys:
        source: str — provider name ("yahoo", "jupiter", ...)
        url: str — the URL that was being fetched
    """


class TransportError(ProviderError):
    """Network failure or timeout while reaching a provider."""


class ProtocolError(ProviderError):
    """Provider answered with a non-success HTTP status.

    Context keys:
        status_code: int — the HTTP status returned
    """


class ParseError(ProviderError):
    """Response body was not JSON or did not have the expected shape."""


class PriceValidationError(ProviderError):
    """Response was well-formed but semantically rejected.

    Covers non-positive prices, a token missing from the response map and
    chains the provider does not support.
    """


class ResolutionError(MarketPulseError):
    """Every applicable provider failed to produce a price.

    Context keys:
        chain: str — normalized chain identity
        address: str — token address
        failures: list[dict] — one {"source", "reason"} entry per attempt
    """
