"""Tests for market_pulse.core.exceptions."""

import pytest

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


class TestExceptionHierarchy:
    """Verify the exception class hierarchy."""

    def test_config_is_subclass(self):
        assert issubclass(ConfigError, MarketPulseError)

    @pytest.mark.parametrize(
        "exc_type", [TransportError, ProtocolError, ParseError, PriceValidationError]
    )
    def test_provider_failures_share_one_parent(self, exc_type):
        assert issubclass(exc_type, ProviderError)
        assert issubclass(exc_type, MarketPulseError)

    def test_resolution_is_not_a_provider_error(self):
        assert issubclass(ResolutionError, MarketPulseError)
        assert not issubclass(ResolutionError, ProviderError)


class TestExceptionContext:
    """Verify context dict behavior."""

    def test_context_preserved(self):
        exc = ProtocolError(
            "Jupiter status 503",
            context={"source": "jupiter", "status_code": 503},
        )
        assert exc.context["source"] == "jupiter"
        assert exc.context["status_code"] == 503

    def test_default_context_is_empty_dict(self):
        exc = MarketPulseError("test error")
        assert exc.context == {}

    def test_str_returns_message(self):
        exc = ConfigError("invalid field")
        assert str(exc) == "invalid field"

    def test_context_none_becomes_empty_dict(self):
        exc = ParseError("bad json", context=None)
        assert exc.context == {}

    def test_exception_can_be_caught_as_parent(self):
        with pytest.raises(ProviderError):
            raise PriceValidationError("Gecko: price zero", context={"source": "gecko"})
