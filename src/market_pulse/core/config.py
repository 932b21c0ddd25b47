"""Configuration loading, validation, and access."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from market_pulse.core.exceptions import ConfigError

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


def _positive_timeout(v: float) -> float:
    if v <= 0:
        raise ValueError("timeout must be > 0 seconds")
    return v


class YahooConfig(BaseModel):
    """Yahoo Finance chart API access configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://query1.finance.yahoo.com"
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    timeout: float = 10.0

    @field_validator("timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        return _positive_timeout(v)


class TokensConfig(BaseModel):
    """Token price provider endpoints and per-call timeouts."""

    model_config = ConfigDict(frozen=True)

    jupiter_url: str = "https://lite-api.jup.ag"
    raydium_url: str = "https://api-v3.raydium.io"
    gecko_url: str = "https://api.geckoterminal.com/api/v2"
    dexscreener_url: str = "https://api.dexscreener.com"
    user_agent: str = _BROWSER_USER_AGENT
    price_timeout: float = 5.0
    stats_timeout: float = 10.0
    ohlcv_limit: int = 300

    @field_validator("price_timeout", "stats_timeout")
    @classmethod
    def timeouts_positive(cls, v: float) -> float:
        return _positive_timeout(v)

    @field_validator("ohlcv_limit")
    @classmethod
    def ohlcv_limit_in_range(cls, v: int) -> int:
        if v < 1 or v > 1000:
            raise ValueError("ohlcv_limit must be between 1 and 1000")
        return v


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    api_key: str | None = None


class LoggingConfig(BaseModel):
    """Log output configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def level_known(cls, v: str) -> str:
        upper = v.upper()
        if upper not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v!r}")
        return upper


class PulseConfig(BaseModel):
    """Root configuration for the entire market-pulse system."""

    model_config = ConfigDict(frozen=True)

    yahoo: YahooConfig = YahooConfig()
    tokens: TokensConfig = TokensConfig()
    api: APIConfig = APIConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "MARKET_PULSE_",
) -> PulseConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (MARKET_PULSE_TOKENS__PRICE_TIMEOUT, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        MARKET_PULSE_YAHOO__TIMEOUT=5  ->  yahoo.timeout = 5
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return PulseConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("MARKET_PULSE_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from MARKET_PULSE_CONFIG not found: {env_path}",
                context={"field": "MARKET_PULSE_CONFIG", "value": env_path},
            )
        return p

    default = Path("market-pulse.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels.
    Values are auto-cast: "true"/"false" -> bool, numeric strings -> int/float.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        cast_value = _auto_cast(value)

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            else:
                target[part] = dict(target[part])
            target = target[part]
        target[parts[-1]] = cast_value

    return result


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value
