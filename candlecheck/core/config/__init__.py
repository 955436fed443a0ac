"""Configuration management module."""

from candlecheck.core.config.api import CANDLESTICK_API, TRADES_API, ApiEndpoint, ApiParameter, ApiRegistry
from candlecheck.core.config.settings import (
    CandlecheckConfig,
    HttpConfig,
    LoggingConfig,
    PollingConfig,
    load_config_from_env,
    load_settings,
)

__all__ = [
    "ApiEndpoint",
    "ApiParameter",
    "ApiRegistry",
    "CANDLESTICK_API",
    "CandlecheckConfig",
    "HttpConfig",
    "LoggingConfig",
    "PollingConfig",
    "TRADES_API",
    "load_config_from_env",
    "load_settings",
]
