"""Settings management for reconciliation runs."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from candlecheck.core.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = Path.home() / ".candlecheck"


@dataclass
class PollingConfig:
    """Trade polling cadence and bounds."""

    interval_ms: int = 2000
    max_rounds: int = 10
    timeout_seconds: float = 600.0

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise ConfigurationError("interval_ms must be positive")
        if self.max_rounds <= 0:
            raise ConfigurationError("max_rounds must be positive")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")


@dataclass
class HttpConfig:
    """HTTP client behaviour."""

    timeout: float = 30.0
    user_agent: str = "candlecheck/0.1.0"
    api_config: str = str(DEFAULT_CONFIG_DIR / "api.json")


@dataclass
class LoggingConfig:
    """Logging options."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class CandlecheckConfig:
    """Top-level candlecheck configuration."""

    polling: PollingConfig = field(default_factory=PollingConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "CandlecheckConfig":
        """Build configuration from a nested dictionary."""
        try:
            return cls(
                polling=PollingConfig(**config_dict.get("polling", {})),
                http=HttpConfig(**config_dict.get("http", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
            )
        except TypeError as exc:
            raise ConfigurationError(f"Unknown configuration key: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "polling": asdict(self.polling),
            "http": asdict(self.http),
            "logging": asdict(self.logging),
        }


def _env_number(name: str, convert: Callable[[str], Any]) -> Any:
    raw = os.getenv(name)
    if raw is None:
        return None
    try:
        return convert(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}", source=name) from exc


def load_config_from_env() -> dict[str, Any]:
    """Read ``CANDLECHECK_*`` environment overrides into a nested dict."""
    config: dict[str, Any] = {}

    polling: dict[str, Any] = {}
    interval = _env_number("CANDLECHECK_POLL_INTERVAL_MS", int)
    if interval is not None:
        polling["interval_ms"] = interval
    max_rounds = _env_number("CANDLECHECK_MAX_ROUNDS", int)
    if max_rounds is not None:
        polling["max_rounds"] = max_rounds
    timeout = _env_number("CANDLECHECK_TIMEOUT_SECONDS", float)
    if timeout is not None:
        polling["timeout_seconds"] = timeout
    if polling:
        config["polling"] = polling

    http: dict[str, Any] = {}
    http_timeout = _env_number("CANDLECHECK_HTTP_TIMEOUT", float)
    if http_timeout is not None:
        http["timeout"] = http_timeout
    api_config = os.getenv("CANDLECHECK_API_CONFIG")
    if api_config:
        http["api_config"] = api_config
    if http:
        config["http"] = http

    logging_config: dict[str, Any] = {}
    level = os.getenv("CANDLECHECK_LOG_LEVEL")
    if level is not None:
        logging_config["level"] = level
    log_file = os.getenv("CANDLECHECK_LOG_FILE")
    if log_file is not None:
        logging_config["file"] = log_file
    if logging_config:
        config["logging"] = logging_config

    return config


def _deep_update(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict):
            base[key] = _deep_update(dict(base.get(key, {})), value)
        else:
            base[key] = value
    return base


def load_settings(config_path: Path | None = None, *, use_env: bool = True) -> CandlecheckConfig:
    """Load settings from TOML, then apply environment overrides.

    A missing file yields defaults. A file that cannot be parsed raises
    :class:`ConfigurationError`.
    """
    path = config_path or DEFAULT_CONFIG_DIR / "config.toml"
    config_dict: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "rb") as f:
                config_dict = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Failed to load config: {exc}", source=str(path)) from exc
        logger.debug("Loaded settings file", path=str(path))
    if use_env:
        _deep_update(config_dict, load_config_from_env())
    return CandlecheckConfig.from_dict(config_dict)


__all__ = [
    "CandlecheckConfig",
    "HttpConfig",
    "LoggingConfig",
    "PollingConfig",
    "load_config_from_env",
    "load_settings",
]
