"""Registry mapping logical API names to endpoint descriptions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from candlecheck.core.exceptions import ConfigurationError

TRADES_API = "getTrades"
CANDLESTICK_API = "getCandleStick"


class ApiParameter(BaseModel):
    """A query parameter and the values it may take."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: tuple[str, ...] = ()


class ApiEndpoint(BaseModel):
    """A single API entry of the registry file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    domain: str
    path: str
    port: int = 80
    scheme: str = "http"
    parameters: tuple[ApiParameter, ...] = Field(default=(), alias="parameter")

    @property
    def base_url(self) -> str:
        default_port = {"http": 80, "https": 443}.get(self.scheme)
        if self.port == default_port:
            return f"{self.scheme}://{self.domain}"
        return f"{self.scheme}://{self.domain}:{self.port}"

    def parameter_values(self, name: str) -> tuple[str, ...]:
        """Return the allowed values declared for ``name``, empty if undeclared."""
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter.value
        return ()


class ApiRegistry:
    """Immutable name -> :class:`ApiEndpoint` mapping loaded once per process."""

    def __init__(self, endpoints: Mapping[str, ApiEndpoint]) -> None:
        self._endpoints = dict(endpoints)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiRegistry":
        entries = data.get("api")
        if not isinstance(entries, list):
            raise ConfigurationError("API config must contain an 'api' list")
        endpoints: dict[str, ApiEndpoint] = {}
        for entry in entries:
            if not isinstance(entry, dict) or "name" not in entry:
                continue
            try:
                endpoint = ApiEndpoint.model_validate(entry)
            except ValidationError as exc:
                raise ConfigurationError(
                    f"Invalid API entry '{entry.get('name')}'",
                    details={"errors": exc.errors(include_url=False)},
                ) from exc
            endpoints[endpoint.name] = endpoint
        return cls(endpoints)

    @classmethod
    def load(cls, path: Path | str) -> "ApiRegistry":
        source = Path(path)
        try:
            data = json.loads(source.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Failed to load API config: {exc}", source=str(source)) from exc
        return cls.from_dict(data)

    def get(self, name: str) -> ApiEndpoint:
        try:
            return self._endpoints[name]
        except KeyError:
            raise ConfigurationError(f"API '{name}' is not configured", details={"api": name}) from None

    def __contains__(self, name: object) -> bool:
        return name in self._endpoints

    def names(self) -> tuple[str, ...]:
        return tuple(self._endpoints)


__all__ = ["ApiEndpoint", "ApiParameter", "ApiRegistry", "CANDLESTICK_API", "TRADES_API"]
