"""
HTTP client for the trades and candlestick APIs.

Endpoints come from the :class:`ApiRegistry`. Each call is a single GET with
``instrument_name`` / ``timeframe`` query parameters. No retries are made: a
transport error or any status other than 200 surfaces as
:class:`CollectorError` so that the caller decides what to do.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import httpx
from loguru import logger

from candlecheck.core.config.api import CANDLESTICK_API, TRADES_API, ApiRegistry
from candlecheck.core.config.settings import HttpConfig
from candlecheck.core.exceptions import CollectorError


class ApiClient:
    """Async client issuing trades/candlestick queries against configured endpoints."""

    def __init__(
        self,
        registry: ApiRegistry,
        http_config: HttpConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.registry = registry
        self.http_config = http_config or HttpConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "ApiClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.http_config.timeout),
                headers={"User-Agent": self.http_config.user_agent},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_json(self, api_name: str, params: dict[str, str]) -> dict[str, Any]:
        """GET the named API and decode its JSON body with Decimal numbers."""

        endpoint = self.registry.get(api_name)
        client = await self._ensure_client()
        url = endpoint.base_url + endpoint.path
        logger.info("Query API", api=api_name, domain=endpoint.domain, path=endpoint.path)

        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise CollectorError(f"{api_name} request failed: {exc}", api_name) from exc

        if response.status_code != 200:
            logger.error("Query API: fail", api=api_name, status_code=response.status_code)
            raise CollectorError(
                f"http status is not 200: {response.status_code}, errorMsg: {response.text}",
                api_name,
                status_code=response.status_code,
            )

        try:
            body = response.json(parse_float=Decimal)
        except ValueError as exc:
            raise CollectorError(f"{api_name} returned a non-JSON body", api_name, status_code=200) from exc
        if not isinstance(body, dict):
            raise CollectorError(f"{api_name} returned a non-object body", api_name, status_code=200)
        logger.debug("Query API: success", api=api_name)
        return body

    async def get_trades(self, instrument: str, period: str | None = None) -> dict[str, Any]:
        params = {"instrument_name": instrument}
        if period:
            params["timeframe"] = period
        return await self.get_json(TRADES_API, params)

    async def get_candlestick(self, instrument: str, period: str) -> dict[str, Any]:
        return await self.get_json(CANDLESTICK_API, {"instrument_name": instrument, "timeframe": period})


__all__ = ["ApiClient"]
