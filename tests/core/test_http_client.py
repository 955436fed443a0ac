from __future__ import annotations

from decimal import Decimal

import httpx
import pytest

from candlecheck.core.config import ApiRegistry, HttpConfig
from candlecheck.core.exceptions import CollectorError
from candlecheck.core.http_client import ApiClient

REGISTRY = ApiRegistry.from_dict(
    {
        "api": [
            {"name": "getTrades", "domain": "api.example.com", "path": "/v2/public/get-trades", "port": 443, "scheme": "https"},
            {"name": "getCandleStick", "domain": "api.example.com", "path": "/v2/public/get-candlestick", "port": 8080},
        ]
    }
)


def _client(handler) -> ApiClient:
    return ApiClient(REGISTRY, HttpConfig(timeout=5.0), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_trades_sends_instrument_and_parses_decimals() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        body = '{"code": 0, "method": "public/get-trades", "result": {"data": [{"d": 1, "p": 0.1, "q": 2.50}]}}'
        return httpx.Response(200, text=body, headers={"Content-Type": "application/json"})

    async with _client(handler) as client:
        payload = await client.get_trades("BTC_USDT", "1m")

    record = payload["result"]["data"][0]
    assert record["p"] == Decimal("0.1")
    assert str(record["q"]) == "2.50"
    assert str(seen[0].url) == "https://api.example.com/v2/public/get-trades?instrument_name=BTC_USDT&timeframe=1m"
    assert seen[0].headers["User-Agent"] == "candlecheck/0.1.0"


@pytest.mark.asyncio
async def test_get_candlestick_uses_non_default_port() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"code": 0, "result": {"data": []}})

    async with _client(handler) as client:
        await client.get_candlestick("ETH_CRO", "5m")

    assert seen[0].url.host == "api.example.com"
    assert seen[0].url.port == 8080
    assert dict(seen[0].url.params) == {"instrument_name": "ETH_CRO", "timeframe": "5m"}


@pytest.mark.asyncio
async def test_non_200_status_raises_collector_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="internal")

    async with _client(handler) as client:
        with pytest.raises(CollectorError) as excinfo:
            await client.get_candlestick("BTC_USDT", "1m")

    assert excinfo.value.status_code == 500
    assert excinfo.value.api_name == "getCandleStick"
    assert excinfo.value.message == "http status is not 200: 500, errorMsg: internal"


@pytest.mark.asyncio
async def test_transport_error_is_chained() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(CollectorError) as excinfo:
            await client.get_trades("BTC_USDT")

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["not json", "[1, 2]"])
async def test_unusable_body_raises_collector_error(body: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body)

    async with _client(handler) as client:
        with pytest.raises(CollectorError):
            await client.get_trades("BTC_USDT")


def test_base_url_omits_default_port() -> None:
    assert REGISTRY.get("getTrades").base_url == "https://api.example.com"
    assert REGISTRY.get("getCandleStick").base_url == "http://api.example.com:8080"


@pytest.mark.asyncio
async def test_undecodable_body_raises_collector_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'{"a": "\xff"}')

    async with _client(handler) as client:
        with pytest.raises(CollectorError) as excinfo:
            await client.get_trades("BTC_USDT")

    assert isinstance(excinfo.value.__cause__, ValueError)
