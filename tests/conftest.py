"""Pytest configuration for the candlecheck test suite."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Awaitable, Callable

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that call the live market-data API.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: marks tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


TradeRecordFactory = Callable[..., dict[str, Any]]


@pytest.fixture()
def make_trade() -> TradeRecordFactory:
    """Factory for trade wire records."""

    def _make(
        trade_id: int,
        timestamp: int,
        price: str,
        quantity: str,
        instrument: str = "BTC_USDT",
        side: str = "buy",
    ) -> dict[str, Any]:
        return {
            "d": trade_id,
            "i": instrument,
            "s": side,
            "p": Decimal(price),
            "q": Decimal(quantity),
            "t": timestamp,
        }

    return _make


@pytest.fixture()
def trades_payload() -> Callable[..., dict[str, Any]]:
    def _payload(*records: dict[str, Any]) -> dict[str, Any]:
        return {"code": 0, "method": "public/get-trades", "result": {"data": list(records)}}

    return _payload


@pytest.fixture()
def candle_payload() -> Callable[..., dict[str, Any]]:
    def _payload(*records: dict[str, Any], instrument: str = "BTC_USDT", interval: str = "1m") -> dict[str, Any]:
        return {
            "code": 0,
            "method": "public/get-candlestick",
            "result": {"instrument_name": instrument, "interval": interval, "data": list(records)},
        }

    return _payload


@pytest.fixture()
def no_sleep() -> Callable[[float], Awaitable[None]]:
    """Sleep replacement recording requested delays without waiting."""

    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep
