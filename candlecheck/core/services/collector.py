"""Bounded, deduplicating trade polling."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Protocol

from loguru import logger

from candlecheck.core.config.api import TRADES_API
from candlecheck.core.exceptions import CandlecheckError, CollectorError, IncompleteInputError
from candlecheck.core.models.market import Trade, TradeId

Sleep = Callable[[float], Awaitable[Any]]


class TradeFetcher(Protocol):
    """Collaborator returning one ``{code, method, result: {data: [...]}}`` payload."""

    def __call__(self, instrument: str, period: str) -> Awaitable[Mapping[str, Any]]: ...


def compute_rounds(period_ms: int, interval_ms: int, max_rounds: int) -> int:
    """Number of polling rounds for a period, never less than one."""

    return max(1, min(period_ms // interval_ms, max_rounds))


def extract_trade_records(payload: Mapping[str, Any]) -> list[Any]:
    """Return ``result.data`` of a trades payload, failing on a non-success ``code``."""

    if not isinstance(payload, Mapping):
        raise IncompleteInputError("Trades response is not an object")
    code = payload.get("code")
    if code is not None and code != 0:
        raise CollectorError(
            f"Trades API returned non-success code {code}",
            TRADES_API,
            details={"code": code, "method": payload.get("method")},
        )
    result = payload.get("result") or {}
    data = result.get("data", []) if isinstance(result, Mapping) else None
    if not isinstance(data, list):
        raise IncompleteInputError("Trades response has no 'result.data' list")
    return data


class TradeCollector:
    """Poll the trades collaborator on a fixed cadence and merge unique trades.

    Rounds run strictly one after another: each waits for the cadence timer,
    then awaits a single fetch. The first failure aborts the whole collection
    and is re-raised unchanged; nothing collected so far is returned.
    """

    def __init__(
        self,
        fetch_trades: TradeFetcher,
        *,
        interval_ms: int = 2000,
        max_rounds: int = 10,
        sleep: Sleep | None = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if max_rounds <= 0:
            raise ValueError("max_rounds must be positive")
        self._fetch_trades = fetch_trades
        self._interval_ms = interval_ms
        self._max_rounds = max_rounds
        self._sleep = sleep or asyncio.sleep

    def rounds_for(self, period_ms: int) -> int:
        return compute_rounds(period_ms, self._interval_ms, self._max_rounds)

    async def collect(
        self,
        instrument: str,
        period: str,
        *,
        period_ms: int,
        rounds: int | None = None,
    ) -> dict[TradeId, Trade]:
        total = max(1, rounds) if rounds is not None else self.rounds_for(period_ms)
        trades: dict[TradeId, Trade] = {}

        for round_number in range(1, total + 1):
            await self._sleep(self._interval_ms / 1000)
            try:
                payload = await self._fetch_trades(instrument, period)
            except CandlecheckError as exc:
                logger.error("Get trade api error", round=round_number, rounds=total, cause=repr(exc))
                raise
            except Exception as exc:
                logger.error("Get trade api error", round=round_number, rounds=total, cause=repr(exc))
                raise CollectorError(f"Trades fetch failed: {exc!r}", TRADES_API) from exc

            added = 0
            for record in extract_trade_records(payload):
                trade = Trade.from_wire(record)
                if trade.trade_id in trades:
                    continue
                trades[trade.trade_id] = trade
                added += 1
            logger.debug("Trade poll merged", round=round_number, rounds=total, added=added, total=len(trades))

        logger.info("Trade collection finished", rounds=total, trades=len(trades))
        return trades


__all__ = ["Sleep", "TradeCollector", "TradeFetcher", "compute_rounds", "extract_trade_records"]
