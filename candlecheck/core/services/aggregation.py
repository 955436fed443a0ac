"""Bucketing trades into candle windows and recomputing OHLCV."""

from __future__ import annotations

from bisect import bisect_right
from typing import Iterable, Sequence

from candlecheck.core.models.market import Accumulator, Candle, TimeWindow, Trade, WindowAnchor


def sort_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Sort by timestamp ascending; ties keep their input order."""

    return sorted(trades, key=lambda trade: trade.timestamp)


def build_windows(
    candles: Sequence[Candle],
    period_ms: int,
    anchor: WindowAnchor = WindowAnchor.START,
) -> list[TimeWindow]:
    return [TimeWindow.for_candle(candle.timestamp, period_ms, anchor) for candle in candles]


def aggregate(
    windows: Iterable[TimeWindow],
    trades: Iterable[Trade],
    instrument: str | None = None,
) -> dict[TimeWindow, Accumulator]:
    """Fold every trade falling in ``(begin, end]`` of a window into its accumulator.

    Trades are sorted once; each window then locates its slice with two
    binary searches, so windows may arrive in any order. When ``instrument``
    is given, trades for other instruments are ignored. A window without
    matching trades maps to an empty accumulator.
    """
    ordered = sort_trades(trades)
    timestamps = [trade.timestamp for trade in ordered]

    accumulators: dict[TimeWindow, Accumulator] = {}
    for window in windows:
        if window in accumulators:
            continue
        accumulator = Accumulator()
        lower = bisect_right(timestamps, window.begin)
        upper = bisect_right(timestamps, window.end)
        for trade in ordered[lower:upper]:
            if instrument is not None and trade.instrument != instrument:
                continue
            accumulator.fold(trade)
        accumulators[window] = accumulator
    return accumulators


__all__ = ["aggregate", "build_windows", "sort_trades"]
