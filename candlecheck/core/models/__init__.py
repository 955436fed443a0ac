"""Data models."""

from candlecheck.core.models.market import (
    Accumulator,
    Candle,
    Mismatch,
    TimeWindow,
    Trade,
    TradeId,
    WindowAnchor,
)

__all__ = ["Accumulator", "Candle", "Mismatch", "TimeWindow", "Trade", "TradeId", "WindowAnchor"]
