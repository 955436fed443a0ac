"""candlecheck - verify exchange candlesticks against the raw trade tape.

Collects trades over a window, re-derives open/high/low/close/volume with
exact decimal arithmetic and compares them with the vendor's candles.
"""

from candlecheck.core.exceptions import CandlecheckError, ErrorCode
from candlecheck.core.models import Accumulator, Candle, Mismatch, TimeWindow, Trade, WindowAnchor
from candlecheck.core.services import (
    ReconciliationEngine,
    ReconciliationReport,
    ReconciliationStatus,
    aggregate,
    compare,
    parse_period,
)

__version__ = "0.1.0"

__all__ = [
    "Accumulator",
    "CandlecheckError",
    "Candle",
    "ErrorCode",
    "Mismatch",
    "ReconciliationEngine",
    "ReconciliationReport",
    "ReconciliationStatus",
    "TimeWindow",
    "Trade",
    "WindowAnchor",
    "aggregate",
    "compare",
    "parse_period",
]
