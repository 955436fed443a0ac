"""Reconciliation services."""

from candlecheck.core.services.aggregation import aggregate, build_windows, sort_trades
from candlecheck.core.services.collector import TradeCollector, compute_rounds
from candlecheck.core.services.comparator import compare
from candlecheck.core.services.period import parse_period
from candlecheck.core.services.reconciliation import (
    DEFAULT_PERIODS,
    ReconciliationEngine,
    ReconciliationReport,
    ReconciliationStatus,
    WindowVerdict,
    evaluate,
)
from candlecheck.core.services.response_checks import check_trades_content, check_trades_format

__all__ = [
    "DEFAULT_PERIODS",
    "ReconciliationEngine",
    "ReconciliationReport",
    "ReconciliationStatus",
    "TradeCollector",
    "WindowVerdict",
    "aggregate",
    "build_windows",
    "check_trades_content",
    "check_trades_format",
    "compare",
    "compute_rounds",
    "evaluate",
    "parse_period",
    "sort_trades",
]
