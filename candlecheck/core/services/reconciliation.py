"""Reconciliation of vendor candles against the collected trade tape."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Mapping, Protocol, Sequence

from loguru import logger

from candlecheck.core.config.api import CANDLESTICK_API
from candlecheck.core.config.settings import PollingConfig
from candlecheck.core.exceptions import (
    CandlecheckError,
    CollectorError,
    ErrorCode,
    IncompleteInputError,
    ReconciliationTimeoutError,
)
from candlecheck.core.logging import log_context
from candlecheck.core.models.market import Accumulator, Candle, Mismatch, TimeWindow, Trade, WindowAnchor
from candlecheck.core.services.aggregation import aggregate, build_windows
from candlecheck.core.services.collector import Sleep, TradeCollector, TradeFetcher
from candlecheck.core.services.comparator import compare
from candlecheck.core.services.period import is_calendar_period, parse_period

DEFAULT_PERIODS = ("1m", "5m", "15m", "30m", "1h", "4h", "6h", "12h", "1D", "7D", "14D", "1M")


class CandleFetcher(Protocol):
    """Collaborator returning ``{result: {instrument_name, interval, data: [...]}}``."""

    def __call__(self, instrument: str, period: str) -> Awaitable[Mapping[str, Any]]: ...


class ReconciliationStatus(str, Enum):
    """Terminal outcome of one reconciliation run."""

    CONSISTENT = "CONSISTENT"
    INCONSISTENT = "INCONSISTENT"
    INCOMPLETE = "INCOMPLETE"
    COLLECTOR_FAILURE = "COLLECTOR_FAILURE"
    TIMEOUT = "TIMEOUT"


_STATUS_BY_CODE: dict[str, ReconciliationStatus] = {
    ErrorCode.INVALID_PERIOD.value: ReconciliationStatus.INCOMPLETE,
    ErrorCode.INCOMPLETE_INPUT.value: ReconciliationStatus.INCOMPLETE,
    ErrorCode.COLLECTOR_FAILURE.value: ReconciliationStatus.COLLECTOR_FAILURE,
    ErrorCode.TIMEOUT.value: ReconciliationStatus.TIMEOUT,
}


@dataclass(frozen=True)
class WindowVerdict:
    """Comparison outcome for one candle."""

    window: TimeWindow
    candle: Candle
    accumulator: Accumulator
    mismatches: tuple[Mismatch, ...]

    @property
    def skipped(self) -> bool:
        return self.accumulator.is_empty

    @property
    def passed(self) -> bool:
        return not self.mismatches


@dataclass(frozen=True)
class ReconciliationReport:
    """Structured result of a reconciliation run."""

    instrument: str | None
    period: str | None
    status: ReconciliationStatus
    verdicts: tuple[WindowVerdict, ...] = ()
    reason: str | None = None
    error_code: str | None = None
    error: CandlecheckError | None = field(default=None, compare=False)
    trade_count: int = 0
    candle_count: int = 0
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def passed(self) -> bool:
        return self.status is ReconciliationStatus.CONSISTENT

    @property
    def checked_windows(self) -> tuple[WindowVerdict, ...]:
        return tuple(verdict for verdict in self.verdicts if not verdict.skipped)

    @property
    def skipped_windows(self) -> tuple[WindowVerdict, ...]:
        return tuple(verdict for verdict in self.verdicts if verdict.skipped)

    @property
    def mismatches(self) -> tuple[tuple[TimeWindow, Mismatch], ...]:
        return tuple((verdict.window, mismatch) for verdict in self.verdicts for mismatch in verdict.mismatches)

    def to_rows(self) -> list[dict[str, object]]:
        """Flatten mismatches into rows with enough context to reproduce them."""

        return [
            {
                "instrument": self.instrument,
                "period": self.period,
                "window": window.label(),
                "field": mismatch.field,
                "computed": mismatch.computed,
                "expected": mismatch.expected,
            }
            for window, mismatch in self.mismatches
        ]

    def summary(self) -> dict[str, object]:
        return {
            "instrument": self.instrument,
            "period": self.period,
            "status": self.status.value,
            "error_code": self.error_code,
            "reason": self.reason,
            "trades": self.trade_count,
            "candles": self.candle_count,
            "checked": len(self.checked_windows),
            "skipped": len(self.skipped_windows),
            "mismatches": len(self.mismatches),
        }


def evaluate(
    candles: Sequence[Candle],
    trades: Iterable[Trade],
    period_ms: int,
    *,
    instrument: str | None = None,
    anchor: WindowAnchor = WindowAnchor.START,
) -> tuple[WindowVerdict, ...]:
    """Aggregate ``trades`` into the window of each candle and compare."""

    windows = build_windows(candles, period_ms, anchor)
    accumulators = aggregate(windows, trades, instrument=instrument)
    verdicts: list[WindowVerdict] = []
    for candle, window in zip(candles, windows):
        accumulator = accumulators[window]
        mismatches = tuple(compare(candle, accumulator))
        verdicts.append(WindowVerdict(window=window, candle=candle, accumulator=accumulator, mismatches=mismatches))
    return tuple(verdicts)


def decode_candles(payload: Mapping[str, Any], *, instrument: str, period: str) -> list[Candle]:
    """Decode the candlestick payload; a missing ``result.data`` list is incomplete input."""

    if not isinstance(payload, Mapping):
        raise IncompleteInputError("Candlestick response is not an object")
    result = payload.get("result")
    data = result.get("data") if isinstance(result, Mapping) else None
    if not isinstance(data, list):
        raise IncompleteInputError("Candlestick response has no 'result.data' list", missing_fields=["data"])
    reported_interval = result.get("interval")
    if reported_interval is not None and reported_interval != period:
        logger.warning("Candlestick interval differs from requested period", interval=reported_interval)
    return [Candle.from_wire(record, instrument=instrument, period=period) for record in data]


class ReconciliationEngine:
    """Collect trades, fetch candles once, then recompute and compare OHLCV.

    Domain failures never escape :meth:`run`; they become a report whose
    ``error`` holds the original exception. Anything else propagates.
    """

    def __init__(
        self,
        fetch_trades: TradeFetcher,
        fetch_candles: CandleFetcher,
        *,
        polling: PollingConfig | None = None,
        anchor: WindowAnchor = WindowAnchor.START,
        sleep: Sleep | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._polling = polling or PollingConfig()
        self._collector = TradeCollector(
            fetch_trades,
            interval_ms=self._polling.interval_ms,
            max_rounds=self._polling.max_rounds,
            sleep=sleep,
        )
        self._fetch_candles = fetch_candles
        self._anchor = anchor
        self._clock = clock or (lambda: datetime.now(UTC))
        if anchor is WindowAnchor.END:
            logger.warning("Candle timestamps treated as window end", anchor=anchor.value)

    async def run(
        self,
        instrument: str | None,
        period: str | None,
        *,
        timeout: float | None = None,
        rounds: int | None = None,
    ) -> ReconciliationReport:
        started_at = self._clock()
        with log_context(instrument=instrument, period=period):
            logger.info("Start consistency test")
            try:
                report = await self._run(instrument, period, timeout, rounds, started_at)
            except CandlecheckError as error:
                report = self._failure_report(instrument, period, error, started_at)
            self._log_outcome(report)
            return report

    async def run_many(
        self,
        instrument: str,
        periods: Sequence[str] = DEFAULT_PERIODS,
        *,
        timeout: float | None = None,
    ) -> list[ReconciliationReport]:
        reports = []
        for period in periods:
            reports.append(await self.run(instrument, period, timeout=timeout))
        return reports

    async def _run(
        self,
        instrument: str | None,
        period: str | None,
        timeout: float | None,
        rounds: int | None,
        started_at: datetime,
    ) -> ReconciliationReport:
        missing = [name for name, value in (("instrument", instrument), ("period", period)) if not value]
        if missing:
            raise IncompleteInputError("Incomplete parameter", missing_fields=missing)

        period_ms = parse_period(period, now=started_at)
        if period_ms <= 0:
            # (t, t] windows can never hold a trade
            raise IncompleteInputError("Period must be longer than zero", details={"period": period})
        if is_calendar_period(period):
            logger.debug("Calendar period resolved", period_ms=period_ms, anchored_at=started_at.isoformat())

        deadline = timeout if timeout is not None else self._polling.timeout_seconds
        try:
            trades, candle_payload = await asyncio.wait_for(
                self._collect(instrument, period, period_ms, rounds),
                timeout=deadline,
            )
        except TimeoutError as exc:
            raise ReconciliationTimeoutError(deadline, details={"instrument": instrument, "period": period}) from exc

        candles = decode_candles(candle_payload, instrument=instrument, period=period)
        if not candles:
            logger.warning("Candlestick response contained no candles")

        verdicts = evaluate(
            candles,
            trades.values(),
            period_ms,
            instrument=instrument,
            anchor=self._anchor,
        )
        failed = any(not verdict.passed for verdict in verdicts)
        return ReconciliationReport(
            instrument=instrument,
            period=period,
            status=ReconciliationStatus.INCONSISTENT if failed else ReconciliationStatus.CONSISTENT,
            verdicts=verdicts,
            error_code=ErrorCode.CONSISTENCY_VIOLATION.value if failed else None,
            trade_count=len(trades),
            candle_count=len(candles),
            started_at=started_at,
            finished_at=self._clock(),
        )

    async def _collect(
        self,
        instrument: str,
        period: str,
        period_ms: int,
        rounds: int | None,
    ) -> tuple[dict, Mapping[str, Any]]:
        trades = await self._collector.collect(instrument, period, period_ms=period_ms, rounds=rounds)
        try:
            candle_payload = await self._fetch_candles(instrument, period)
        except CandlecheckError:
            logger.error("Query CandleStick API: fail", api=CANDLESTICK_API)
            raise
        except Exception as exc:
            logger.error("Query CandleStick API: fail", api=CANDLESTICK_API, cause=repr(exc))
            raise CollectorError(f"Candlestick fetch failed: {exc!r}", CANDLESTICK_API) from exc
        return trades, candle_payload

    def _failure_report(
        self,
        instrument: str | None,
        period: str | None,
        error: CandlecheckError,
        started_at: datetime,
    ) -> ReconciliationReport:
        status = _STATUS_BY_CODE.get(error.error_code)
        if status is None:
            raise error
        return ReconciliationReport(
            instrument=instrument,
            period=period,
            status=status,
            reason=error.message,
            error_code=error.error_code,
            error=error,
            started_at=started_at,
            finished_at=self._clock(),
        )

    @staticmethod
    def _log_outcome(report: ReconciliationReport) -> None:
        for verdict in report.verdicts:
            case = f"Case {verdict.window.label()}"
            if verdict.skipped:
                logger.info(f"{case}: SKIPPED (no trades)")
            elif verdict.passed:
                logger.info(f"{case}: PASS")
            else:
                logger.error(
                    f"{case}: " + ", ".join(mismatch.describe() for mismatch in verdict.mismatches),
                    error_code=ErrorCode.CONSISTENCY_VIOLATION.value,
                )

        if report.passed:
            logger.info("Consistency test: PASS", **report.summary())
        else:
            logger.error("Consistency test: FAIL", **report.summary())


__all__ = [
    "CandleFetcher",
    "DEFAULT_PERIODS",
    "ReconciliationEngine",
    "ReconciliationReport",
    "ReconciliationStatus",
    "WindowVerdict",
    "decode_candles",
    "evaluate",
]
