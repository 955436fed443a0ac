from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Sequence

import typer

from candlecheck.core.config import ApiRegistry, CandlecheckConfig
from candlecheck.core.exceptions import CandlecheckError, PeriodFormatError
from candlecheck.core.http_client import ApiClient
from candlecheck.core.models import WindowAnchor
from candlecheck.core.services.period import parse_period
from candlecheck.core.services.reconciliation import (
    ReconciliationEngine,
    ReconciliationReport,
    ReconciliationStatus,
)

from .constants import (
    COLLECTOR_EXIT_CODE,
    INCONSISTENT_EXIT_CODE,
    SUCCESS_EXIT_CODE,
    SYSTEM_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    VALIDATION_EXIT_CODE,
)
from .utils import emit_error, prepare_output

reconcile_app = typer.Typer(help="Candle/trade reconciliation.")

SUMMARY_COLUMNS = ["instrument", "period", "status", "trades", "candles", "checked", "skipped", "mismatches", "reason"]
MISMATCH_COLUMNS = ["instrument", "period", "window", "field", "computed", "expected"]

EXIT_CODES: dict[ReconciliationStatus, int] = {
    ReconciliationStatus.CONSISTENT: SUCCESS_EXIT_CODE,
    ReconciliationStatus.INCOMPLETE: VALIDATION_EXIT_CODE,
    ReconciliationStatus.COLLECTOR_FAILURE: COLLECTOR_EXIT_CODE,
    ReconciliationStatus.INCONSISTENT: INCONSISTENT_EXIT_CODE,
    ReconciliationStatus.TIMEOUT: TIMEOUT_EXIT_CODE,
}

ReconcileRunner = Callable[[str, Sequence[str], float | None, int | None], Awaitable[list[ReconciliationReport]]]


def register(app: typer.Typer) -> None:
    """Register reconciliation commands on the provided application."""

    app.add_typer(reconcile_app, name="reconcile", help="Reconcile candles against the trade tape")


def get_reconciliation_runner(
    settings: CandlecheckConfig,
    api_config: Path | None,
    anchor: WindowAnchor,
) -> ReconcileRunner:
    """Factory hook wiring the HTTP client into a reconciliation engine."""

    registry = ApiRegistry.load(api_config or settings.http.api_config)

    async def _run(
        instrument: str,
        periods: Sequence[str],
        timeout: float | None,
        rounds: int | None,
    ) -> list[ReconciliationReport]:
        async with ApiClient(registry, settings.http) as client:
            engine = ReconciliationEngine(
                client.get_trades,
                client.get_candlestick,
                polling=settings.polling,
                anchor=anchor,
            )
            return [await engine.run(instrument, period, timeout=timeout, rounds=rounds) for period in periods]

    return _run


@reconcile_app.command("run")
def run_command(
    ctx: typer.Context,
    instrument: str = typer.Argument(..., help="Instrument name, e.g. BTC_USDT."),
    periods: list[str] = typer.Option(["1m"], "--period", "-p", help="Period token; repeat for several."),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds allowed for collection per period."),
    rounds: int | None = typer.Option(None, "--rounds", help="Override the number of trade polling rounds."),
    anchor: WindowAnchor = typer.Option(
        WindowAnchor.START,
        "--anchor",
        help="Whether candle timestamps mark the window start or end.",
        case_sensitive=False,
    ),
    api_config: Path | None = typer.Option(None, "--api-config", help="API registry JSON file."),
) -> None:
    """Collect trades, fetch candles and report OHLCV mismatches per period."""

    formatter, stream, stack, options = prepare_output(ctx)

    for period in periods:
        try:
            parse_period(period)
        except PeriodFormatError as error:
            stack.close()
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    if rounds is not None and rounds <= 0:
        stack.close()
        emit_error("Rounds must be positive.", "INVALID_ROUNDS", details={"rounds": rounds})
        raise typer.Exit(code=VALIDATION_EXIT_CODE)

    try:
        runner = get_reconciliation_runner(options.settings, api_config, anchor)
        reports = asyncio.run(runner(instrument, periods, timeout, rounds))
    except CandlecheckError as error:
        stack.close()
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=SYSTEM_EXIT_CODE) from error

    try:
        formatter.render([report.summary() for report in reports], stream=stream, columns=SUMMARY_COLUMNS)
        mismatch_rows = [row for report in reports for row in report.to_rows()]
        if mismatch_rows:
            formatter.render(mismatch_rows, stream=stream, columns=MISMATCH_COLUMNS, title="mismatches")
    finally:
        stack.close()

    exit_code = max((EXIT_CODES[report.status] for report in reports), default=SUCCESS_EXIT_CODE)
    if exit_code != SUCCESS_EXIT_CODE:
        raise typer.Exit(code=exit_code)


__all__ = [
    "EXIT_CODES",
    "MISMATCH_COLUMNS",
    "SUMMARY_COLUMNS",
    "get_reconciliation_runner",
    "reconcile_app",
    "register",
    "run_command",
]
