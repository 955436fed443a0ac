from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer

from candlecheck.core.config import TRADES_API, ApiRegistry, CandlecheckConfig
from candlecheck.core.exceptions import CandlecheckError, ErrorCode
from candlecheck.core.http_client import ApiClient
from candlecheck.core.services.response_checks import check_trades_content, check_trades_format

from .constants import COLLECTOR_EXIT_CODE, RESPONSE_CHECK_EXIT_CODE, SYSTEM_EXIT_CODE
from .utils import emit_error, prepare_output

trades_app = typer.Typer(help="Trades API checks.")

PROBLEM_COLUMNS = ["instrument", "check", "problem"]

TradesSampler = Callable[[str], Awaitable[tuple[dict[str, Any], tuple[str, ...]]]]


def register(app: typer.Typer) -> None:
    app.add_typer(trades_app, name="trades", help="Validate raw trades responses")


def get_trades_sampler(settings: CandlecheckConfig, api_config: Path | None) -> TradesSampler:
    """Factory hook returning a coroutine that fetches one trades payload.

    The coroutine also yields the instrument names declared for the trades API.
    """

    registry = ApiRegistry.load(api_config or settings.http.api_config)
    instruments = registry.get(TRADES_API).parameter_values("instrument_name")

    async def _sample(instrument: str) -> tuple[dict[str, Any], tuple[str, ...]]:
        async with ApiClient(registry, settings.http) as client:
            return await client.get_trades(instrument), instruments

    return _sample


@trades_app.command("check")
def check_command(
    ctx: typer.Context,
    instrument: str = typer.Argument(..., help="Instrument name, e.g. BTC_USDT."),
    api_config: Path | None = typer.Option(None, "--api-config", help="API registry JSON file."),
) -> None:
    """Fetch one trades response and check its format and content."""

    formatter, stream, stack, options = prepare_output(ctx)
    try:
        sampler = get_trades_sampler(options.settings, api_config)
        payload, instruments = asyncio.run(sampler(instrument))
    except CandlecheckError as error:
        stack.close()
        emit_error(error.message, error.error_code, details=error.details)
        code = COLLECTOR_EXIT_CODE if error.error_code == ErrorCode.COLLECTOR_FAILURE.value else SYSTEM_EXIT_CODE
        raise typer.Exit(code=code) from error

    rows = [
        {"instrument": instrument, "check": "format", "problem": problem}
        for problem in check_trades_format(payload)
    ]
    if not rows:
        rows = [
            {"instrument": instrument, "check": "content", "problem": problem}
            for problem in check_trades_content(payload, instruments)
        ]

    try:
        if rows:
            formatter.render(rows, stream=stream, columns=PROBLEM_COLUMNS)
        else:
            typer.echo(f"{instrument}: trades response OK", file=stream)
    finally:
        stack.close()

    if rows:
        raise typer.Exit(code=RESPONSE_CHECK_EXIT_CODE)


__all__ = ["PROBLEM_COLUMNS", "check_command", "get_trades_sampler", "register", "trades_app"]
