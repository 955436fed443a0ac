"""Format and content checks for raw trades API responses."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Collection, Mapping

from loguru import logger

from candlecheck.core.models.market import TRADE_WIRE_FIELDS

DEFAULT_SIDES = ("buy", "sell")
TRADES_METHOD = "public/get-trades"

_NUMERIC_FIELDS = ("d", "p", "q", "t")
_TEXT_FIELDS = ("s", "i")


def _trade_records(payload: Mapping[str, Any]) -> list[Any] | None:
    result = payload.get("result")
    if isinstance(result, list):
        return result
    if isinstance(result, Mapping) and isinstance(result.get("data"), list):
        return result["data"]
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def check_trades_format(payload: Any) -> list[str]:
    """Verify the response envelope and that every record carries typed wire fields.

    Returns a list of problems; an empty list means the format is valid.
    """
    if not isinstance(payload, Mapping):
        return ["response is not an object"]

    problems: list[str] = []
    if not isinstance(payload.get("code"), int) or isinstance(payload.get("code"), bool):
        problems.append("missing or non-integer 'code'")
    if not isinstance(payload.get("method"), str):
        problems.append("missing or non-string 'method'")
    records = _trade_records(payload)
    if records is None:
        problems.append("missing 'result' trade list")
        return problems

    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            problems.append(f"trade[{index}] is not an object")
            continue
        for key in TRADE_WIRE_FIELDS:
            value = record.get(key)
            if value is None:
                problems.append(f"trade[{index}] missing '{key}'")
            elif key in _NUMERIC_FIELDS and not _is_number(value):
                problems.append(f"trade[{index}] field '{key}' is not numeric")
            elif key in _TEXT_FIELDS and not isinstance(value, str):
                problems.append(f"trade[{index}] field '{key}' is not a string")

    if not problems:
        logger.info("Response format checker: success")
    return problems


def check_trades_content(
    payload: Mapping[str, Any],
    instruments: Collection[str],
    *,
    sides: Collection[str] = DEFAULT_SIDES,
    method: str = TRADES_METHOD,
) -> list[str]:
    """Verify status code, method name, and that sides/instruments are known values.

    An empty ``instruments`` collection disables the instrument check.
    """
    problems: list[str] = []
    if payload.get("code") != 0:
        problems.append(f"unexpected code {payload.get('code')!r}")
    if payload.get("method") != method:
        problems.append(f"unexpected method {payload.get('method')!r}")
    records = _trade_records(payload)
    if records is None:
        problems.append("missing 'result' trade list")
        return problems

    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            continue
        side = record.get("s")
        if side not in sides:
            problems.append(f"trade[{index}] unknown side {side!r}")
        instrument = record.get("i")
        if instruments and instrument not in instruments:
            problems.append(f"trade[{index}] unknown instrument {instrument!r}")

    if not problems:
        logger.info("Response content checker: success")
    return problems


__all__ = ["DEFAULT_SIDES", "TRADES_METHOD", "check_trades_content", "check_trades_format"]
