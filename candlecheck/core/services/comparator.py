"""Decimal-exact comparison of reported candles against recomputed aggregates."""

from __future__ import annotations

from decimal import Decimal

from candlecheck.core.models.market import Accumulator, Candle, Mismatch

PRICE_FIELDS = ("open", "close", "high", "low")


def _differs(computed: Decimal, expected: Decimal) -> bool:
    # compare() ignores representation: Decimal("10") equals Decimal("10.00")
    return computed.compare(expected) != 0


def compare(candle: Candle, accumulator: Accumulator) -> list[Mismatch]:
    """Return the fields of ``candle`` that disagree with ``accumulator``.

    An empty accumulator carries no ground truth and yields no mismatches.
    Volume is only checked when the candle reports it.
    """
    if accumulator.is_empty:
        return []

    mismatches: list[Mismatch] = []
    for field_name in PRICE_FIELDS:
        computed = getattr(accumulator, field_name)
        if computed is None:
            continue
        expected = getattr(candle, field_name)
        if _differs(computed, expected):
            mismatches.append(Mismatch(field=field_name, computed=computed, expected=expected))

    if candle.volume is not None and _differs(accumulator.volume, candle.volume):
        mismatches.append(Mismatch(field="volume", computed=accumulator.volume, expected=candle.volume))
    return mismatches


__all__ = ["PRICE_FIELDS", "compare"]
