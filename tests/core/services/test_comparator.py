from __future__ import annotations

from decimal import Decimal

from candlecheck.core.models.market import Accumulator, Candle, Mismatch
from candlecheck.core.services.comparator import compare


def _candle(open_: str, high: str, low: str, close: str, volume: str | None = None) -> Candle:
    return Candle(
        instrument="BTC_USDT",
        period="1m",
        timestamp=1000,
        open=Decimal(open_),
        high=Decimal(high),
        low=Decimal(low),
        close=Decimal(close),
        volume=None if volume is None else Decimal(volume),
    )


def _accumulator(open_: str, high: str, low: str, close: str, volume: str) -> Accumulator:
    return Accumulator(
        open=Decimal(open_),
        close=Decimal(close),
        high=Decimal(high),
        low=Decimal(low),
        volume=Decimal(volume),
        trade_count=1,
    )


def test_matching_candle_has_no_mismatches() -> None:
    assert compare(_candle("10", "12", "9", "9", "4"), _accumulator("10", "12", "9", "9", "4")) == []


def test_open_mismatch_reports_computed_and_expected() -> None:
    mismatches = compare(
        _candle("10", "10.01", "10.01", "10.01", "1"),
        _accumulator("10.01", "10.01", "10.01", "10.01", "1"),
    )

    assert mismatches == [Mismatch(field="open", computed=Decimal("10.01"), expected=Decimal("10"))]


def test_trailing_zeros_are_not_a_mismatch() -> None:
    assert compare(_candle("10.00", "12.0", "9", "9.000", "4.0"), _accumulator("10", "12", "9", "9", "4")) == []


def test_volume_is_skipped_when_not_reported() -> None:
    assert compare(_candle("10", "12", "9", "9"), _accumulator("10", "12", "9", "9", "999")) == []


def test_volume_mismatch_when_reported() -> None:
    mismatches = compare(_candle("10", "12", "9", "9", "5"), _accumulator("10", "12", "9", "9", "4"))

    assert [mismatch.field for mismatch in mismatches] == ["volume"]


def test_empty_accumulator_never_mismatches() -> None:
    assert compare(_candle("10", "12", "9", "9", "4"), Accumulator()) == []


def test_several_fields_reported_in_order() -> None:
    mismatches = compare(_candle("1", "2", "3", "4", "5"), _accumulator("10", "20", "30", "40", "50"))

    assert [mismatch.field for mismatch in mismatches] == ["open", "close", "high", "low", "volume"]
    assert mismatches[0].describe() == "open doesn't match: 10 (expected: 1)"
