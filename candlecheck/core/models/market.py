"""Trade tape and candle models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping

from candlecheck.core.exceptions import IncompleteInputError

TradeId = int | str

TRADE_WIRE_FIELDS: dict[str, str] = {
    "d": "trade_id",
    "i": "instrument",
    "s": "side",
    "p": "price",
    "q": "quantity",
    "t": "timestamp",
}
CANDLE_WIRE_FIELDS: dict[str, str] = {
    "t": "timestamp",
    "o": "open",
    "h": "high",
    "l": "low",
    "c": "close",
}

NEGATIVE_INFINITY = Decimal("-Infinity")
POSITIVE_INFINITY = Decimal("Infinity")


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Convert a wire number to :class:`Decimal` without passing through binary floats."""

    if isinstance(value, bool):
        raise IncompleteInputError(f"Field '{field_name}' is not numeric", details={"value": value})
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise IncompleteInputError(f"Field '{field_name}' is not numeric", details={"value": str(value)}) from exc
    # NaN and Infinity cannot be ordered or summed exactly
    if not result.is_finite():
        raise IncompleteInputError(f"Field '{field_name}' is not a finite number", details={"value": str(value)})
    return result


def to_millis(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise IncompleteInputError(f"Field '{field_name}' is not a timestamp", details={"value": value})
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise IncompleteInputError(f"Field '{field_name}' is not a timestamp", details={"value": str(value)}) from exc


def _missing(record: Mapping[str, Any], wire_fields: Mapping[str, str]) -> list[str]:
    return [key for key in wire_fields if record.get(key) is None]


class WindowAnchor(str, Enum):
    """Which edge of its window a candle timestamp marks."""

    START = "start"
    END = "end"


@dataclass(frozen=True)
class Trade:
    """Single executed trade as reported by the trades API."""

    trade_id: TradeId
    instrument: str
    side: str
    timestamp: int
    price: Decimal
    quantity: Decimal

    @classmethod
    def from_wire(cls, record: Mapping[str, Any]) -> "Trade":
        """Decode a wire record, raising :class:`IncompleteInputError` on missing fields."""

        if not isinstance(record, Mapping):
            raise IncompleteInputError("Trade record is not an object", details={"record": str(record)})
        missing = _missing(record, TRADE_WIRE_FIELDS)
        if missing:
            raise IncompleteInputError(
                "Trade record is missing required fields",
                missing_fields=missing,
                details={"record": dict(record)},
            )
        trade_id = record["d"]
        if isinstance(trade_id, bool) or not isinstance(trade_id, (int, str)):
            raise IncompleteInputError(
                "Trade identifier must be an integer or string",
                details={"value": str(trade_id)},
            )
        return cls(
            trade_id=trade_id,
            instrument=str(record["i"]),
            side=str(record["s"]),
            timestamp=to_millis(record["t"], "t"),
            price=to_decimal(record["p"], "p"),
            quantity=to_decimal(record["q"], "q"),
        )


@dataclass(frozen=True)
class Candle:
    """Vendor-reported OHLCV candle."""

    instrument: str
    period: str
    timestamp: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal | None = None

    @classmethod
    def from_wire(cls, record: Mapping[str, Any], *, instrument: str, period: str) -> "Candle":
        if not isinstance(record, Mapping):
            raise IncompleteInputError("Candle record is not an object", details={"record": str(record)})
        missing = _missing(record, CANDLE_WIRE_FIELDS)
        if missing:
            raise IncompleteInputError(
                "Candle record is missing required fields",
                missing_fields=missing,
                details={"record": dict(record)},
            )
        volume = record.get("v")
        return cls(
            instrument=instrument,
            period=period,
            timestamp=to_millis(record["t"], "t"),
            open=to_decimal(record["o"], "o"),
            high=to_decimal(record["h"], "h"),
            low=to_decimal(record["l"], "l"),
            close=to_decimal(record["c"], "c"),
            volume=None if volume is None else to_decimal(volume, "v"),
        )


@dataclass(frozen=True, order=True)
class TimeWindow:
    """Half-open interval ``(begin, end]`` in epoch milliseconds."""

    begin: int
    end: int

    def __post_init__(self) -> None:
        if self.end < self.begin:
            raise ValueError("window end must not precede begin")

    @classmethod
    def for_candle(cls, timestamp: int, period_ms: int, anchor: WindowAnchor = WindowAnchor.START) -> "TimeWindow":
        if anchor is WindowAnchor.END:
            return cls(timestamp - period_ms, timestamp)
        return cls(timestamp, timestamp + period_ms)

    def contains(self, timestamp: int) -> bool:
        return self.begin < timestamp <= self.end

    def label(self) -> str:
        return f"({self.begin}-{self.end}]"


@dataclass
class Accumulator:
    """Running OHLCV state for one window."""

    open: Decimal | None = None
    close: Decimal | None = None
    high: Decimal = NEGATIVE_INFINITY
    low: Decimal = POSITIVE_INFINITY
    volume: Decimal = Decimal("0")
    trade_count: int = 0

    def fold(self, trade: Trade) -> None:
        if self.open is None:
            self.open = trade.price
        self.close = trade.price
        self.high = max(self.high, trade.price)
        self.low = min(self.low, trade.price)
        self.volume += trade.quantity
        self.trade_count += 1

    @property
    def is_empty(self) -> bool:
        return self.trade_count == 0


@dataclass(frozen=True)
class Mismatch:
    """A reported field that disagrees with the value derived from trades."""

    field: str
    computed: Decimal
    expected: Decimal

    def describe(self) -> str:
        return f"{self.field} doesn't match: {self.computed} (expected: {self.expected})"


__all__ = [
    "Accumulator",
    "CANDLE_WIRE_FIELDS",
    "Candle",
    "Mismatch",
    "TRADE_WIRE_FIELDS",
    "TimeWindow",
    "Trade",
    "TradeId",
    "WindowAnchor",
    "to_decimal",
]
