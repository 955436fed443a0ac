from __future__ import annotations

from typing import Any, Mapping, Sequence

import pytest

from candlecheck.core.exceptions import CollectorError, IncompleteInputError
from candlecheck.core.services.collector import TradeCollector, compute_rounds


class ScriptedFetcher:
    """Returns queued payloads, or raises queued exceptions, one per call."""

    def __init__(self, responses: Sequence[Mapping[str, Any] | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, instrument: str, period: str) -> Mapping[str, Any]:
        self.calls.append((instrument, period))
        response = self._responses[min(len(self.calls), len(self._responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.mark.parametrize(
    ("period_ms", "expected"),
    [
        (60_000, 10),
        (3_600_000, 10),
        (10_000, 5),
        (2_000, 1),
        (1_000, 1),
        (0, 1),
    ],
)
def test_compute_rounds_is_bounded(period_ms: int, expected: int) -> None:
    assert compute_rounds(period_ms, 2000, 10) == expected


@pytest.mark.asyncio
async def test_repeated_identifiers_are_merged_once(make_trade, trades_payload, no_sleep) -> None:
    poll_one = trades_payload(make_trade(1, 1500, "10", "1"), make_trade(2, 1600, "11", "1"))
    poll_two = trades_payload(make_trade(3, 1700, "12", "2"), make_trade(4, 1800, "13", "2"))
    poll_three = trades_payload(make_trade(1, 1500, "10", "1"), make_trade(2, 1600, "11", "1"))
    fetcher = ScriptedFetcher([poll_one, poll_two, poll_three])
    collector = TradeCollector(fetcher, sleep=no_sleep)

    trades = await collector.collect("BTC_USDT", "1m", period_ms=60_000, rounds=3)

    assert sorted(trades) == [1, 2, 3, 4]
    assert len(fetcher.calls) == 3
    assert no_sleep.delays == [2.0, 2.0, 2.0]


@pytest.mark.asyncio
async def test_first_payload_wins_for_duplicate_identifier(make_trade, trades_payload, no_sleep) -> None:
    fetcher = ScriptedFetcher(
        [
            trades_payload(make_trade(7, 1500, "10", "1")),
            trades_payload(make_trade(7, 1500, "99", "5")),
        ]
    )
    collector = TradeCollector(fetcher, sleep=no_sleep)

    trades = await collector.collect("BTC_USDT", "1m", period_ms=60_000, rounds=2)

    assert len(trades) == 1
    assert str(trades[7].price) == "10"


@pytest.mark.asyncio
async def test_rounds_default_to_period_bound(trades_payload, no_sleep) -> None:
    fetcher = ScriptedFetcher([trades_payload()])
    collector = TradeCollector(fetcher, interval_ms=2000, max_rounds=10, sleep=no_sleep)

    await collector.collect("BTC_USDT", "1m", period_ms=60_000)
    assert len(fetcher.calls) == 10

    short = ScriptedFetcher([trades_payload()])
    await TradeCollector(short, sleep=no_sleep).collect("BTC_USDT", "1s", period_ms=1_000)
    assert len(short.calls) == 1


@pytest.mark.asyncio
async def test_failure_aborts_remaining_rounds(make_trade, trades_payload, no_sleep) -> None:
    error = CollectorError("http status is not 200: 503", "getTrades", status_code=503)
    fetcher = ScriptedFetcher([trades_payload(make_trade(1, 1500, "10", "1")), error, trades_payload()])
    collector = TradeCollector(fetcher, sleep=no_sleep)

    with pytest.raises(CollectorError) as excinfo:
        await collector.collect("BTC_USDT", "1m", period_ms=60_000, rounds=5)

    assert excinfo.value is error
    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_non_success_code_is_a_collector_failure(no_sleep) -> None:
    fetcher = ScriptedFetcher([{"code": 10004, "method": "public/get-trades", "result": {"data": []}}])
    collector = TradeCollector(fetcher, sleep=no_sleep)

    with pytest.raises(CollectorError) as excinfo:
        await collector.collect("BTC_USDT", "1m", period_ms=60_000, rounds=1)

    assert excinfo.value.details["code"] == 10004


@pytest.mark.asyncio
async def test_record_missing_fields_is_incomplete(make_trade, trades_payload, no_sleep) -> None:
    broken = make_trade(1, 1500, "10", "1")
    del broken["q"]
    fetcher = ScriptedFetcher([trades_payload(broken)])
    collector = TradeCollector(fetcher, sleep=no_sleep)

    with pytest.raises(IncompleteInputError) as excinfo:
        await collector.collect("BTC_USDT", "1m", period_ms=60_000, rounds=1)

    assert excinfo.value.missing_fields == ["q"]


def test_collector_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        TradeCollector(ScriptedFetcher([]), interval_ms=0)


@pytest.mark.asyncio
async def test_foreign_fetch_error_is_wrapped(no_sleep) -> None:
    cause = ConnectionError("reset")
    fetcher = ScriptedFetcher([cause])
    collector = TradeCollector(fetcher, sleep=no_sleep)

    with pytest.raises(CollectorError) as excinfo:
        await collector.collect("BTC_USDT", "1m", period_ms=60_000, rounds=3)

    assert excinfo.value.__cause__ is cause
    assert excinfo.value.api_name == "getTrades"
    assert len(fetcher.calls) == 1
