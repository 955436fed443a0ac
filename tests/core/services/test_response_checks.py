from __future__ import annotations

from candlecheck.core.services.response_checks import check_trades_content, check_trades_format


def test_well_formed_response_has_no_problems(make_trade, trades_payload) -> None:
    payload = trades_payload(make_trade(1, 1500, "10", "1"), make_trade(2, 1600, "11", "2", side="sell"))

    assert check_trades_format(payload) == []
    assert check_trades_content(payload, ["BTC_USDT", "ETH_CRO"]) == []


def test_result_may_be_a_bare_list(make_trade) -> None:
    payload = {"code": 0, "method": "public/get-trades", "result": [make_trade(1, 1500, "10", "1")]}

    assert check_trades_format(payload) == []


def test_format_problems_are_listed(make_trade) -> None:
    record = make_trade(1, 1500, "10", "1")
    record["p"] = "ten"
    del record["s"]
    payload = {"code": "0", "result": {"data": [record, "junk"]}}

    problems = check_trades_format(payload)

    assert "missing or non-integer 'code'" in problems
    assert "missing or non-string 'method'" in problems
    assert "trade[0] missing 's'" in problems
    assert "trade[0] field 'p' is not numeric" in problems
    assert "trade[1] is not an object" in problems


def test_missing_trade_list_is_a_format_problem() -> None:
    assert check_trades_format({"code": 0, "method": "public/get-trades"}) == ["missing 'result' trade list"]
    assert check_trades_format([]) == ["response is not an object"]


def test_content_rejects_unknown_values(make_trade) -> None:
    payload = {
        "code": 1,
        "method": "public/get-book",
        "result": {"data": [make_trade(1, 1500, "10", "1", instrument="DOGE_USD", side="hold")]},
    }

    problems = check_trades_content(payload, ["BTC_USDT"])

    assert problems == [
        "unexpected code 1",
        "unexpected method 'public/get-book'",
        "trade[0] unknown side 'hold'",
        "trade[0] unknown instrument 'DOGE_USD'",
    ]


def test_empty_instrument_list_disables_instrument_check(make_trade, trades_payload) -> None:
    payload = trades_payload(make_trade(1, 1500, "10", "1", instrument="ANY_THING"))

    assert check_trades_content(payload, []) == []
