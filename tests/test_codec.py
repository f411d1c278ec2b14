from datetime import datetime
import logging

import pytest

from papertrade.ledger.errors import ParseError
from papertrade.ledger.history import TransactionLog
from papertrade.ledger.ledger import Ledger
from papertrade.ledger.model import Transaction
from papertrade.store.codec import DecodeReport, deserialize, serialize


def test_roundtrip_cash_holdings_and_buy():
    t = Transaction(datetime(2024, 3, 4, 10, 11, 12, 345678), "AAA", 3, 166.75, "BUY")
    led = Ledger(cash=500.25, holdings={"AAA": 3}, history=TransactionLog([t]))
    text = serialize(led, [t])
    led2, txs2 = deserialize(text)
    assert led2.cash == 500.25
    assert led2.holdings == {"AAA": 3}
    assert txs2 == [t]
    assert txs2[0].timestamp == t.timestamp
    assert (led2, txs2) == (led, [t])


def test_serialize_layout():
    t = Transaction(datetime(2024, 1, 2, 3, 4, 5), "SYM", -2, 1450.0, "SELL")
    led = Ledger(cash=10100.0, holdings={"AAA": 1})
    assert serialize(led, [t]).splitlines() == [
        "cash,10100.0",
        "holdings",
        "AAA,1",
        "transactions",
        "2024-01-02T03:04:05,SYM,-2,1450.0,SELL",
    ]


def test_roundtrip_preserves_awkward_floats_and_order():
    txs = [
        Transaction(datetime(2024, 1, 1, 0, 0, 0, 1), "B", 7, 0.1 + 0.2, "BUY"),
        Transaction(datetime(2024, 1, 1, 0, 0, 1), "A", 1, 1e-3, "BUY"),
        Transaction(datetime(2024, 1, 1, 0, 0, 2), "B", -7, 1234.5678901234, "SELL"),
    ]
    led = Ledger(cash=1 / 3, holdings={"A": 1})
    led2, txs2 = deserialize(serialize(led, txs))
    assert led2 == led
    assert txs2 == txs


def test_serialize_defaults_to_ledger_history():
    led = Ledger(cash=100.0, clock=lambda: datetime(2024, 6, 1, 12, 0))
    led.buy("AAA", 2, 10.0)
    text = serialize(led)
    assert "2024-06-01T12:00:00,AAA,2,10.0,BUY" in text


def test_lenient_skips_malformed_lines():
    text = "\n".join([
        "cash,42.5",
        "HOLDINGS",
        "AAA,3",
        "BBB",
        "CCC,notanint",
        "DDD,1,2",
        "",
        "Transactions",
        "2024-01-01T00:00:00,AAA,3,10.0,BUY",
        "2024-01-01T00:00:00,AAA,3,10.0",
        "not-a-date,AAA,3,10.0,BUY",
        "2024-01-01T00:00:00,AAA,0,10.0,BUY",
        "2024-01-01T00:00:00,AAA,3,10.0,HOLD",
        "2024-01-01T00:00:00,AAA,-3,10.0,BUY",
    ])
    report = DecodeReport()
    led, txs = deserialize(text, report=report)
    assert led.cash == 42.5
    assert led.holdings == {"AAA": 3}
    assert len(txs) == 1
    assert [n for n, _ in report.skipped] == [4, 5, 6, 10, 11, 12, 13, 14]


def test_lines_before_first_marker_are_ignored():
    text = "portfolio export v1\nAAA,5\ncash,99.0\nholdings\nAAA,5\n"
    led, txs = deserialize(text)
    assert led.cash == 99.0
    assert led.holdings == {"AAA": 5}
    assert txs == []


def test_missing_cash_uses_default(caplog):
    caplog.set_level(logging.WARNING)
    rep = DecodeReport()
    led, _ = deserialize("holdings\nAAA,1\ntransactions\n", default_cash=10_000.0, report=rep)
    assert led.cash == 10_000.0
    assert rep.saw_cash is False
    assert "no cash line" in caplog.text


def test_marker_lines_with_whitespace_switch_state():
    led, txs = deserialize("cash,1.0\n  holdings  \nAAA,2\n\ttransactions\n")
    assert led.holdings == {"AAA": 2}


def test_strict_mode_raises_with_line_number():
    with pytest.raises(ParseError) as exc:
        deserialize("cash,1.0\nholdings\nAAA\n", strict=True)
    assert exc.value.line_no == 3


def test_strict_mode_accepts_clean_input():
    t = Transaction(datetime(2024, 1, 1), "AAA", 1, 2.0, "BUY")
    led = Ledger(cash=3.0, holdings={"AAA": 1})
    led2, txs = deserialize(serialize(led, [t]), strict=True)
    assert led2 == led and txs == [t]


def test_empty_text_gives_empty_ledger():
    led, txs = deserialize("")
    assert led.cash == 0.0
    assert led.holdings == {}
    assert txs == []


@pytest.mark.parametrize("value", ["nan", "inf", "-inf", "NaN"])
def test_non_finite_cash_is_skipped(value):
    rep = DecodeReport()
    led, _ = deserialize(f"cash,{value}\nholdings\n", default_cash=7.0, report=rep)
    assert led.cash == 7.0
    assert rep.skipped == [(1, f"cash,{value}")]
    assert rep.saw_cash is False
    with pytest.raises(ParseError):
        deserialize(f"cash,{value}\n", strict=True)


def test_cash_line_is_reported_when_present(caplog):
    caplog.set_level(logging.WARNING)
    rep = DecodeReport()
    deserialize("cash,1.5\nholdings\n", report=rep)
    assert rep.saw_cash is True
    assert "no cash line" not in caplog.text


@pytest.mark.parametrize("symbol", ["A,B", " AAA", "", "A\nB"])
def test_serialize_refuses_symbols_the_format_cannot_hold(symbol):
    with pytest.raises(ValueError):
        serialize(Ledger(cash=1.0, holdings={symbol: 1}))
    t = Transaction(datetime(2024, 1, 1), symbol, 1, 2.0, "BUY")
    with pytest.raises(ValueError):
        serialize(Ledger(cash=1.0), [t])


def test_roundtrip_of_ledger_built_by_trading():
    led = Ledger(cash=1000.0, clock=lambda: datetime(2024, 2, 2, 9, 0))
    led.buy("AAA", 3, 12.5)
    led.buy("B.X", 1, 99.99)
    led.sell("AAA", 1, 13.0)
    led2, txs = deserialize(serialize(led), strict=True)
    assert led2 == led
    assert txs == list(led.transactions)
