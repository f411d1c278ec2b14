import json
import logging

from papertrade.events.schema import EventEnvelope, TradeExecuted, TradeRejected, MarketDrifted
from papertrade.events import bus


def test_event_envelope_roundtrip():
    evt = TradeExecuted(ts=1, symbol="INFY", side="BUY", qty=2, price=1400.0, cash_after=7200.0)
    env = EventEnvelope(correlation_id="c1", event=evt)
    js = env.model_dump_json()
    assert "trade_executed" in js


def test_emit_logs_single_json_line(caplog):
    caplog.set_level(logging.INFO, logger="papertrade.events")
    env1 = bus.emit(TradeRejected(ts=2, symbol="INFY", side="SELL", reason="no_holdings", qty=1))
    env2 = bus.emit(MarketDrifted(ts=3, prices={"INFY": 1401.0}))
    assert env2.sequence > env1.sequence
    assert env1.correlation_id == "trade_rejected:INFY"
    lines = [r.getMessage() for r in caplog.records if r.name == "papertrade.events"]
    payload = json.loads(lines[-2])
    assert payload["event"]["reason"] == "no_holdings"
    assert json.loads(lines[-1])["event"]["prices"] == {"INFY": 1401.0}
