from __future__ import annotations

from typing import Optional
import logging
import os
from prometheus_client import Counter, Gauge, REGISTRY, start_http_server

_trades_executed: Optional[Counter] = None
_trades_rejected: Optional[Counter] = None
_traded_notional: Optional[Counter] = None
_cash_balance: Optional[Gauge] = None
_portfolio_value: Optional[Gauge] = None
_drift_applied: Optional[Counter] = None
_store_operations: Optional[Counter] = None


class _NoOp:
    def labels(self, *args, **kwargs):
        return self
    def inc(self, *args, **kwargs):
        return None
    def set(self, *args, **kwargs):
        return None


def _disabled() -> bool:
    return os.getenv("DISABLE_PROMETHEUS", "0") == "1"


def _existing(name: str):
    # Re-registration raises ValueError; reuse the collector already in REGISTRY
    coll = getattr(REGISTRY, "_names_to_collectors", {}).get(name)
    if coll is not None:
        return coll
    for coll in list(getattr(REGISTRY, "_collector_to_names", {}).keys()):
        if getattr(coll, "_name", None) == name:
            return coll
    return None


def _safe_counter(name: str, doc: str, labelnames=()):
    if _disabled():
        return _NoOp()
    try:
        return Counter(name, doc, labelnames)
    except ValueError:
        return _existing(name) or _existing(name + "_total") or _NoOp()


def _safe_gauge(name: str, doc: str, labelnames=()):
    if _disabled():
        return _NoOp()
    try:
        return Gauge(name, doc, labelnames)
    except ValueError:
        return _existing(name) or _NoOp()


def get_trades_executed_total():
    global _trades_executed
    if _trades_executed is None:
        _trades_executed = _safe_counter("trades_executed_total", "Trades executed", ["side", "symbol"])
    return _trades_executed


def get_trades_rejected_total():
    global _trades_rejected
    if _trades_rejected is None:
        _trades_rejected = _safe_counter("trades_rejected_total", "Trades rejected", ["reason"])
    return _trades_rejected


def get_traded_notional_total():
    global _traded_notional
    if _traded_notional is None:
        _traded_notional = _safe_counter("traded_notional_total", "Notional traded", ["side"])
    return _traded_notional


def get_cash_balance_gauge():
    global _cash_balance
    if _cash_balance is None:
        _cash_balance = _safe_gauge("cash_balance", "Ledger cash balance")
    return _cash_balance


def get_portfolio_value_gauge():
    global _portfolio_value
    if _portfolio_value is None:
        _portfolio_value = _safe_gauge("portfolio_value", "Cash plus holdings at catalog prices")
    return _portfolio_value


def get_drift_applied_total():
    global _drift_applied
    if _drift_applied is None:
        _drift_applied = _safe_counter("drift_applied_total", "Market drift simulations applied")
    return _drift_applied


def get_store_operations_total():
    """Counter: portfolio store reads/writes labeled by op (save|load) and outcome (ok|error)."""
    global _store_operations
    if _store_operations is None:
        _store_operations = _safe_counter(
            "store_operations_total", "Portfolio store operations", ["op", "outcome"]
        )
    return _store_operations


def set_portfolio_gauges(cash: float, value: Optional[float] = None) -> None:
    get_cash_balance_gauge().set(float(cash))
    if value is not None:
        get_portfolio_value_gauge().set(float(value))


def start_metrics_server(port: Optional[int]) -> Optional[int]:
    """Expose metrics over HTTP; return the bound port, or None when disabled or the bind fails."""
    if not port or _disabled():
        return None
    try:
        start_http_server(int(port))
    except OSError as e:
        logging.warning(f"Failed to start Prometheus server on :{port}: {e}")
        return None
    logging.info(f"Prometheus metrics server started on :{port}")
    return int(port)
