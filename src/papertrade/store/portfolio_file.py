from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Tuple

from .codec import DecodeReport, deserialize, serialize
from ..events.bus import emit, now_ms
from ..events.schema import PortfolioLoaded, PortfolioSaved, StoreFailed
from ..ledger.errors import ParseError, PersistenceError
from ..ledger.ledger import Ledger
from ..ledger.model import Transaction
from ..metrics.trading import get_store_operations_total


logger = logging.getLogger(__name__)


class PortfolioStore:
    """Single-file store for the ledger: one blocking read at startup, one write at exit."""

    def __init__(self, path: str = "portfolio.csv", strict: bool = False):
        self.path = path
        self.strict = strict
        self._ops = get_store_operations_total()

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def save(self, ledger: Ledger, transactions: Optional[Iterable[Transaction]] = None) -> str:
        text = serialize(ledger, transactions)
        try:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            self._failed("save", e)
            raise PersistenceError(f"Failed to save portfolio to {self.path}: {e}") from e
        self._ops.labels("save", "ok").inc()
        abs_path = os.path.abspath(self.path)
        logger.info(f"saved portfolio to {abs_path}")
        emit(PortfolioSaved(
            ts=now_ms(), path=abs_path, cash=ledger.cash,
            holdings=len(ledger.holdings), transactions=len(ledger.transactions),
        ))
        return abs_path

    def load(self, default_cash: float = 0.0) -> Tuple[Ledger, List[Transaction]]:
        report = DecodeReport()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
            ledger, transactions = deserialize(text, strict=self.strict, default_cash=default_cash, report=report)
        except ParseError as e:
            self._failed("load", e)
            raise
        except (OSError, UnicodeDecodeError) as e:
            self._failed("load", e)
            raise PersistenceError(f"Failed to load {self.path}: {e}") from e
        self._ops.labels("load", "ok").inc()
        logger.info(f"loaded portfolio from {self.path} (cash and holdings)")
        emit(PortfolioLoaded(
            ts=now_ms(), path=os.path.abspath(self.path), cash=ledger.cash,
            holdings=len(ledger.holdings), transactions=len(transactions),
            skipped_lines=len(report.skipped),
        ))
        return ledger, transactions

    def _failed(self, op: str, err: Exception) -> None:
        self._ops.labels(op, "error").inc()
        logger.error(f"portfolio {op} failed for {self.path}: {err}")
        try:
            emit(StoreFailed(ts=now_ms(), op=op, path=os.path.abspath(self.path), error=str(err)))
        except Exception:
            logger.debug("store failure event not published", exc_info=True)
