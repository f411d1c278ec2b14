"""
Main entrypoint for papertrade.

What it does:
- Loads settings from `config/config.yaml` and environment overrides.
- Builds a `TradingSession` (price catalog, ledger, drift simulator, store),
  restoring the ledger from the store file when one exists.
- Runs the menu loop: view market, buy, sell, portfolio, history, simulate
  drift, save & exit, export history.

Where it is used:
- Invoked by the `papertrade` console script or `python -m papertrade.main`.

Every failure inside a command is reported and the loop continues; a failed
save is reported and the process still exits normally.
"""
import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from papertrade.config.loader import Settings, load_settings
from papertrade.ledger.errors import PersistenceError, TradeError
from papertrade.ledger.ledger import Ledger
from papertrade.market.catalog import PriceCatalog
from papertrade.market.drift import DriftSimulator
from papertrade.metrics.trading import start_metrics_server
from papertrade.events.bus import emit, now_ms
from papertrade.events.schema import MarketDrifted
from papertrade.reports.generate import export_transactions_csv
from papertrade.store.portfolio_file import PortfolioStore

log = logging.getLogger("papertrade.main")

MENU = """
Menu:
1. View market data
2. Buy stock
3. Sell stock
4. View portfolio & cash balance
5. View transaction history
6. Simulate market price movement
7. Save & Exit
8. Export transaction history (CSV)"""


@dataclass
class TradingSession:
    settings: Settings
    catalog: PriceCatalog
    ledger: Ledger
    drift: DriftSimulator
    store: PortfolioStore


def build_session(settings: Settings, rng: Optional[random.Random] = None, out: Callable[[str], None] = print) -> TradingSession:
    catalog = settings.catalog()
    drift = DriftSimulator(
        rng if rng is not None else random.Random(settings.drift.seed),
        max_pct=settings.drift.max_pct,
        min_price=settings.drift.min_price,
    )
    store = PortfolioStore(settings.store_path, strict=settings.strict_load)
    ledger = Ledger(cash=settings.starting_cash)
    if store.exists():
        try:
            ledger, _ = store.load(default_cash=settings.starting_cash)
            out(f"Loaded portfolio from {settings.store_path} (cash and holdings).")
        except PersistenceError as e:
            out(f"Failed to load {settings.store_path}: {e}")
            ledger = Ledger(cash=settings.starting_cash)
    return TradingSession(settings=settings, catalog=catalog, ledger=ledger, drift=drift, store=store)


# ---- commands ----

def view_market(session: TradingSession, ask, out) -> None:
    out("\n-- Market --")
    for s in session.catalog:
        out(f"{s.symbol} | {s.name} | Price: {s.price:.2f}")
    out("(Tip: use Simulate market price movement to change prices.)")


def _read_quantity(ask, prompt: str, out) -> Optional[int]:
    raw = ask(prompt).strip()
    try:
        return int(raw)
    except ValueError:
        out("Invalid number.")
        return None


def buy(session: TradingSession, ask, out) -> None:
    sym = ask("Enter symbol to BUY: ").strip().upper()
    if sym not in session.catalog:
        out("Unknown symbol.")
        return
    qty = _read_quantity(ask, "Quantity to buy (integer): ", out)
    if qty is None:
        return
    try:
        res = session.ledger.buy(sym, qty, catalog=session.catalog)
    except TradeError as e:
        out(str(e))
        return
    t = res.transaction
    out(f"Bought {t.qty} {sym} @ {t.price:.2f}. New cash: {res.cash:.2f}")


def sell(session: TradingSession, ask, out) -> None:
    sym = ask("Enter symbol to SELL: ").strip().upper()
    if sym not in session.catalog:
        out("Unknown symbol.")
        return
    if session.ledger.quantity(sym) == 0:
        out(f"You don't own any shares of {sym}")
        return
    qty = _read_quantity(ask, "Quantity to sell (integer): ", out)
    if qty is None:
        return
    try:
        res = session.ledger.sell(sym, qty, catalog=session.catalog)
    except TradeError as e:
        out(str(e))
        return
    t = res.transaction
    out(f"Sold {abs(t.qty)} {sym} @ {t.price:.2f}. New cash: {res.cash:.2f}")


def view_portfolio(session: TradingSession, ask, out) -> None:
    ledger = session.ledger
    out("\n-- Portfolio --")
    out(f"Cash: {ledger.cash:.2f}")
    holdings = ledger.holdings
    if not holdings:
        out("No holdings.")
        return
    out("Holdings:")
    for sym, qty in holdings.items():
        price = session.catalog.price(sym, 0.0) or 0.0
        out(f"{sym}: {qty} shares | Price: {price:.2f} | Value: {qty * price:.2f}")
    out(f"Total portfolio value (cash + holdings): {ledger.valuation(session.catalog):.2f}")


def view_history(session: TradingSession, ask, out) -> None:
    out("\n-- Transaction History --")
    txs = session.ledger.transactions
    if not txs:
        out("No transactions.")
        return
    for t in txs:
        out(t.describe())


def simulate_drift(session: TradingSession, ask, out) -> None:
    out("Simulating market movement...")
    session.catalog = session.drift.apply(session.catalog)
    emit(MarketDrifted(ts=now_ms(), prices=session.catalog.prices()))
    out("Market updated.")
    view_market(session, ask, out)


def save(session: TradingSession, ask, out) -> bool:
    try:
        path = session.store.save(session.ledger)
    except PersistenceError as e:
        out(str(e))
        return False
    out(f"Saved portfolio to {path}")
    return True


def export_history(session: TradingSession, ask, out) -> None:
    try:
        path = export_transactions_csv(session.ledger.transactions, session.settings.export_path)
    except OSError as e:
        log.error(f"export failed: {e}")
        out(f"Failed to export history: {e}")
        return
    out(f"Exported {len(session.ledger.transactions)} transaction(s) to {path}")


COMMANDS = {
    "1": view_market,
    "2": buy,
    "3": sell,
    "4": view_portfolio,
    "5": view_history,
    "6": simulate_drift,
    "8": export_history,
}


def run(session: TradingSession, ask: Callable[[str], str] = input, out: Callable[[str], None] = print) -> None:
    out("=== Simple Stock Trading Platform ===")
    while True:
        out(MENU)
        try:
            choice = ask("Choose: ").strip()
            if choice == "7":
                break
            handler = COMMANDS.get(choice)
            if handler is None:
                out("Invalid choice.")
                continue
            handler(session, ask, out)
        except EOFError:
            out("")
            break
    saved = save(session, ask, out)
    if saved:
        out(f"Exiting. Portfolio saved to {session.settings.store_path}. Goodbye!")
    else:
        out("Exiting without saving. Goodbye!")


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")
    log.info(f"store: {settings.store_path}, starting cash: {settings.starting_cash:.2f}")
    start_metrics_server(settings.metrics_port)
    session = build_session(settings)
    run(session)


if __name__ == "__main__":
    main()
