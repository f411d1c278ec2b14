import random

import pytest

from papertrade.market.catalog import PriceCatalog, Stock
from papertrade.market.drift import DriftSimulator


class FixedDraws:
    """RNG stand-in returning queued percentages in order."""

    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = []

    def uniform(self, a, b):
        self.calls.append((a, b))
        return self.draws.pop(0)


def test_drift_applies_draw_per_stock_in_order():
    cat = PriceCatalog([Stock("A", "A", 100.0), Stock("B", "B", 200.0)])
    rng = FixedDraws([0.05, -0.05])
    out = DriftSimulator(rng).apply(cat)
    assert out.price("A") == pytest.approx(105.0)
    assert out.price("B") == pytest.approx(190.0)
    assert rng.calls == [(-0.05, 0.05), (-0.05, 0.05)]


def test_drift_does_not_mutate_input():
    cat = PriceCatalog([Stock("A", "A", 100.0)])
    DriftSimulator(FixedDraws([0.05])).apply(cat)
    assert cat.price("A") == 100.0


def test_drift_floors_at_min_price():
    cat = PriceCatalog([Stock("A", "A", 1.0), Stock("B", "B", 1.02)])
    out = DriftSimulator(FixedDraws([-0.05, -0.05])).apply(cat)
    assert out.price("A") == 1.0
    assert out.price("B") == 1.0


def test_drift_never_below_one_over_many_rounds():
    cat = PriceCatalog([Stock("A", "A", 3.0), Stock("B", "B", 1400.0)])
    sim = DriftSimulator(random.Random(7))
    for _ in range(500):
        cat = sim.apply(cat)
        assert all(s.price >= 1.0 for s in cat)


def test_seeded_drift_is_deterministic():
    base = PriceCatalog.default()
    a = DriftSimulator(random.Random(42)).apply(base)
    b = DriftSimulator(random.Random(42)).apply(base)
    assert a.prices() == b.prices()
    for sym, px in a.prices().items():
        assert 0.95 * base.price(sym) <= px <= 1.05 * base.price(sym)


def test_drift_rejects_bad_bounds():
    with pytest.raises(ValueError):
        DriftSimulator(max_pct=-0.1)
    with pytest.raises(ValueError):
        DriftSimulator(min_price=0.0)


def test_catalog_lookup_is_case_insensitive():
    cat = PriceCatalog.default()
    assert "infy" in cat
    assert cat.get("tcs").name == "Tata Consultancy"
    assert cat.symbols() == ["INFY", "TCS", "RELI", "HDFC", "ICIC"]
    assert cat.price("NOPE") is None


def test_catalog_rejects_non_positive_price():
    with pytest.raises(ValueError):
        PriceCatalog([Stock("A", "A", 0.0)])
