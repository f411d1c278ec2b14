import pytest

from papertrade.config.loader import Settings, load_settings


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    for var in ("PAPERTRADE_STORE_PATH", "PAPERTRADE_STARTING_CASH", "PAPERTRADE_LOG_LEVEL", "PROMETHEUS_PORT"):
        monkeypatch.delenv(var, raising=False)
    s = load_settings(str(tmp_path / "nope.yaml"))
    assert s.starting_cash == 10_000.0
    assert s.store_path == "portfolio.csv"
    assert s.drift.max_pct == 0.05 and s.drift.min_price == 1.0
    cat = s.catalog()
    assert cat.symbols() == ["INFY", "TCS", "RELI", "HDFC", "ICIC"]
    assert cat.price("INFY") == 1400.0


def test_yaml_and_env_overrides(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "starting_cash: 500\n"
        "drift: {max_pct: 0.1, seed: 3}\n"
        "stocks:\n"
        "  - {symbol: aaa, name: Triple A, price: 12.5}\n"
    )
    monkeypatch.setenv("PAPERTRADE_STORE_PATH", str(tmp_path / "p.csv"))
    monkeypatch.setenv("PAPERTRADE_STARTING_CASH", "750.5")
    monkeypatch.delenv("PROMETHEUS_PORT", raising=False)
    s = load_settings(str(cfg))
    assert s.starting_cash == 750.5
    assert s.store_path == str(tmp_path / "p.csv")
    assert s.drift.max_pct == 0.1 and s.drift.seed == 3
    assert s.catalog().price("AAA") == 12.5


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        Settings(starting_cash=-1)
    with pytest.raises(ValueError):
        Settings(stocks=[{"symbol": "X", "name": "X", "price": 0}])
