"""
Configuration loader for papertrade.

What it does:
- Reads static settings from `config/config.yaml` when present; a missing file
  yields the built-in defaults (five stocks, 10,000 starting cash,
  `portfolio.csv` store).
- Applies environment overrides: `PAPERTRADE_STORE_PATH`,
  `PAPERTRADE_STARTING_CASH`, `PAPERTRADE_LOG_LEVEL`, `PROMETHEUS_PORT`.
- Validates the result with Pydantic models.

Where it is used:
- `papertrade.main` builds a `Settings` object and from it the catalog,
  drift simulator and portfolio store of a trading session.
"""

import os
import yaml
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator

from ..market.catalog import DEFAULT_STOCKS, PriceCatalog, Stock


class StockConfig(BaseModel):
    symbol: str
    name: str
    price: float

    @field_validator("price")
    @classmethod
    def positive(cls, v):
        if v <= 0:
            raise ValueError(f"stock price must be positive, got {v}")
        return v


class DriftConfig(BaseModel):
    """Bounds for simulated market movement."""
    max_pct: float = 0.05
    min_price: float = 1.0
    seed: Optional[int] = None


class Settings(BaseModel):
    """Runtime settings assembled from YAML + environment variables."""
    starting_cash: float = 10_000.0
    store_path: str = "portfolio.csv"
    export_path: str = "transactions.csv"
    strict_load: bool = False
    log_level: str = "INFO"
    metrics_port: Optional[int] = None
    drift: DriftConfig = Field(default_factory=DriftConfig)
    stocks: List[StockConfig] = Field(
        default_factory=lambda: [StockConfig(symbol=s.symbol, name=s.name, price=s.price) for s in DEFAULT_STOCKS]
    )

    @field_validator("starting_cash")
    @classmethod
    def non_negative(cls, v):
        if v < 0:
            raise ValueError(f"starting_cash must be >= 0, got {v}")
        return v

    def catalog(self) -> PriceCatalog:
        return PriceCatalog(Stock(s.symbol, s.name, s.price) for s in self.stocks)


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if os.getenv("PAPERTRADE_STORE_PATH"):
        out["store_path"] = os.environ["PAPERTRADE_STORE_PATH"]
    if os.getenv("PAPERTRADE_STARTING_CASH"):
        out["starting_cash"] = float(os.environ["PAPERTRADE_STARTING_CASH"])
    if os.getenv("PAPERTRADE_LOG_LEVEL"):
        out["log_level"] = os.environ["PAPERTRADE_LOG_LEVEL"]
    if os.getenv("PROMETHEUS_PORT"):
        out["metrics_port"] = int(os.environ["PROMETHEUS_PORT"])
    return out


def load_settings(path: str = "config/config.yaml") -> Settings:
    """Load YAML config (if present), apply env overrides, and return Settings."""
    config: Dict[str, Any] = {}
    if os.path.exists(path):
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
    config.update(_env_overrides())
    return Settings(**config)
