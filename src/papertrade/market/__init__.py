"""Market package.

Public API:
- Stock, PriceCatalog: the simulated price list.
- DriftSimulator: bounded random price moves with an injected RNG.
"""

from .catalog import Stock, PriceCatalog, DEFAULT_STOCKS  # re-export
from .drift import DriftSimulator

__all__ = ["Stock", "PriceCatalog", "DEFAULT_STOCKS", "DriftSimulator"]
