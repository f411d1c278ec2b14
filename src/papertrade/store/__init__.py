"""Persistence package.

Public API:
- serialize / deserialize: the sectioned text format for a saved ledger.
- PortfolioStore: file-backed save/load raising PersistenceError on I/O failure.
"""

from .codec import serialize, deserialize, DecodeReport, ParseState  # re-export
from .portfolio_file import PortfolioStore
