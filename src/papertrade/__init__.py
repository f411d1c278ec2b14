"""Paper-trading ledger and grade tracker console tools."""
