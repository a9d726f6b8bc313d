"""Client ledger HTTP API: statements and overdraft-limited transactions."""

__version__ = "0.1.0"
