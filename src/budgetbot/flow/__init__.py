"""Flow engine: per-user chat wizards on top of the ledger."""
