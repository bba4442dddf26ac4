"""Ledger core for budgetbot."""


# Import the facade lazily: database.base imports domain.entities, which
# runs this module first
def __getattr__(name):
    if name == "Ledger":
        from budgetbot.domain.ledger import Ledger
        return Ledger
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
