"""Exceptions raised by the stock ledger and the flows that use it."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stockledger.services.mutation_guard import IdentityChangeDecision
    from stockledger.services.stock_validator import StockValidationResult


class TransientStoreError(Exception):
    """Raised when a movement collection could not be read.

    The original database error is chained as ``__cause__``. Callers must
    treat this as "unknown", never as an empty ledger.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Stock store unavailable while {operation}")


class PartialLedgerError(Exception):
    """Raised when a display-only (partial) snapshot reaches a stock decision."""

    def __init__(self):
        super().__init__("Partial ledger snapshots cannot be used for validation or mutation checks")


class InsufficientStock(ValueError):
    """Raised by outflow flows to abort a write that failed validation."""

    def __init__(self, result: "StockValidationResult"):
        self.result = result
        super().__init__("; ".join(s.message for s in result.shortfalls) or "Insufficient stock")


class IdentityMutationBlocked(ValueError):
    """Raised by the product flow when a color change is refused."""

    def __init__(self, decision: "IdentityChangeDecision"):
        self.decision = decision
        super().__init__(decision.reason or "Product identity cannot be changed")

