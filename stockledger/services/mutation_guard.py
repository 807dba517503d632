"""Guard for edits that change what a product's movements mean.

Color is part of the inventory key. Recolouring a product with stock on hand
would silently reinterpret every movement already recorded for it, so the
change is only allowed once the product's balance, over all sizes and
colors, is zero.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from stockledger.ledger.aggregator import LedgerSnapshot
from stockledger.services.event_reader import load_ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockLine:
    size_code: str
    color_id: int | None
    qty: int


@dataclass
class IdentityChangeDecision:
    allowed: bool
    reason: str | None = None
    current_balance: int = 0
    breakdown: list[StockLine] = field(default_factory=list)


def decide_identity_change(snapshot: LedgerSnapshot, product_id: int) -> IdentityChangeDecision:
    snapshot.require_complete()
    positive = snapshot.positive(product_id)
    total = sum(entry.balance for entry in positive.values())
    if total == 0:
        return IdentityChangeDecision(allowed=True)
    breakdown = [StockLine(key.size_code, key.color_id, entry.balance) for key, entry in positive.items()]
    return IdentityChangeDecision(
        allowed=False,
        reason=(
            f"Cannot change the color of product {product_id}: {total} unit(s) are in stock. "
            "The balance must be 0 first."
        ),
        current_balance=total,
        breakdown=breakdown,
    )


def can_change_identity(db: Session, product_id: int) -> IdentityChangeDecision:
    decision = decide_identity_change(load_ledger(db, [product_id]), product_id)
    if not decision.allowed:
        logger.info("Identity change blocked for product %s (balance %d)", product_id, decision.current_balance)
    return decision
