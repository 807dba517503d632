"""Check requested outbound quantities against current balances.

``validate`` is read-only and reserves nothing. Callers that go on to write
outbound movements must call it inside ``stock_lock.hold`` and commit before
leaving the block (see ``realization_service`` and ``order_service``).
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.exceptions import TransientStoreError
from stockledger.ledger.aggregator import LedgerSnapshot
from stockledger.ledger.keys import InventoryKey
from stockledger.models.catalog import Product
from stockledger.services.event_reader import load_ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    product_id: int
    size_code: str
    color_id: int | None
    qty: int


@dataclass(frozen=True)
class Shortfall:
    product_id: int
    size_code: str
    color_id: int | None
    requested: int
    available: int
    product_name: str | None = None

    @property
    def message(self) -> str:
        name = self.product_name or f"product {self.product_id}"
        return (
            f'Insufficient stock for "{name}" size {self.size_code} color {self.color_id}: '
            f"requested {self.requested}, available {self.available}"
        )


@dataclass
class StockValidationResult:
    valid: bool
    shortfalls: list[Shortfall] = field(default_factory=list)


def _requested_by_key(allocations) -> dict[InventoryKey, int]:
    # Lines for the same variant draw on the same balance
    requested: dict[InventoryKey, int] = {}
    for line in allocations:
        key = InventoryKey.from_raw(line.product_id, line.size_code, line.color_id)
        requested[key] = requested.get(key, 0) + (line.qty or 0)
    return requested


def check_allocations(
    snapshot: LedgerSnapshot, allocations, product_names: dict[int, str] | None = None
) -> StockValidationResult:
    """Compare allocations with a complete snapshot. Pure."""
    snapshot.require_complete()
    names = product_names or {}
    shortfalls = []
    for key, requested in _requested_by_key(allocations).items():
        available = snapshot.balance(key)
        if requested > available:
            shortfalls.append(
                Shortfall(
                    product_id=key.product_id,
                    size_code=key.size_code,
                    color_id=key.color_id,
                    requested=requested,
                    available=available,
                    product_name=names.get(key.product_id),
                )
            )
    return StockValidationResult(valid=not shortfalls, shortfalls=shortfalls)


def _product_names(db: Session, product_ids: list[int]) -> dict[int, str]:
    try:
        rows = db.execute(select(Product.id, Product.name).where(Product.id.in_(product_ids))).all()
    except SQLAlchemyError as exc:
        raise TransientStoreError("reading product names") from exc
    return {row.id: row.name for row in rows}


def validate(db: Session, allocations) -> StockValidationResult:
    allocations = list(allocations)
    product_ids = sorted({int(line.product_id) for line in allocations})
    if not product_ids:
        return StockValidationResult(valid=True)

    snapshot = load_ledger(db, product_ids)
    result = check_allocations(snapshot, allocations, _product_names(db, product_ids))
    if not result.valid:
        logger.info(
            "Stock validation rejected %d of %d line(s) for products %s",
            len(result.shortfalls), len(allocations), product_ids,
        )
    return result
