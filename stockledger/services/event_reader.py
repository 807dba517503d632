"""Read movement history from the store.

Ledger reads are scoped to a set of product ids resolved up front, and every
table is read in pages of ``LEDGER_PAGE_SIZE`` until a short page comes back.
Only ``read_page`` stops early, and the snapshot it feeds is marked partial.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.config import settings
from stockledger.exceptions import TransientStoreError
from stockledger.ledger.aggregator import LedgerSnapshot, aggregate
from stockledger.ledger.events import MovementEvent
from stockledger.models.order import Order, OrderItem, OrderStatus
from stockledger.models.realization import RealizationItem
from stockledger.models.receipt import ReceiptItem

logger = logging.getLogger(__name__)

# (model, parent column, parent kind, extra condition)
INBOUND_SOURCES = [(ReceiptItem, ReceiptItem.receipt_id, "receipt", None)]
OUTBOUND_SOURCES = [
    (RealizationItem, RealizationItem.realization_id, "realization", None),
    (
        OrderItem,
        OrderItem.order_id,
        "order",
        OrderItem.order_id.in_(select(Order.id).where(Order.status != OrderStatus.CANCELLED)),
    ),
]


def _to_event(row, parent_id: int, kind: str) -> MovementEvent:
    return MovementEvent(
        id=row.id,
        product_id=row.product_id,
        size_code=row.size_code,
        color_id=row.color_id,
        qty=row.qty,
        parent_id=parent_id,
        parent_kind=kind,
        created_at=row.created_at,
    )


def _fetch_all(
    db: Session, model, parent_col, kind: str, product_ids, page_size: int, condition=None
) -> list[MovementEvent]:
    stmt = select(model, parent_col).order_by(model.id)
    if condition is not None:
        stmt = stmt.where(condition)
    if product_ids is not None:
        stmt = stmt.where(model.product_id.in_(product_ids))

    events: list[MovementEvent] = []
    offset = 0
    while True:
        try:
            batch = db.execute(stmt.offset(offset).limit(page_size)).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to read %s movements at offset %d: %s", kind, offset, exc)
            raise TransientStoreError(f"reading {model.__tablename__}") from exc
        events.extend(_to_event(row, parent_id, kind) for row, parent_id in batch)
        if len(batch) < page_size:
            return events
        offset += page_size


def fetch_inbound(db: Session, product_ids=None, page_size: int | None = None) -> list[MovementEvent]:
    size = page_size or settings.LEDGER_PAGE_SIZE
    events: list[MovementEvent] = []
    for model, parent_col, kind, condition in INBOUND_SOURCES:
        events.extend(_fetch_all(db, model, parent_col, kind, product_ids, size, condition))
    return events


def fetch_outbound(db: Session, product_ids=None, page_size: int | None = None) -> list[MovementEvent]:
    size = page_size or settings.LEDGER_PAGE_SIZE
    events: list[MovementEvent] = []
    for model, parent_col, kind, condition in OUTBOUND_SOURCES:
        events.extend(_fetch_all(db, model, parent_col, kind, product_ids, size, condition))
    return events


def load_ledger(db: Session, product_ids=None, page_size: int | None = None, key_filter=None) -> LedgerSnapshot:
    """Complete ledger for ``product_ids`` (all products when None).

    ``key_filter`` is handed to ``aggregate`` and only narrows the keys kept.

    An empty id list yields an empty snapshot without touching the store.
    """
    if product_ids is not None:
        product_ids = sorted({int(pid) for pid in product_ids})
        if not product_ids:
            return LedgerSnapshot()
    inbound = fetch_inbound(db, product_ids, page_size)
    outbound = fetch_outbound(db, product_ids, page_size)
    return aggregate(inbound, outbound, key_filter=key_filter)


def read_page(db: Session, offset: int = 0, limit: int | None = None) -> LedgerSnapshot:
    """Quick look at one page of receipts and the matching outflow.

    The result is partial: balances of products whose receipts fall outside
    the page are missing. Use for display only.
    """
    limit = limit or settings.DEFAULT_PAGE_SIZE
    stmt = select(ReceiptItem, ReceiptItem.receipt_id).order_by(ReceiptItem.id.desc()).offset(offset).limit(limit)
    try:
        rows = db.execute(stmt).all()
    except SQLAlchemyError as exc:
        raise TransientStoreError("reading receipt_items page") from exc
    inbound = [_to_event(row, parent_id, "receipt") for row, parent_id in rows]
    product_ids = sorted({event.product_id for event in inbound})
    outbound = fetch_outbound(db, product_ids) if product_ids else []
    return aggregate(inbound, outbound, partial=True)
