import logging

from sqlalchemy.orm import Session

from stockledger.models.receipt import Receipt, ReceiptItem
from stockledger.schemas.movement import ReceiptCreate
from stockledger.services import stock_lock
from stockledger.services.movement_lines import prepare_lines

logger = logging.getLogger(__name__)


def create_receipt(db: Session, data: ReceiptCreate) -> Receipt:
    """Record an intake. Inbound movements are never validated against stock."""
    lines = prepare_lines(db, data.items)

    receipt = Receipt(notes=data.notes, total_items=sum(line.qty for line in lines))
    db.add(receipt)
    db.flush()

    for line in lines:
        db.add(ReceiptItem(
            receipt_id=receipt.id,
            product_id=line.key.product_id,
            size_code=line.key.size_code,
            color_id=line.key.color_id,
            qty=line.qty,
        ))

    db.commit()
    db.refresh(receipt)
    logger.info("Receipt %s created with %d line(s), %d unit(s)", receipt.id, len(lines), receipt.total_items)
    return receipt


def get_receipt(db: Session, receipt_id: int) -> Receipt | None:
    return db.get(Receipt, receipt_id)


def delete_receipt(db: Session, receipt_id: int) -> bool:
    """Hard-delete a receipt and its items.

    This lowers the balance of every key it touched, so it runs under the
    stock locks of those products.
    """
    receipt = get_receipt(db, receipt_id)
    if not receipt:
        return False
    product_ids = {item.product_id for item in receipt.items}
    with stock_lock.hold(db, product_ids):
        db.delete(receipt)
        db.commit()
    logger.info("Receipt %s deleted; balances of products %s recomputed from history", receipt_id, sorted(product_ids))
    return True
