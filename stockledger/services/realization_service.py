import logging

from sqlalchemy.orm import Session

from stockledger.exceptions import InsufficientStock
from stockledger.models.realization import Realization, RealizationItem
from stockledger.schemas.movement import RealizationCreate
from stockledger.services import stock_lock, stock_validator
from stockledger.services.movement_lines import prepare_lines

logger = logging.getLogger(__name__)


def create_realization(db: Session, data: RealizationCreate) -> Realization:
    lines = prepare_lines(db, data.items, enforce_children_sizes=True)

    with stock_lock.hold(db, {line.key.product_id for line in lines}):
        result = stock_validator.validate(db, [line.as_allocation() for line in lines])
        if not result.valid:
            raise InsufficientStock(result)

        realization = Realization(
            recipient=data.recipient,
            notes=data.notes,
            total_items=sum(line.qty for line in lines),
        )
        db.add(realization)
        db.flush()
        for line in lines:
            db.add(RealizationItem(
                realization_id=realization.id,
                product_id=line.key.product_id,
                size_code=line.key.size_code,
                color_id=line.key.color_id,
                qty=line.qty,
            ))
        db.commit()

    db.refresh(realization)
    logger.info("Realization %s created for %s with %d unit(s)", realization.id, realization.recipient, realization.total_items)
    return realization


def get_realization(db: Session, realization_id: int) -> Realization | None:
    return db.get(Realization, realization_id)


def delete_realization(db: Session, realization_id: int) -> bool:
    realization = get_realization(db, realization_id)
    if not realization:
        return False
    product_ids = {item.product_id for item in realization.items}
    with stock_lock.hold(db, product_ids):
        db.delete(realization)
        db.commit()
    logger.info("Realization %s deleted", realization_id)
    return True
