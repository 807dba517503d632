import logging

from sqlalchemy.orm import Session

from stockledger.exceptions import InsufficientStock
from stockledger.models.order import Order, OrderItem, OrderStatus
from stockledger.schemas.movement import OrderCreate
from stockledger.services import stock_lock, stock_validator
from stockledger.services.movement_lines import prepare_lines
from stockledger.services.stock_validator import Allocation

logger = logging.getLogger(__name__)


def create_order(db: Session, data: OrderCreate) -> Order:
    lines = prepare_lines(db, data.items, enforce_children_sizes=True)

    with stock_lock.hold(db, {line.key.product_id for line in lines}):
        result = stock_validator.validate(db, [line.as_allocation() for line in lines])
        if not result.valid:
            raise InsufficientStock(result)

        order = Order(
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            notes=data.notes,
            status=OrderStatus.NEW,
        )
        db.add(order)
        db.flush()
        for line in lines:
            db.add(OrderItem(
                order_id=order.id,
                product_id=line.key.product_id,
                size_code=line.key.size_code,
                color_id=line.key.color_id,
                qty=line.qty,
                price=line.price,
            ))
        db.commit()

    db.refresh(order)
    logger.info("Order %s created for %s", order.id, order.customer_name)
    return order


def get_order(db: Session, order_id: int) -> Order | None:
    return db.get(Order, order_id)


def delete_order(db: Session, order_id: int) -> bool:
    order = get_order(db, order_id)
    if not order:
        return False
    product_ids = {item.product_id for item in order.items}
    with stock_lock.hold(db, product_ids):
        db.delete(order)
        db.commit()
    logger.info("Order %s deleted", order_id)
    return True


def update_order_status(db: Session, order_id: int, status: OrderStatus) -> Order | None:
    """Move an order to ``status``.

    Cancelling gives the order's stock back. Reopening a cancelled order takes
    it again, so that transition is validated under the stock locks.
    """
    order = get_order(db, order_id)
    if not order:
        return None
    old_status = order.status
    if status == old_status:
        return order
    if status == OrderStatus.CANCELLED and old_status in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
        raise ValueError(f"Cannot cancel order in {old_status.value} status")

    with stock_lock.hold(db, {item.product_id for item in order.items}):
        if old_status == OrderStatus.CANCELLED:
            allocations = [Allocation(i.product_id, i.size_code, i.color_id, i.qty) for i in order.items]
            result = stock_validator.validate(db, allocations)
            if not result.valid:
                raise InsufficientStock(result)
        order.status = status
        db.commit()

    db.refresh(order)
    logger.info("Order %s status %s -> %s", order.id, old_status.value, status.value)
    return order
