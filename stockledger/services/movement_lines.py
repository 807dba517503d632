from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.ledger.keys import InventoryKey
from stockledger.ledger.sizes import SizeTaxonomy
from stockledger.models.catalog import Product
from stockledger.services.stock_validator import Allocation


@dataclass(frozen=True)
class PreparedLine:
    key: InventoryKey
    qty: int
    price: float = 0.0

    def as_allocation(self) -> Allocation:
        return Allocation(self.key.product_id, self.key.size_code, self.key.color_id, self.qty)


def prepare_lines(db: Session, items, enforce_children_sizes: bool = False) -> list[PreparedLine]:
    """Normalize the key of every incoming line and check its product exists.

    With ``enforce_children_sizes`` a product of the children category only
    accepts children sizes.
    """
    if not items:
        raise ValueError("At least one item is required")

    product_ids = {item.product_id for item in items}
    products = {p.id: p for p in db.scalars(select(Product).where(Product.id.in_(product_ids)))}
    taxonomy = SizeTaxonomy.from_settings()

    lines = []
    for item in items:
        product = products.get(item.product_id)
        if not product:
            raise ValueError(f"Product {item.product_id} not found")
        key = InventoryKey.from_raw(product.id, item.size_code, item.color_id, article=product.article)
        if not key.size_code:
            raise ValueError(f"Size is required for product {product.id}")
        if enforce_children_sizes and taxonomy.is_children_category(product.category_id):
            if not taxonomy.is_children_size(key.size_code):
                raise ValueError(
                    f"Children products take sizes {taxonomy.children_sizes[0]}-{taxonomy.children_sizes[-1]}, "
                    f"got {item.size_code!r} for product {product.id}"
                )
        lines.append(PreparedLine(key=key, qty=item.qty, price=getattr(item, "price", 0.0)))
    return lines
