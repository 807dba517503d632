import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from stockledger.exceptions import IdentityMutationBlocked
from stockledger.ledger.normalize import normalize_article, normalize_color_id
from stockledger.models.catalog import Brand, Color, Product
from stockledger.schemas.product import ProductCreate, ProductUpdate
from stockledger.services import mutation_guard, stock_lock

logger = logging.getLogger(__name__)


def _ensure_unique_card(db: Session, article: str, color_id: int | None, exclude_id: int | None = None) -> None:
    q = db.query(Product).filter(Product.article == article)
    q = q.filter(Product.color_id.is_(None) if color_id is None else Product.color_id == color_id)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first():
        raise ValueError(f'A product with article "{article}" and this color already exists')


def create_product(db: Session, data: ProductCreate) -> Product:
    article = normalize_article(data.article)
    color_id = normalize_color_id(data.color_id)
    _ensure_unique_card(db, article, color_id)

    product = Product(
        name=data.name.strip(),
        article=article,
        brand_id=data.brand_id,
        category_id=data.category_id,
        color_id=color_id,
        price=data.price,
        composition=data.composition,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def get_product(db: Session, product_id: int) -> Product | None:
    return db.get(Product, product_id)


def search_filter(term: str):
    """Substring match on article, name, brand name or color name."""
    pattern = f"%{term.strip()}%"
    return or_(
        Product.article.ilike(pattern),
        Product.name.ilike(pattern),
        Product.brand_id.in_(select(Brand.id).where(Brand.name.ilike(pattern))),
        Product.color_id.in_(select(Color.id).where(Color.name.ilike(pattern))),
    )


def list_products(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: str | None = None,
    category_id: int | None = None,
    brand_id: int | None = None,
) -> list[Product]:
    q = db.query(Product)
    if search and search.strip():
        q = q.filter(search_filter(search))
    if category_id:
        q = q.filter(Product.category_id == category_id)
    if brand_id:
        q = q.filter(Product.brand_id == brand_id)
    return q.order_by(Product.id).offset(skip).limit(limit).all()


def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product | None:
    """Apply a partial update.

    A color change goes through the mutation guard under the product's stock
    lock; a refusal raises IdentityMutationBlocked and nothing is written.
    """
    product = get_product(db, product_id)
    if not product:
        return None

    update_data = data.model_dump(exclude_unset=True)
    if "article" in update_data and update_data["article"] is not None:
        update_data["article"] = normalize_article(update_data["article"])
    if "color_id" in update_data:
        update_data["color_id"] = normalize_color_id(update_data["color_id"])
    if "name" in update_data and update_data["name"] is not None:
        update_data["name"] = update_data["name"].strip()

    with stock_lock.hold(db, [product.id]):
        color_changes = "color_id" in update_data and update_data["color_id"] != product.color_id
        if color_changes:
            decision = mutation_guard.can_change_identity(db, product.id)
            if not decision.allowed:
                raise IdentityMutationBlocked(decision)

        article = update_data.get("article") or product.article
        color_id = update_data["color_id"] if "color_id" in update_data else product.color_id
        _ensure_unique_card(db, article, color_id, exclude_id=product.id)

        for field, value in update_data.items():
            setattr(product, field, value)
        db.commit()

    if color_changes:
        logger.info("Product %s color changed to %s", product.id, product.color_id)
    db.refresh(product)
    return product
