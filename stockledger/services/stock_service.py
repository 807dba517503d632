"""Stock views built on the ledger: listing, per-product detail and report.

Candidate product ids are always resolved first and the complete history of
exactly those ids is aggregated. Pagination applies to the finished rows,
never to the movement tables.
"""

from math import ceil

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.config import settings
from stockledger.exceptions import TransientStoreError
from stockledger.ledger.aggregator import LedgerSnapshot
from stockledger.ledger.normalize import format_article, normalize_size_code, size_search_variants
from stockledger.ledger.sizes import SizeTaxonomy
from stockledger.models.catalog import Product
from stockledger.services.event_reader import load_ledger, read_page
from stockledger.services.product_service import search_filter
from stockledger.services.reference_cache import ReferenceCache

PRODUCT_BATCH = 500


def resolve_product_ids(
    db: Session,
    product_ids=None,
    category_id=None,
    brand_id=None,
    search: str | None = None,
) -> list[int] | None:
    """Ids of the products a stock view covers; None means every product."""
    if product_ids is None and not category_id and not brand_id and not (search and search.strip()):
        return None

    stmt = select(Product.id).order_by(Product.id)
    if product_ids is not None:
        stmt = stmt.where(Product.id.in_(list(product_ids)))
    if category_id and category_id != "all":
        stmt = stmt.where(Product.category_id == int(category_id))
    if brand_id:
        stmt = stmt.where(Product.brand_id == int(brand_id))
    if search and search.strip():
        stmt = stmt.where(search_filter(search))
    try:
        return list(db.scalars(stmt))
    except SQLAlchemyError as exc:
        raise TransientStoreError("resolving stock candidates") from exc


def _load_products(db: Session, product_ids) -> dict[int, Product]:
    ids = sorted(product_ids)
    products: dict[int, Product] = {}
    try:
        for start in range(0, len(ids), PRODUCT_BATCH):
            batch = ids[start:start + PRODUCT_BATCH]
            products.update({p.id: p for p in db.scalars(select(Product).where(Product.id.in_(batch)))})
    except SQLAlchemyError as exc:
        raise TransientStoreError("reading products") from exc
    return products


def _warnings(snapshot: LedgerSnapshot) -> list[str]:
    return [str(w) for w in snapshot.warnings]


def stock_listing(
    db: Session,
    cache: ReferenceCache,
    search: str | None = None,
    category_id=None,
    brand_id=None,
    page: int = 1,
    limit: int | None = None,
    taxonomy: SizeTaxonomy | None = None,
) -> dict:
    """Positive stock grouped into one row per (article, color).

    Each row carries one quantity per size column; the columns are the sizes
    of the category's taxonomy in table order.
    """
    limit = limit or settings.DEFAULT_PAGE_SIZE
    page = max(page, 1)
    taxonomy = taxonomy or SizeTaxonomy.from_settings()

    candidates = resolve_product_ids(db, category_id=category_id, brand_id=brand_id, search=search)
    snapshot = load_ledger(db, candidates)
    positive = snapshot.positive()
    rollup = snapshot.by_product_color()
    products = _load_products(db, {key.product_id for key in positive})

    groups: dict[tuple[str, int | None], dict] = {}
    all_sizes: set[str] = set()
    for key, entry in positive.items():
        product = products.get(key.product_id)
        if product is None:
            continue
        all_sizes.add(key.size_code)
        group = groups.setdefault((product.article, key.color_id), {
            "product_id": product.id,
            "article": format_article(product.article),
            "name": product.name,
            "brand_name": cache.brand_name(db, product.brand_id),
            "color_id": key.color_id,
            "color_name": cache.color_name(db, key.color_id),
            "by_size": {},
            "sources": set(),
            "last_movement_at": None,
        })
        group["by_size"][key.size_code] = group["by_size"].get(key.size_code, 0) + entry.balance
        group["sources"].add((product.id, key.color_id))
        if entry.last_movement_at and (
            group["last_movement_at"] is None or entry.last_movement_at > group["last_movement_at"]
        ):
            group["last_movement_at"] = entry.last_movement_at

    columns = taxonomy.sizes_for_category(all_sizes, category_id)
    rows = sorted(groups.values(), key=lambda g: (g["article"], g["color_id"] or 0))
    for row in rows:
        by_size = row.pop("by_size")
        row["sizes"] = [by_size.get(size, 0) for size in columns]
        row["total"] = sum(rollup[source] for source in row.pop("sources"))

    total = len(rows)
    start = (page - 1) * limit
    return {
        "items": rows[start:start + limit],
        "sizes": columns,
        "pagination": {"total": total, "page": page, "limit": limit, "total_pages": max(1, ceil(total / limit))},
        "partial": False,
        "integrity_warnings": _warnings(snapshot),
    }


def recent_intake(db: Session, cache: ReferenceCache, page: int = 1, limit: int | None = None) -> dict:
    """Balances for the products of the latest receipt lines only.

    Display only: the snapshot is partial and says so.
    """
    limit = limit or settings.DEFAULT_PAGE_SIZE
    page = max(page, 1)
    snapshot = read_page(db, offset=(page - 1) * limit, limit=limit)
    return {
        "items": [_stock_line(db, cache, key, entry) for key, entry in snapshot.positive().items()],
        "partial": snapshot.partial,
        "integrity_warnings": _warnings(snapshot),
    }


def _stock_line(db: Session, cache: ReferenceCache, key, entry) -> dict:
    return {
        "product_id": key.product_id,
        "size_code": key.size_code,
        "color_id": key.color_id,
        "color_name": cache.color_name(db, key.color_id),
        "qty": entry.balance,
        "last_movement_at": entry.last_movement_at,
    }


def product_stock(db: Session, cache: ReferenceCache, product_id: int) -> dict:
    snapshot = load_ledger(db, [product_id])
    positive = snapshot.positive(product_id)
    return {
        "product_id": product_id,
        "total_quantity": snapshot.total(product_id),
        "items": [_stock_line(db, cache, key, entry) for key, entry in positive.items()],
        "integrity_warnings": _warnings(snapshot),
    }


def stock_report(
    db: Session, cache: ReferenceCache, article_search: str | None = None, size: str | None = None
) -> dict:
    """One row per positive key across the whole warehouse.

    ``size`` matches every stored spelling of a label ("M" also finds the
    Cyrillic "М").
    """
    candidates = None
    if article_search and article_search.strip():
        try:
            candidates = list(db.scalars(
                select(Product.id).where(Product.article.ilike(f"%{article_search.strip()}%"))
            ))
        except SQLAlchemyError as exc:
            raise TransientStoreError("resolving report candidates") from exc
    key_filter = None
    if size and size.strip():
        wanted = {normalize_size_code(variant) for variant in size_search_variants(size)}
        key_filter = lambda key: key.size_code in wanted  # noqa: E731
    snapshot = load_ledger(db, candidates, key_filter=key_filter)
    positive = snapshot.positive()
    products = _load_products(db, {key.product_id for key in positive})

    rows = []
    for key, entry in positive.items():
        product = products.get(key.product_id)
        if product is None:
            continue
        rows.append({
            "product_id": product.id,
            "article": format_article(product.article),
            "name": product.name,
            "brand_name": cache.brand_name(db, product.brand_id),
            "category_name": cache.category_name(db, product.category_id),
            "color_id": key.color_id,
            "color_name": cache.color_name(db, key.color_id),
            "size_code": key.size_code,
            "qty": entry.balance,
            "last_movement_at": entry.last_movement_at,
        })
    return {
        "items": rows,
        "total_quantity": sum(row["qty"] for row in rows),
        "product_totals": {pid: qty for pid, qty in snapshot.by_product().items() if qty > 0 and pid in products},
        "integrity_warnings": _warnings(snapshot),
    }
