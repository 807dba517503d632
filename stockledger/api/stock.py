from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from stockledger.api.deps import get_reference_cache
from stockledger.database import get_db
from stockledger.schemas.stock import AllocationRequest, ProductStockOut, StockListing, StockReport, ValidationOut
from stockledger.services import product_service, stock_service, stock_validator
from stockledger.services.reference_cache import ReferenceCache

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.get("", response_model=StockListing)
def stock_listing(
    search: str | None = None,
    category_id: int | None = None,
    brand_id: int | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    cache: ReferenceCache = Depends(get_reference_cache),
):
    return stock_service.stock_listing(
        db, cache, search=search, category_id=category_id, brand_id=brand_id, page=page, limit=limit
    )


@router.get("/recent")
def recent_intake(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    cache: ReferenceCache = Depends(get_reference_cache),
):
    return stock_service.recent_intake(db, cache, page=page, limit=limit)


@router.get("/report", response_model=StockReport)
def stock_report(
    article_search: str | None = None,
    size: str | None = None,
    db: Session = Depends(get_db),
    cache: ReferenceCache = Depends(get_reference_cache),
):
    return stock_service.stock_report(db, cache, article_search=article_search, size=size)


@router.get("/products/{product_id}", response_model=ProductStockOut)
def product_stock(
    product_id: int,
    db: Session = Depends(get_db),
    cache: ReferenceCache = Depends(get_reference_cache),
):
    if not product_service.get_product(db, product_id):
        raise HTTPException(404, "Product not found")
    return stock_service.product_stock(db, cache, product_id)


@router.post("/validate", response_model=ValidationOut)
def validate_allocations(data: AllocationRequest, db: Session = Depends(get_db)):
    return ValidationOut.model_validate(stock_validator.validate(db, data.items))
