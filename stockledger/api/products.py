from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.exceptions import IdentityMutationBlocked
from stockledger.schemas.product import ProductCreate, ProductOut, ProductUpdate
from stockledger.schemas.stock import IdentityCheckOut
from stockledger.services import mutation_guard, product_service

router = APIRouter(prefix="/products", tags=["Products"])


def _identity_out(decision) -> dict:
    return {
        "allowed": decision.allowed,
        "reason": decision.reason,
        "current_balance": decision.current_balance,
        "stock_items": [
            {"size_code": line.size_code, "color_id": line.color_id, "qty": line.qty}
            for line in decision.breakdown
        ],
    }


@router.post("", response_model=ProductOut, status_code=201)
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    try:
        return product_service.create_product(db, data)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("", response_model=list[ProductOut])
def list_products(
    skip: int = 0,
    limit: int = 100,
    search: str | None = None,
    category_id: int | None = None,
    brand_id: int | None = None,
    db: Session = Depends(get_db),
):
    return product_service.list_products(
        db, skip=skip, limit=limit, search=search, category_id=category_id, brand_id=brand_id
    )


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    try:
        product = product_service.update_product(db, product_id, data)
    except IdentityMutationBlocked as e:
        raise HTTPException(400, {
            "error": "Product color cannot be changed",
            "reason": e.decision.reason,
            "stock_info": _identity_out(e.decision),
        })
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.get("/{product_id}/identity-check", response_model=IdentityCheckOut)
def identity_check(product_id: int, db: Session = Depends(get_db)):
    if not product_service.get_product(db, product_id):
        raise HTTPException(404, "Product not found")
    return _identity_out(mutation_guard.can_change_identity(db, product_id))
