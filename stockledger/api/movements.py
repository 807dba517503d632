from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.exceptions import InsufficientStock
from stockledger.schemas.movement import (
    OrderCreate,
    OrderOut,
    OrderStatusUpdate,
    RealizationCreate,
    RealizationOut,
    ReceiptCreate,
    ReceiptOut,
)
from stockledger.schemas.stock import ShortfallOut
from stockledger.services import order_service, realization_service, receipt_service

router = APIRouter(tags=["Movements"])


def insufficient_stock_detail(exc: InsufficientStock) -> dict:
    errors = [ShortfallOut.model_validate(s).model_dump() for s in exc.result.shortfalls]
    return {
        "error": "Insufficient stock",
        "details": [e["message"] for e in errors],
        "stock_errors": errors,
    }


# --- Receipts ---

@router.post("/receipts", response_model=ReceiptOut, status_code=201)
def create_receipt(data: ReceiptCreate, db: Session = Depends(get_db)):
    try:
        return receipt_service.create_receipt(db, data)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/receipts/{receipt_id}", response_model=ReceiptOut)
def get_receipt(receipt_id: int, db: Session = Depends(get_db)):
    receipt = receipt_service.get_receipt(db, receipt_id)
    if not receipt:
        raise HTTPException(404, "Receipt not found")
    return receipt


@router.delete("/receipts/{receipt_id}", status_code=204)
def delete_receipt(receipt_id: int, db: Session = Depends(get_db)):
    if not receipt_service.delete_receipt(db, receipt_id):
        raise HTTPException(404, "Receipt not found")


# --- Realizations ---

@router.post("/realizations", response_model=RealizationOut, status_code=201)
def create_realization(data: RealizationCreate, db: Session = Depends(get_db)):
    try:
        return realization_service.create_realization(db, data)
    except InsufficientStock as e:
        raise HTTPException(400, insufficient_stock_detail(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/realizations/{realization_id}", response_model=RealizationOut)
def get_realization(realization_id: int, db: Session = Depends(get_db)):
    realization = realization_service.get_realization(db, realization_id)
    if not realization:
        raise HTTPException(404, "Realization not found")
    return realization


@router.delete("/realizations/{realization_id}", status_code=204)
def delete_realization(realization_id: int, db: Session = Depends(get_db)):
    if not realization_service.delete_realization(db, realization_id):
        raise HTTPException(404, "Realization not found")


# --- Orders ---

@router.post("/orders", response_model=OrderOut, status_code=201)
def create_order(data: OrderCreate, db: Session = Depends(get_db)):
    try:
        return order_service.create_order(db, data)
    except InsufficientStock as e:
        raise HTTPException(400, insufficient_stock_detail(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    order = order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    return order


@router.delete("/orders/{order_id}", status_code=204)
def delete_order(order_id: int, db: Session = Depends(get_db)):
    if not order_service.delete_order(db, order_id):
        raise HTTPException(404, "Order not found")


@router.put("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: int, data: OrderStatusUpdate, db: Session = Depends(get_db)):
    try:
        order = order_service.update_order_status(db, order_id, data.status)
    except InsufficientStock as e:
        raise HTTPException(400, insufficient_stock_detail(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not order:
        raise HTTPException(404, "Order not found")
    return order
