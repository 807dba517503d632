from datetime import datetime

from pydantic import BaseModel, field_validator

from stockledger.models.order import OrderStatus


class MovementLine(BaseModel):
    product_id: int
    size_code: str
    color_id: int | str | None = None  # normalized server-side; 0 / "0" mean no color
    qty: int

    @field_validator("qty")
    @classmethod
    def positive_qty(cls, v):
        if v <= 0:
            raise ValueError("qty must be greater than 0")
        return v

    @field_validator("size_code")
    @classmethod
    def size_required(cls, v):
        if not v or not v.strip():
            raise ValueError("size_code is required")
        return v


class OrderLine(MovementLine):
    price: float = 0.0


class MovementLineOut(BaseModel):
    id: int
    product_id: int
    size_code: str
    color_id: int | None
    qty: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class OrderLineOut(MovementLineOut):
    price: float = 0.0


# --- Receipts (inbound) ---

class ReceiptCreate(BaseModel):
    notes: str = ""
    items: list[MovementLine]


class ReceiptOut(BaseModel):
    id: int
    notes: str
    total_items: int
    created_at: datetime | None = None
    items: list[MovementLineOut] = []

    model_config = {"from_attributes": True}


# --- Realizations (outbound) ---

class RealizationCreate(BaseModel):
    recipient: str
    notes: str = ""
    items: list[MovementLine]

    @field_validator("recipient")
    @classmethod
    def recipient_required(cls, v):
        if not v.strip():
            raise ValueError("recipient is required")
        return v.strip()


class RealizationOut(BaseModel):
    id: int
    recipient: str
    notes: str
    total_items: int
    created_at: datetime | None = None
    items: list[MovementLineOut] = []

    model_config = {"from_attributes": True}


# --- Orders (outbound) ---

class OrderCreate(BaseModel):
    customer_name: str
    customer_phone: str
    notes: str = ""
    items: list[OrderLine]

    @field_validator("customer_name", "customer_phone")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("customer name and phone are required")
        return v.strip()


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderOut(BaseModel):
    id: int
    customer_name: str
    customer_phone: str
    status: OrderStatus
    notes: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderLineOut] = []

    model_config = {"from_attributes": True}
