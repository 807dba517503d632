from datetime import datetime

from pydantic import BaseModel

from stockledger.schemas.movement import MovementLine


class AllocationRequest(BaseModel):
    items: list[MovementLine]


class ShortfallOut(BaseModel):
    product_id: int
    size_code: str
    color_id: int | None
    requested: int
    available: int
    product_name: str | None = None
    message: str

    model_config = {"from_attributes": True}


class ValidationOut(BaseModel):
    valid: bool
    shortfalls: list[ShortfallOut] = []

    model_config = {"from_attributes": True}


class StockLineOut(BaseModel):
    size_code: str
    color_id: int | None
    color_name: str | None = None
    qty: int
    last_movement_at: datetime | None = None


class ProductStockOut(BaseModel):
    product_id: int
    total_quantity: int
    items: list[StockLineOut] = []
    integrity_warnings: list[str] = []


class IdentityCheckOut(BaseModel):
    allowed: bool
    reason: str | None = None
    current_balance: int = 0
    stock_items: list[StockLineOut] = []


class StockRow(BaseModel):
    product_id: int
    article: str
    name: str
    brand_name: str | None = None
    color_id: int | None
    color_name: str
    sizes: list[int]
    total: int
    last_movement_at: datetime | None = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class StockListing(BaseModel):
    items: list[StockRow]
    sizes: list[str]
    pagination: Pagination
    partial: bool = False
    integrity_warnings: list[str] = []


class StockReportRow(BaseModel):
    product_id: int
    article: str
    name: str
    brand_name: str | None = None
    category_name: str | None = None
    color_id: int | None
    color_name: str
    size_code: str
    qty: int
    last_movement_at: datetime | None = None


class StockReport(BaseModel):
    items: list[StockReportRow]
    total_quantity: int
    product_totals: dict[int, int] = {}
    integrity_warnings: list[str] = []
