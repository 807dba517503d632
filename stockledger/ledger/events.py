from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MovementEvent:
    """One immutable stock movement as read from the store.

    Receipt items become inbound events; realization and order items become
    outbound events. ``parent_kind`` is "receipt", "realization" or "order".
    """

    id: int
    product_id: int
    size_code: str
    color_id: int | None
    qty: int
    parent_id: int
    parent_kind: str
    created_at: datetime | None = None
