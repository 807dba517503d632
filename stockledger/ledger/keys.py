from dataclasses import dataclass

from stockledger.ledger.normalize import normalize_color_id, normalize_size_code


@dataclass(frozen=True)
class InventoryKey:
    """Identity of one stock-keeping variant: (product, size, color).

    Instances are hashable and compare by value. Build them with
    ``from_raw`` so the size and color are always in canonical form.
    """

    product_id: int
    size_code: str
    color_id: int | None

    @classmethod
    def from_raw(cls, product_id, size_code, color_id, article: str | None = None) -> "InventoryKey":
        return cls(int(product_id), normalize_size_code(size_code, article), normalize_color_id(color_id))

    def sort_key(self) -> tuple:
        # "no color" sorts before any real color
        return (self.product_id, -1 if self.color_id is None else self.color_id, self.size_code)
