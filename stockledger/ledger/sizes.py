"""Size ordering as a table lookup.

Adult sizes follow a configured list (XXS ... XXXL). Children sizes are
heights in centimetres and sort numerically.
"""

import re

from stockledger.config import settings
from stockledger.ledger.normalize import extract_size_number

_NUMBER = re.compile(r"\d+")


class SizeTaxonomy:
    def __init__(self, adult_sizes: list[str], children_sizes: list[str], children_category_id: int):
        self.adult_sizes = [s.upper() for s in adult_sizes]
        self.children_sizes = list(children_sizes)
        self.children_category_id = children_category_id
        self._adult_rank = {size: i for i, size in enumerate(self.adult_sizes)}

    @classmethod
    def from_settings(cls) -> "SizeTaxonomy":
        return cls(settings.ADULT_SIZES, settings.CHILDREN_SIZES, settings.CHILDREN_CATEGORY_ID)

    def is_children_category(self, category_id) -> bool:
        if category_id is None or category_id == "" or category_id == "all":
            return False
        try:
            return int(category_id) == self.children_category_id
        except (TypeError, ValueError):
            return False

    def is_children_size(self, size_code: str) -> bool:
        return extract_size_number(size_code) in self.children_sizes

    def size_rank(self, size_code: str, children: bool = False) -> tuple:
        """Sort key for one label within its taxonomy.

        Known labels come first in table order; unknown adult labels follow,
        alphabetically. A growth-banded label ("M 170") ranks by its letter
        part, then by height.
        """
        if children:
            match = _NUMBER.search(size_code or "")
            return (0, int(match.group(0)) if match else 0, size_code)

        head, _, tail = (size_code or "").upper().partition(" ")
        rank = self._adult_rank.get(head)
        if rank is None:
            return (1, 0, size_code)
        height = int(tail) if tail.isdigit() else 0
        return (0, rank, height)

    def sort_sizes(self, sizes, children: bool = False) -> list[str]:
        return sorted(set(sizes), key=lambda s: self.size_rank(s, children))

    def sizes_for_category(self, sizes, category_id) -> list[str]:
        """Columns to show for a category: children sizes only for the children
        category, everything else for adult categories."""
        children = self.is_children_category(category_id)
        if children:
            picked = [s for s in sizes if self.is_children_size(s)]
        else:
            picked = [s for s in sizes if not self.is_children_size(s)]
        return self.sort_sizes(picked, children)
