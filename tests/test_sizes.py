import pytest

from stockledger.ledger.sizes import SizeTaxonomy


@pytest.fixture
def taxonomy():
    return SizeTaxonomy.from_settings()


def test_adult_sizes_follow_table_order(taxonomy):
    sizes = ["XL", "S", "M 170", "M", "M 160", "ZZ", "AB", "XXS"]
    assert taxonomy.sort_sizes(sizes) == ["XXS", "S", "M", "M 160", "M 170", "XL", "AB", "ZZ"]


def test_children_sizes_sort_numerically(taxonomy):
    assert taxonomy.sort_sizes(["110", "92", "104", "98"], children=True) == ["92", "98", "104", "110"]


@pytest.mark.parametrize("category_id,expected", [(3, True), ("3", True), (1, False), (None, False), ("all", False), ("x", False)])
def test_children_category(taxonomy, category_id, expected):
    assert taxonomy.is_children_category(category_id) is expected


def test_children_size(taxonomy):
    assert taxonomy.is_children_size("98 - 3 года")
    assert taxonomy.is_children_size("164")
    assert not taxonomy.is_children_size("170")
    assert not taxonomy.is_children_size("M")


def test_columns_for_category(taxonomy):
    sizes = ["M", "92", "S", "104"]
    assert taxonomy.sizes_for_category(sizes, 3) == ["92", "104"]
    assert taxonomy.sizes_for_category(sizes, 1) == ["S", "M"]
    assert taxonomy.sizes_for_category(sizes, None) == ["S", "M"]


def test_custom_table():
    taxonomy = SizeTaxonomy(["s", "m"], ["50", "56"], children_category_id=7)
    assert taxonomy.sort_sizes(["M", "S"]) == ["S", "M"]
    assert taxonomy.is_children_category(7)
