import math

import pytest

from stockledger.ledger.keys import InventoryKey
from stockledger.ledger.normalize import (
    extract_size_number,
    format_article,
    normalize_article,
    normalize_color_id,
    normalize_size_code,
    size_search_variants,
)


class TestColorId:
    @pytest.mark.parametrize("raw", [None, 0, "0", "", "abc", -4, "-4", True, False, 2.5, math.nan, math.inf, object()])
    def test_no_color_sentinels(self, raw):
        assert normalize_color_id(raw) is None

    @pytest.mark.parametrize("raw,expected", [(7, 7), ("7", 7), (" 7 ", 7), ("12abc", 12), (3.0, 3), ("+5", 5)])
    def test_positive_ids(self, raw, expected):
        assert normalize_color_id(raw) == expected

    @pytest.mark.parametrize("raw", [None, 0, "0", 7, "7", "12abc", 3.0])
    def test_idempotent(self, raw):
        once = normalize_color_id(raw)
        assert normalize_color_id(once) == once


class TestSizeCode:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("92 - 2 года", "92"),
            ("  M  ", "M"),
            ("M", "M"),
            ("М", "M"),  # Cyrillic
            ("ХL", "XL"),  # Cyrillic Х, Latin L
            ("M 170", "M 170"),
            ("M   170", "M 170"),
            ("XL 180", "XL"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_canonical_form(self, raw, expected):
        assert normalize_size_code(raw) == expected

    def test_mixed_script_words_left_alone(self):
        assert normalize_size_code("Мини") == "Мини"

    @pytest.mark.parametrize("raw,expected", [(92, "92"), (0, "0")])
    def test_non_string_labels_keep_their_value(self, raw, expected):
        assert normalize_size_code(raw) == expected
        assert InventoryKey.from_raw(1, raw, None).size_code == expected

    def test_growth_band_kept_for_any_article(self):
        assert normalize_size_code("S 160", article="X999") == "S 160"
        assert normalize_size_code("S 160", article="W101") == "S 160"

    @pytest.mark.parametrize("raw", ["92 - 2 года", " M ", "М", "M 170", "XL 180", "", "S/M"])
    def test_idempotent(self, raw):
        once = normalize_size_code(raw)
        assert normalize_size_code(once) == once

    def test_extract_size_number(self):
        assert extract_size_number("104 - 4 года") == "104"
        assert extract_size_number("") == ""


class TestArticle:
    @pytest.mark.parametrize(
        "raw,expected",
        [("w101", "W101"), ("  abc ", "Abc"), ("W101", "W101"), ("021", "021"), ("", "")],
    )
    def test_normalize_article(self, raw, expected):
        assert normalize_article(raw) == expected

    def test_format_article(self):
        assert format_article("021") == "L021"
        assert format_article("W101") == "W101"
        assert format_article(None) == ""

    def test_search_variants(self):
        assert size_search_variants("M") == ["M", "М"]
        assert size_search_variants("S/M") == ["S/M", "S"]
        assert size_search_variants(" L ") == ["L"]


class TestInventoryKey:
    def test_no_color_spellings_are_one_key(self):
        a = InventoryKey.from_raw(5, "M", "0")
        b = InventoryKey.from_raw(5, "M ", None)
        c = InventoryKey.from_raw("5", "М", 0)
        assert a == b == c
        assert len({a, b, c}) == 1
        assert a.color_id is None

    def test_sort_key_puts_no_color_first(self):
        keys = [InventoryKey(1, "M", 2), InventoryKey(1, "M", None), InventoryKey(1, "L", 2)]
        ordered = sorted(keys, key=InventoryKey.sort_key)
        assert ordered[0].color_id is None
        assert [k.size_code for k in ordered[1:]] == ["L", "M"]
