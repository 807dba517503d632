from conftest import realize, receive
from stockledger.services import receipt_service, stock_service


def test_listing_groups_rows_by_article_and_color(db, catalog, cache):
    receive(
        db,
        (catalog.dress.id, "M", catalog.black.id, 3),
        (catalog.dress.id, "S", catalog.black.id, 2),
        (catalog.dress.id, "L", catalog.black.id, 1),
        (catalog.coat.id, "XL", None, 4),
    )
    realize(db, (catalog.dress.id, "L", catalog.black.id, 1))

    listing = stock_service.stock_listing(db, cache)

    assert listing["sizes"] == ["S", "M", "XL"]
    assert listing["partial"] is False
    rows = {row["article"]: row for row in listing["items"]}
    assert set(rows) == {"L021", "W101"}
    assert rows["W101"]["sizes"] == [2, 3, 0]
    assert rows["W101"]["total"] == 5
    assert rows["W101"]["color_name"] == "Black"
    assert rows["W101"]["brand_name"] == "Acme"
    assert rows["L021"]["color_name"] == "No color"
    assert listing["pagination"] == {"total": 2, "page": 1, "limit": 50, "total_pages": 1}


def test_listing_search_and_children_columns(db, catalog, cache):
    receive(
        db,
        (catalog.dress.id, "M", catalog.black.id, 1),
        (catalog.kids_suit.id, "104", catalog.white.id, 2),
        (catalog.kids_suit.id, "92 - 2 года", catalog.white.id, 1),
    )

    kids = stock_service.stock_listing(db, cache, category_id=catalog.kids.id)
    by_color = stock_service.stock_listing(db, cache, search="white")

    assert kids["sizes"] == ["92", "104"]
    assert [row["article"] for row in kids["items"]] == ["K200"]
    assert kids["items"][0]["sizes"] == [1, 2]
    assert [row["article"] for row in by_color["items"]] == ["K200"]


def test_listing_paginates_finished_rows(db, catalog, cache):
    receive(
        db,
        (catalog.dress.id, "M", catalog.black.id, 1),
        (catalog.coat.id, "M", None, 1),
        (catalog.kids_suit.id, "98", catalog.white.id, 1),
    )

    page_two = stock_service.stock_listing(db, cache, page=2, limit=2)

    assert page_two["pagination"]["total"] == 3
    assert page_two["pagination"]["total_pages"] == 2
    assert len(page_two["items"]) == 1


def test_clamped_keys_are_reported(db, catalog, cache):
    first = receive(db, (catalog.coat.id, "M", None, 2))
    receive(db, (catalog.coat.id, "S", None, 1))
    realize(db, (catalog.coat.id, "M", None, 2))
    receipt_service.delete_receipt(db, first.id)

    listing = stock_service.stock_listing(db, cache)

    assert len(listing["integrity_warnings"]) == 1
    assert "outbound=2" in listing["integrity_warnings"][0]


def test_product_stock(db, catalog, cache):
    receive(db, (catalog.dress.id, "M", catalog.black.id, 3), (catalog.dress.id, "M", None, 1))

    detail = stock_service.product_stock(db, cache, catalog.dress.id)

    assert detail["total_quantity"] == 4
    assert [(line["size_code"], line["color_name"], line["qty"]) for line in detail["items"]] == [
        ("M", "No color", 1),
        ("M", "Black", 3),
    ]


def test_report_rows_and_size_filter(db, catalog, cache):
    receive(
        db,
        (catalog.dress.id, "М", catalog.black.id, 2),
        (catalog.dress.id, "S", catalog.black.id, 1),
        (catalog.coat.id, "M", None, 4),
    )

    report = stock_service.stock_report(db, cache)
    only_m = stock_service.stock_report(db, cache, size="M")
    coat_only = stock_service.stock_report(db, cache, article_search="021")

    assert report["total_quantity"] == 7
    assert report["product_totals"] == {catalog.dress.id: 3, catalog.coat.id: 4}
    assert {(row["article"], row["size_code"]) for row in only_m["items"]} == {("W101", "M"), ("L021", "M")}
    assert [row["category_name"] for row in coat_only["items"]] == ["Outerwear"]


def test_recent_intake_is_partial(db, catalog, cache):
    receive(db, (catalog.coat.id, "M", None, 1))

    recent = stock_service.recent_intake(db, cache)

    assert recent["partial"] is True
    assert recent["items"][0]["qty"] == 1
