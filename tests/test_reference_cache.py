import pytest
from sqlalchemy.exc import OperationalError

from stockledger.exceptions import TransientStoreError
from stockledger.services.reference_cache import ReferenceCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_names_are_cached_until_expiry(db, catalog):
    clock = FakeClock()
    cache = ReferenceCache(ttl_seconds=10, clock=clock)
    assert cache.color_name(db, catalog.black.id) == "Black"

    catalog.black.name = "Jet"
    db.commit()
    assert cache.color_name(db, catalog.black.id) == "Black"

    clock.now = 11
    assert cache.color_name(db, catalog.black.id) == "Jet"


def test_fallbacks(db, catalog, cache):
    assert cache.color_name(db, None) == "No color"
    assert cache.color_name(db, 404) == "404"
    assert cache.brand_name(db, None) is None
    assert cache.category_name(db, catalog.kids.id) == "Kids"


def test_store_failure_is_transient(db, cache, monkeypatch):
    def fail(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "execute", fail)

    with pytest.raises(TransientStoreError) as excinfo:
        cache.brand_name(db, 1)
    assert isinstance(excinfo.value.__cause__, OperationalError)
