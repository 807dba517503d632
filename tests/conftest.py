from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from stockledger.database import get_db, init_db
from stockledger.models.catalog import Brand, Category, Color, Product
from stockledger.schemas.movement import MovementLine, OrderCreate, OrderLine, RealizationCreate, ReceiptCreate
from stockledger.services import order_service, realization_service, receipt_service
from stockledger.services.reference_cache import ReferenceCache


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'ledger.db'}", connect_args={"check_same_thread": False})
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def cache():
    return ReferenceCache(ttl_seconds=60)


@pytest.fixture
def catalog(db):
    """Two colors, three categories (id 3 is children) and three products."""
    black, white = Color(name="Black"), Color(name="White")
    dresses, outerwear, kids = Category(name="Dresses"), Category(name="Outerwear"), Category(name="Kids")
    brand = Brand(name="Acme")
    db.add_all([black, white, dresses, outerwear, kids, brand])
    db.commit()

    dress = Product(name="Summer dress", article="W101", brand_id=brand.id, category_id=dresses.id, color_id=black.id)
    kids_suit = Product(name="Kids suit", article="K200", brand_id=brand.id, category_id=kids.id, color_id=white.id)
    coat = Product(name="Wool coat", article="021", category_id=outerwear.id)
    db.add_all([dress, kids_suit, coat])
    db.commit()

    return SimpleNamespace(
        black=black, white=white, dresses=dresses, outerwear=outerwear, kids=kids, brand=brand,
        dress=dress, kids_suit=kids_suit, coat=coat,
    )


def receive(db, *lines, notes=""):
    """lines: (product_id, size_code, color_id, qty)"""
    items = [MovementLine(product_id=p, size_code=s, color_id=c, qty=q) for p, s, c, q in lines]
    return receipt_service.create_receipt(db, ReceiptCreate(notes=notes, items=items))


def realize(db, *lines, recipient="Shop 1"):
    items = [MovementLine(product_id=p, size_code=s, color_id=c, qty=q) for p, s, c, q in lines]
    return realization_service.create_realization(db, RealizationCreate(recipient=recipient, items=items))


def order(db, *lines, customer_name="Jane Doe", customer_phone="+100"):
    items = [OrderLine(product_id=p, size_code=s, color_id=c, qty=q, price=10.0) for p, s, c, q in lines]
    return order_service.create_order(
        db, OrderCreate(customer_name=customer_name, customer_phone=customer_phone, items=items)
    )


@pytest.fixture
def client(session_factory, cache):
    from stockledger.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.reference_cache = cache
    yield TestClient(app)
    app.dependency_overrides.clear()
