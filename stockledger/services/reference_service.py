from sqlalchemy.orm import Session

from stockledger.models.catalog import Brand, Category, Color
from stockledger.services.reference_cache import ReferenceCache

_KINDS = {"colors": Color, "brands": Brand, "categories": Category}


def create_reference(db: Session, cache: ReferenceCache, kind: str, name: str):
    model = _KINDS[kind]
    if db.query(model).filter(model.name == name).first():
        raise ValueError(f"{name!r} already exists in {kind}")
    row = model(name=name)
    db.add(row)
    db.commit()
    db.refresh(row)
    cache.invalidate(kind)
    return row


def list_references(db: Session, kind: str):
    model = _KINDS[kind]
    return db.query(model).order_by(model.name).all()
