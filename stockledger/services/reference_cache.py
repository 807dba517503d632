"""Display names for colors, brands and categories.

Names only decorate responses; no balance or decision depends on them. The
cache is owned by whoever creates it (the application keeps one on
``app.state``) and is refreshed after ``ttl_seconds`` or on ``invalidate()``.
"""

import logging
import threading
import time

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.exceptions import TransientStoreError
from stockledger.models.catalog import Brand, Category, Color

logger = logging.getLogger(__name__)

_MODELS = {"colors": Color, "brands": Brand, "categories": Category}


class ReferenceCache:
    def __init__(self, ttl_seconds: float, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._maps: dict[str, dict[int, str]] = {}
        self._loaded_at: dict[str, float] = {}

    def invalidate(self, kind: str | None = None) -> None:
        with self._lock:
            if kind is None:
                self._maps.clear()
                self._loaded_at.clear()
            else:
                self._maps.pop(kind, None)
                self._loaded_at.pop(kind, None)

    def _names(self, db: Session, kind: str) -> dict[int, str]:
        now = self._clock()
        with self._lock:
            loaded = self._loaded_at.get(kind)
            if loaded is not None and now - loaded < self.ttl_seconds:
                return self._maps[kind]
        model = _MODELS[kind]
        try:
            names = {row.id: row.name for row in db.execute(select(model.id, model.name)).all()}
        except SQLAlchemyError as exc:
            raise TransientStoreError(f"reading {kind}") from exc
        logger.debug("Loaded %d %s into reference cache", len(names), kind)
        with self._lock:
            self._maps[kind] = names
            self._loaded_at[kind] = now
        return names

    def color_name(self, db: Session, color_id: int | None) -> str:
        if color_id is None:
            return "No color"
        return self._names(db, "colors").get(color_id, str(color_id))

    def brand_name(self, db: Session, brand_id: int | None) -> str | None:
        if brand_id is None:
            return None
        return self._names(db, "brands").get(brand_id)

    def category_name(self, db: Session, category_id: int | None) -> str | None:
        if category_id is None:
            return None
        return self._names(db, "categories").get(category_id)
