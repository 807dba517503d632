"""Per-product exclusive locks held across check-and-write.

A stock decision is only as good as the moment it was read. Outflow and
product edits therefore run their validation, their insert and their commit
while holding the lock of every product they touch:

* a process-local lock per product id (threads of one worker), and
* a database lock that serializes workers: ``SELECT ... FOR UPDATE`` on the
  product rows where the database has row locks (PostgreSQL), and the
  database write lock (``BEGIN IMMEDIATE``) on SQLite, which has none.

Locks are always taken in ascending product id order.
"""

import logging
import threading
import weakref
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.exceptions import TransientStoreError
from stockledger.models.catalog import Product

logger = logging.getLogger(__name__)


class ProductLockRegistry:
    """Process-local locks by product id.

    Entries live only while some caller holds a reference to the lock, so
    the registry does not grow with every product ever locked.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[int, threading.Lock] = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def lock_for(self, product_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[product_id] = lock
            return lock


registry = ProductLockRegistry()


def _lock_rows(db: Session, product_ids: list[int]) -> None:
    conn = db.connection()
    if conn.dialect.name == "sqlite":
        # Take the write lock now; the reads that follow then see every
        # commit made before it and no other writer can slip in.
        if not conn.connection.dbapi_connection.in_transaction:
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        return
    db.execute(
        select(Product.id).where(Product.id.in_(product_ids)).order_by(Product.id).with_for_update()
    ).all()


@contextmanager
def hold(db: Session, product_ids, locks: ProductLockRegistry | None = None):
    """Lock ``product_ids`` for the duration of the block.

    The caller commits inside the block. If the block raises, the session is
    rolled back before the locks are released.
    """
    locks = locks or registry
    ordered = sorted({int(pid) for pid in product_ids})
    acquired: list[threading.Lock] = []
    try:
        for pid in ordered:
            lock = locks.lock_for(pid)
            lock.acquire()
            acquired.append(lock)
        if ordered:
            try:
                _lock_rows(db, ordered)
            except SQLAlchemyError as exc:
                raise TransientStoreError("locking products") from exc
        logger.debug("Holding stock locks for products %s", ordered)
        yield ordered
    except BaseException:
        db.rollback()
        raise
    finally:
        for lock in reversed(acquired):
            lock.release()
