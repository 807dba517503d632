"""Derive on-hand balances from movement history.

Balances are never stored. For every inventory key::

    balance = max(0, sum(inbound qty) - sum(outbound qty))

Inbound and outbound events are summed independently in one pass each and
then merged by key. A clamp that changes the value means more stock left the
warehouse than ever entered it under that key; it is logged and recorded on
the snapshot as an IntegrityWarning.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime

from stockledger.exceptions import PartialLedgerError
from stockledger.ledger.keys import InventoryKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityWarning:
    key: InventoryKey
    inbound: int
    outbound: int

    @property
    def deficit(self) -> int:
        return self.outbound - self.inbound

    def __str__(self) -> str:
        return (
            f"Outbound exceeds inbound for product {self.key.product_id} size {self.key.size_code!r} "
            f"color {self.key.color_id}: inbound={self.inbound} outbound={self.outbound} deficit={self.deficit}"
        )


@dataclass(frozen=True)
class KeyBalance:
    inbound: int
    outbound: int
    balance: int
    last_movement_at: datetime | None = None


@dataclass
class LedgerSnapshot:
    balances: dict[InventoryKey, KeyBalance] = field(default_factory=dict)
    warnings: list[IntegrityWarning] = field(default_factory=list)
    # True when built from an incomplete read; display only
    partial: bool = False

    def require_complete(self) -> "LedgerSnapshot":
        if self.partial:
            raise PartialLedgerError()
        return self

    def balance(self, key: InventoryKey) -> int:
        entry = self.balances.get(key)
        return entry.balance if entry else 0

    def total(self, product_id: int | None = None) -> int:
        return sum(
            entry.balance
            for key, entry in self.balances.items()
            if product_id is None or key.product_id == product_id
        )

    def positive(self, product_id: int | None = None) -> dict[InventoryKey, KeyBalance]:
        items = sorted(self.balances.items(), key=lambda kv: kv[0].sort_key())
        return {
            key: entry
            for key, entry in items
            if entry.balance > 0 and (product_id is None or key.product_id == product_id)
        }

    def by_product(self) -> dict[int, int]:
        rollup: dict[int, int] = {}
        for key, entry in self.balances.items():
            rollup[key.product_id] = rollup.get(key.product_id, 0) + entry.balance
        return rollup

    def by_product_color(self) -> dict[tuple[int, int | None], int]:
        rollup: dict[tuple[int, int | None], int] = {}
        for key, entry in self.balances.items():
            group = (key.product_id, key.color_id)
            rollup[group] = rollup.get(group, 0) + entry.balance
        return rollup


def _key_predicate(key_filter) -> Callable[[InventoryKey], bool] | None:
    if key_filter is None:
        return None
    if callable(key_filter):
        return key_filter
    wanted = set(key_filter)
    if all(isinstance(item, InventoryKey) for item in wanted):
        return lambda key: key in wanted
    product_ids = {int(item) for item in wanted}
    return lambda key: key.product_id in product_ids


def _event_key(event) -> InventoryKey:
    return InventoryKey.from_raw(event.product_id, event.size_code, event.color_id)


def _later(current: datetime | None, candidate: datetime | None) -> datetime | None:
    if candidate is None:
        return current
    if current is None or candidate > current:
        return candidate
    return current


def _sum_by_key(events: Iterable, predicate) -> tuple[dict[InventoryKey, int], dict[InventoryKey, datetime | None]]:
    totals: dict[InventoryKey, int] = {}
    latest: dict[InventoryKey, datetime | None] = {}
    for event in events:
        key = _event_key(event)
        if predicate is not None and not predicate(key):
            continue
        totals[key] = totals.get(key, 0) + (event.qty or 0)
        latest[key] = _later(latest.get(key), getattr(event, "created_at", None))
    return totals, latest


def aggregate(
    inbound: Iterable,
    outbound: Iterable,
    key_filter=None,
    partial: bool = False,
) -> LedgerSnapshot:
    """Build a snapshot of balances per normalized key.

    ``inbound`` and ``outbound`` are iterables of objects with ``product_id``,
    ``size_code``, ``color_id``, ``qty`` and optionally ``created_at``
    (MovementEvent or ORM rows). ``key_filter`` is a predicate on
    InventoryKey, a collection of keys, or a collection of product ids.
    """
    predicate = _key_predicate(key_filter)
    in_totals, in_latest = _sum_by_key(inbound, predicate)
    out_totals, out_latest = _sum_by_key(outbound, predicate)

    snapshot = LedgerSnapshot(partial=partial)
    for key in sorted(in_totals.keys() | out_totals.keys(), key=InventoryKey.sort_key):
        received = in_totals.get(key, 0)
        shipped = out_totals.get(key, 0)
        raw_balance = received - shipped
        if raw_balance < 0:
            warning = IntegrityWarning(key, received, shipped)
            logger.warning("Stock balance clamped to 0: %s", warning)
            snapshot.warnings.append(warning)
        snapshot.balances[key] = KeyBalance(
            inbound=received,
            outbound=shipped,
            balance=max(0, raw_balance),
            last_movement_at=_later(in_latest.get(key), out_latest.get(key)),
        )
    return snapshot
