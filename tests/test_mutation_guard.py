import pytest

from conftest import realize, receive
from stockledger.exceptions import PartialLedgerError
from stockledger.ledger.aggregator import aggregate
from stockledger.ledger.events import MovementEvent
from stockledger.services.mutation_guard import can_change_identity, decide_identity_change


def test_allowed_without_history():
    decision = decide_identity_change(aggregate([], []), 1)
    assert decision.allowed
    assert decision.reason is None
    assert decision.current_balance == 0


def test_blocked_with_stock_in_any_key():
    inbound = [
        MovementEvent(1, 1, "M", 2, 1, 1, "receipt"),
        MovementEvent(2, 1, "S", None, 1, 1, "receipt"),
        MovementEvent(3, 2, "S", None, 9, 1, "receipt"),
    ]
    decision = decide_identity_change(aggregate(inbound, []), 1)

    assert not decision.allowed
    assert decision.current_balance == 2
    assert "2 unit(s)" in decision.reason
    assert [(line.size_code, line.color_id, line.qty) for line in decision.breakdown] == [("S", None, 1), ("M", 2, 1)]


def test_partial_snapshot_is_refused():
    with pytest.raises(PartialLedgerError):
        decide_identity_change(aggregate([], [], partial=True), 1)


def test_allowed_again_once_balance_is_zero(db, catalog):
    dress = catalog.dress
    receive(db, (dress.id, "M", catalog.black.id, 2))
    assert not can_change_identity(db, dress.id).allowed

    realize(db, (dress.id, "M", catalog.black.id, 2))

    assert can_change_identity(db, dress.id).allowed
