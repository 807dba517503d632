import pytest

from conftest import receive
from stockledger.exceptions import PartialLedgerError
from stockledger.ledger.aggregator import aggregate
from stockledger.ledger.events import MovementEvent
from stockledger.services import stock_validator
from stockledger.services.stock_validator import Allocation, check_allocations


def _snapshot(qty, partial=False):
    inbound = [MovementEvent(1, 5, "M", None, qty, 1, "receipt")]
    return aggregate(inbound, [], partial=partial)


class TestCheckAllocations:
    def test_within_balance(self):
        result = check_allocations(_snapshot(3), [Allocation(5, "M", None, 3)])
        assert result.valid
        assert result.shortfalls == []

    def test_lines_for_one_key_compete_for_the_same_balance(self):
        result = check_allocations(
            _snapshot(3), [Allocation(5, "M", None, 2), Allocation(5, "M ", "0", 2)], product_names={5: "Dress"}
        )

        assert not result.valid
        [shortfall] = result.shortfalls
        assert (shortfall.requested, shortfall.available) == (4, 3)
        assert shortfall.color_id is None
        assert 'Insufficient stock for "Dress" size M' in shortfall.message

    def test_every_failing_line_is_reported(self):
        result = check_allocations(_snapshot(1), [Allocation(5, "M", None, 2), Allocation(5, "L", None, 1)])
        assert [(s.size_code, s.available) for s in result.shortfalls] == [("M", 1), ("L", 0)]

    def test_partial_snapshot_is_refused(self):
        with pytest.raises(PartialLedgerError):
            check_allocations(_snapshot(3, partial=True), [Allocation(5, "M", None, 1)])


class TestValidate:
    def test_empty_request_is_valid(self, db):
        assert stock_validator.validate(db, []).valid

    def test_reads_current_balance(self, db, catalog):
        dress = catalog.dress
        receive(db, (dress.id, "M", catalog.black.id, 3))

        ok = stock_validator.validate(db, [Allocation(dress.id, "M", catalog.black.id, 3)])
        too_many = stock_validator.validate(db, [Allocation(dress.id, "M", str(catalog.black.id), 4)])

        assert ok.valid
        assert not too_many.valid
        assert too_many.shortfalls[0].product_name == "Summer dress"

    def test_color_is_part_of_the_key(self, db, catalog):
        dress = catalog.dress
        receive(db, (dress.id, "M", catalog.black.id, 3))

        result = stock_validator.validate(db, [Allocation(dress.id, "M", catalog.white.id, 1)])

        assert not result.valid
        assert result.shortfalls[0].available == 0
