"""Unit tests for the StockLedger domain service."""

from datetime import timedelta

import pytest

from stockroom.domain.exceptions import ProductNotFoundError, ValidationError
from stockroom.domain.model.stock import MovementDirection, StockMovement
from stockroom.domain.service.stock_ledger import StockLedger
from stockroom.infrastructure.persistence.in_memory import InMemoryUnitOfWork
from tests.fakes import T0, FixedClock, inbound, make_store


def _ledger(uow: InMemoryUnitOfWork) -> StockLedger:
    return StockLedger(uow.movements, uow.products, FixedClock())


class TestAvailableQuantity:

    def test_no_movements_means_zero(self):
        with InMemoryUnitOfWork(make_store()) as uow:
            assert _ledger(uow).available_quantity("1") == 0

    def test_sum_of_signed_movements(self):
        with InMemoryUnitOfWork(make_store({"1": 10})) as uow:
            ledger = _ledger(uow)
            ledger.record_movement("1", 3, MovementDirection.OUTBOUND, "clerk")
            ledger.record_movement("1", 5, MovementDirection.INBOUND, "clerk")
            assert ledger.available_quantity("1") == 12

    def test_products_are_independent(self):
        with InMemoryUnitOfWork(make_store({"1": 10, "2": 4})) as uow:
            ledger = _ledger(uow)
            ledger.record_movement("2", 4, MovementDirection.OUTBOUND, "clerk")
            assert ledger.available_quantity("1") == 10
            assert ledger.available_quantity("2") == 0

    def test_recording_order_does_not_matter(self):
        moves = [
            (4, MovementDirection.INBOUND),
            (3, MovementDirection.OUTBOUND),
            (9, MovementDirection.INBOUND),
            (2, MovementDirection.OUTBOUND),
        ]
        results = []
        for sequence in (moves, list(reversed(moves))):
            with InMemoryUnitOfWork(make_store()) as uow:
                ledger = _ledger(uow)
                for qty, direction in sequence:
                    ledger.record_movement("1", qty, direction, "clerk")
                results.append(ledger.available_quantity("1"))
        assert results == [8, 8]

    def test_ledger_does_not_judge_balance(self):
        with InMemoryUnitOfWork(make_store({"1": 1})) as uow:
            ledger = _ledger(uow)
            ledger.record_movement("1", 5, MovementDirection.OUTBOUND, "clerk")
            assert ledger.available_quantity("1") == -4


class TestRecordMovement:

    def test_movement_fields(self):
        with InMemoryUnitOfWork(make_store()) as uow:
            movement = _ledger(uow).record_movement(
                "1", 7, MovementDirection.INBOUND, "clerk",
                document_ref="NF-123", notes="supplier delivery",
            )
        assert movement.product_id == "1"
        assert movement.quantity == 7
        assert movement.direction is MovementDirection.INBOUND
        assert movement.actor == "clerk"
        assert movement.document_ref == "NF-123"
        assert movement.notes == "supplier delivery"
        assert movement.occurred_at == T0 + timedelta(seconds=1)
        assert movement.signed_quantity == 7

    @pytest.mark.parametrize("qty", [0, -1])
    def test_non_positive_quantity_rejected(self, qty):
        with InMemoryUnitOfWork(make_store()) as uow:
            with pytest.raises(ValidationError, match="must be positive"):
                _ledger(uow).record_movement("1", qty, MovementDirection.INBOUND, "clerk")

    def test_unknown_product_rejected(self):
        with InMemoryUnitOfWork(make_store()) as uow:
            with pytest.raises(ProductNotFoundError):
                _ledger(uow).record_movement("99", 1, MovementDirection.INBOUND, "clerk")

    def test_inactive_product_rejected(self):
        store = make_store()
        store.products["3"].active = False
        with InMemoryUnitOfWork(store) as uow:
            with pytest.raises(ProductNotFoundError, match="'3'"):
                _ledger(uow).record_movement("3", 1, MovementDirection.INBOUND, "clerk")

    def test_movement_ids_are_unique(self):
        with InMemoryUnitOfWork(make_store()) as uow:
            ledger = _ledger(uow)
            a = ledger.record_movement("1", 1, MovementDirection.INBOUND, "clerk")
            b = ledger.record_movement("1", 1, MovementDirection.INBOUND, "clerk")
        assert a.id != b.id

    def test_outbound_signed_quantity_is_negative(self):
        movement = StockMovement("1", 4, MovementDirection.OUTBOUND, T0, "clerk")
        assert movement.signed_quantity == -4


class TestHistory:

    def test_newest_first(self):
        store = make_store()
        store.movements.extend([
            inbound("1", 1, at=T0),
            inbound("2", 2, at=T0 + timedelta(hours=2)),
            inbound("1", 3, at=T0 + timedelta(hours=1)),
        ])
        with InMemoryUnitOfWork(store) as uow:
            history = _ledger(uow).history()
        assert [m.quantity for m in history] == [2, 3, 1]

    def test_filtered_by_product(self):
        with InMemoryUnitOfWork(make_store({"1": 5, "2": 6})) as uow:
            history = _ledger(uow).history("2")
        assert [(m.product_id, m.quantity) for m in history] == [("2", 6)]

    def test_ties_put_latest_recorded_first(self):
        store = make_store()
        first, second = inbound("1", 1), inbound("1", 2)
        store.movements.extend([first, second])
        with InMemoryUnitOfWork(store) as uow:
            history = _ledger(uow).history("1")
        assert [m.id for m in history] == [second.id, first.id]

    def test_reading_twice_gives_the_same_answer(self):
        with InMemoryUnitOfWork(make_store({"1": 5, "2": 6})) as uow:
            ledger = _ledger(uow)
            first = ledger.history()
            assert ledger.history() == first
            assert ledger.available_quantity("1") == ledger.available_quantity("1") == 5

    def test_includes_staged_movements(self):
        with InMemoryUnitOfWork(make_store({"1": 5})) as uow:
            ledger = _ledger(uow)
            ledger.record_movement("1", 2, MovementDirection.OUTBOUND, "clerk")
            history = ledger.history("1")
        assert [m.direction for m in history] == [
            MovementDirection.OUTBOUND,
            MovementDirection.INBOUND,
        ]
