"""Tests for the InventoryStore domain service against in-memory fakes."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import (
    ConcurrencyConflict,
    InsufficientReservation,
    InsufficientStock,
    InvariantViolation,
    NotFound,
    ValidationError,
)
from stockledger.domain.model.enums import MovementKind, ReferenceType, Warehouse
from stockledger.domain.model.value_objects import Reference
from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.filters import MovementFilter
from stockledger.domain.service.inventory_store import InventoryStore
from tests.fakes import FakeUnitOfWork

CO = Warehouse.COMPANY


def _make_store(*variant_ids):
    uow = FakeUnitOfWork()
    with uow:
        for vid in variant_ids:
            uow.variants.save(Variant.create(vid, vid, Decimal("10.00")))
    return uow, InventoryStore(uow)


def _movements(uow, variant_id="V1", warehouse=CO):
    return uow.movements.list(MovementFilter(variant_id=variant_id, warehouse=warehouse))


# ── Adjustments ──────────────────────────────────────────────────────────────


class TestAdjust:

    def test_first_inbound_creates_lot_at_variant_cost(self):
        uow, store = _make_store("V1")
        snap = store.adjust("V1", CO, 5, "Count", "alice")

        assert snap.quantity == 5
        assert snap.available == 5
        assert snap.unit_cost == Decimal("10.00")
        [movement] = _movements(uow)
        assert movement.kind == MovementKind.ADJUSTMENT
        assert (movement.quantity_before, movement.quantity_change, movement.quantity_after) == (0, 5, 5)
        assert movement.total_cost == Decimal("50.00")
        assert movement.reference_type == ReferenceType.ADJUSTMENT
        assert movement.created_by == "alice"

    def test_same_cost_tops_up_newest_lot(self):
        _, store = _make_store("V1")
        store.adjust("V1", CO, 5, "Count", "alice")
        snap = store.adjust("V1", CO, 2, "Count", "alice", unit_cost=Decimal("10.00"))
        assert snap.lot_count == 1
        assert snap.quantity == 7

    def test_different_cost_starts_new_lot(self):
        _, store = _make_store("V1")
        store.adjust("V1", CO, 3, "Count", "alice")
        snap = store.adjust("V1", CO, 4, "Count", "alice", unit_cost=Decimal("12.00"))
        assert snap.lot_count == 2
        assert snap.unit_cost == Decimal("12.00")

    def test_updates_variant_counters(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 5, "Count", "alice")
        store.adjust("V1", Warehouse.PRIVATE, 2, "Count", "alice")
        store.reserve("V1", CO, 1, "alice")
        variant = uow.variants.get("V1")
        assert variant.stock_quantity == 7
        assert variant.reserved_stock == 1
        assert variant.available_stock == 6

    def test_zero_delta_rejected(self):
        _, store = _make_store("V1")
        with pytest.raises(ValidationError, match="cannot be zero"):
            store.adjust("V1", CO, 0, "Count", "alice")

    def test_unknown_variant(self):
        _, store = _make_store()
        with pytest.raises(NotFound, match="Variant 'V9' not found"):
            store.adjust("V9", CO, 1, "Count", "alice")

    def test_outbound_beyond_available_rejected_and_nothing_written(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 5, "Count", "alice")
        store.reserve("V1", CO, 3, "alice")

        with pytest.raises(InsufficientStock) as exc_info:
            store.adjust("V1", CO, -3, "Shrinkage", "alice")

        assert exc_info.value.available == 2
        assert store.snapshot("V1", CO).quantity == 5
        assert len(_movements(uow)) == 2

    def test_outbound_on_empty_pair(self):
        _, store = _make_store("V1")
        with pytest.raises(NotFound, match="No inventory"):
            store.adjust("V1", CO, -1, "Shrinkage", "alice")

    def test_outbound_across_lots_fifo(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 3, "Count", "alice", unit_cost=Decimal("10.00"))
        store.adjust("V1", CO, 5, "Count", "alice", unit_cost=Decimal("12.00"))

        snap = store.adjust("V1", CO, -4, "Shrinkage", "alice")

        assert snap.quantity == 4
        assert snap.lot_count == 2
        last = _movements(uow)[-1]
        assert last.quantity_change == -4
        assert (last.quantity_before, last.quantity_after) == (8, 4)
        assert last.unit_cost == Decimal("10.00")
        assert last.total_cost == Decimal("42.00")
        assert last.lot_id is None

        lots = uow.inventory.lots_for("V1", CO)
        assert [lot.quantity for lot in lots] == [0, 4]


# ── Reservations ─────────────────────────────────────────────────────────────


class TestReserveRelease:

    def test_reserve_writes_zero_quantity_movement(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 5, "Count", "alice")
        snap = store.reserve("V1", CO, 2, "alice", reference=Reference(ReferenceType.RESERVATION, "L1"))

        assert snap.reserved == 2
        assert snap.available == 3
        movement = _movements(uow)[-1]
        assert movement.kind == MovementKind.RESERVATION
        assert movement.quantity_change == 0
        assert movement.reserved_change == 2
        assert movement.quantity_before == movement.quantity_after == 5
        assert movement.reference_id == "L1"

    def test_reserve_more_than_available(self):
        _, store = _make_store("V1")
        store.adjust("V1", CO, 2, "Count", "alice")
        with pytest.raises(InsufficientStock):
            store.reserve("V1", CO, 3, "alice")

    def test_release(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 5, "Count", "alice")
        store.reserve("V1", CO, 4, "alice")
        snap = store.release("V1", CO, 3, "alice")

        assert snap.reserved == 1
        movement = _movements(uow)[-1]
        assert movement.kind == MovementKind.RELEASE
        assert movement.reserved_change == -3

    def test_release_more_than_reserved(self):
        _, store = _make_store("V1")
        store.adjust("V1", CO, 5, "Count", "alice")
        store.reserve("V1", CO, 1, "alice")
        with pytest.raises(InsufficientReservation):
            store.release("V1", CO, 2, "alice")

    def test_get_available(self):
        _, store = _make_store("V1")
        assert store.get_available("V1", CO) == 0
        store.adjust("V1", CO, 5, "Count", "alice")
        store.reserve("V1", CO, 2, "alice")
        assert store.get_available("V1", CO) == 3


# ── Shipping ─────────────────────────────────────────────────────────────────


class TestConsumeReserved:

    def test_fifo_one_movement_per_lot(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 3, "Count", "alice", unit_cost=Decimal("10.00"))
        store.adjust("V1", CO, 10, "Count", "alice", unit_cost=Decimal("12.00"), new_lot=True)
        store.reserve("V1", CO, 5, "alice")

        movements = store.consume_reserved("V1", CO, 5, "alice")

        assert [m.kind for m in movements] == [MovementKind.SALE, MovementKind.SALE]
        first, second = movements
        assert (first.quantity_change, first.unit_cost, first.total_cost) == (-3, Decimal("10.00"), Decimal("30.00"))
        assert (first.quantity_before, first.quantity_after) == (13, 10)
        assert (second.quantity_change, second.unit_cost, second.total_cost) == (-2, Decimal("12.00"), Decimal("24.00"))
        assert (second.quantity_before, second.quantity_after) == (10, 8)
        assert first.reserved_change == -3
        assert first.lot_id != second.lot_id

        snap = store.snapshot("V1", CO)
        assert snap.quantity == 8
        assert snap.reserved == 0
        assert uow.movements.balance("V1", CO) == 8

    def test_cannot_ship_unreserved_stock(self):
        _, store = _make_store("V1")
        store.adjust("V1", CO, 10, "Count", "alice")
        store.reserve("V1", CO, 2, "alice")
        with pytest.raises(InsufficientReservation):
            store.consume_reserved("V1", CO, 3, "alice")


# ── Ledger consistency ───────────────────────────────────────────────────────


class TestLedgerBalance:

    def test_ledger_sum_matches_lots(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 10, "Count", "alice")
        store.adjust("V1", CO, -3, "Shrinkage", "alice")
        store.reserve("V1", CO, 4, "alice")
        store.consume_reserved("V1", CO, 4, "alice")
        assert uow.movements.balance("V1", CO) == store.snapshot("V1", CO).quantity == 3

    def test_tampered_lot_detected(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 10, "Count", "alice")
        with uow:
            [lot] = uow.inventory.lots_for("V1", CO)
            lot.quantity = 12
            uow.inventory.save(lot)

        with pytest.raises(InvariantViolation, match="sums to 10 but inventory holds 12"):
            store.adjust("V1", CO, 1, "Count", "alice")
        assert len(_movements(uow)) == 1

    def test_stale_lot_copy_is_rejected(self):
        uow, store = _make_store("V1")
        store.adjust("V1", CO, 10, "Count", "alice")
        with uow:
            [stale] = uow.inventory.lots_for("V1", CO)
        store.reserve("V1", CO, 4, "bob")

        with pytest.raises(ConcurrencyConflict):
            with uow:
                stale.reserved = 1
                uow.inventory.save(stale)
        assert store.snapshot("V1", CO).reserved == 4

    def test_summary_across_warehouses(self):
        _, store = _make_store("V1")
        store.adjust("V1", CO, 4, "Count", "alice")
        store.adjust("V1", Warehouse.PRIVATE, 6, "Count", "alice")
        summary = store.summary("V1")
        assert summary.total_quantity == 10
        assert summary.by_warehouse[Warehouse.PRIVATE] == 6
