"""Unit tests for InventoryLot and the inventory read models."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import (
    InsufficientReservation,
    InsufficientStock,
    InvariantViolation,
    ValidationError,
)
from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.inventory import (
    InventoryLot,
    InventorySnapshot,
    VariantInventorySummary,
)
from stockledger.domain.model.variant import Variant


def _lot(quantity=10, reserved=0, lot_id=1, warehouse=Warehouse.COMPANY, cost="10.00"):
    return InventoryLot(
        id=lot_id,
        variant_id="V1",
        warehouse=warehouse,
        quantity=quantity,
        reserved=reserved,
        unit_cost=Decimal(cost),
    )


class TestInventoryLotReserve:

    def test_reserve_reduces_available(self):
        lot = _lot(quantity=100)
        lot.reserve(30)
        assert lot.available == 70
        assert lot.reserved == 30
        assert lot.quantity == 100

    def test_reserve_all_available(self):
        lot = _lot(quantity=10)
        lot.reserve(10)
        assert lot.available == 0

    def test_reserve_more_than_available_rejected(self):
        lot = _lot(quantity=10, reserved=4)
        with pytest.raises(InsufficientStock) as exc_info:
            lot.reserve(7)
        assert exc_info.value.requested == 7
        assert exc_info.value.available == 6
        assert lot.reserved == 4

    def test_reserve_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _lot().reserve(0)


class TestInventoryLotRelease:

    def test_release_increases_available(self):
        lot = _lot(quantity=100, reserved=30)
        lot.release(10)
        assert lot.available == 80
        assert lot.reserved == 20

    def test_release_more_than_reserved_rejected(self):
        lot = _lot(quantity=100, reserved=5)
        with pytest.raises(InsufficientReservation, match="only 5 currently reserved"):
            lot.release(6)


class TestInventoryLotConsume:

    def test_consume_reduces_quantity_and_reserved(self):
        lot = _lot(quantity=20, reserved=8)
        lot.consume(5)
        assert lot.quantity == 15
        assert lot.reserved == 3
        assert lot.available == 12

    def test_consume_more_than_reserved_rejected(self):
        lot = _lot(quantity=20, reserved=2)
        with pytest.raises(InsufficientReservation):
            lot.consume(3)
        assert lot.quantity == 20


class TestInventoryLotAddWithdraw:

    def test_add(self):
        lot = _lot(quantity=0)
        lot.add(7)
        assert lot.quantity == 7

    def test_add_negative_rejected(self):
        with pytest.raises(ValidationError, match="Inbound quantity must be positive"):
            _lot().add(-1)

    def test_withdraw_leaves_reserved_alone(self):
        lot = _lot(quantity=10, reserved=4)
        lot.withdraw(6)
        assert lot.quantity == 4
        assert lot.reserved == 4

    def test_withdraw_cannot_touch_reserved_units(self):
        lot = _lot(quantity=10, reserved=4)
        with pytest.raises(InsufficientStock):
            lot.withdraw(7)


# ── Read models ──────────────────────────────────────────────────────────────


class TestInventorySnapshot:

    def test_sums_lots_and_reports_newest_cost(self):
        older = _lot(quantity=3, reserved=1, lot_id=1, cost="10.00")
        newer = _lot(quantity=5, reserved=2, lot_id=2, cost="12.00")
        newer.created_at = older.created_at.replace(year=older.created_at.year + 1)

        snap = InventorySnapshot.of("V1", Warehouse.COMPANY, [newer, older])

        assert snap.quantity == 8
        assert snap.reserved == 3
        assert snap.available == 5
        assert snap.unit_cost == Decimal("12.00")
        assert snap.lot_count == 2

    def test_no_lots(self):
        snap = InventorySnapshot.of("V1", Warehouse.PRIVATE, [])
        assert snap.quantity == 0
        assert snap.available == 0
        assert snap.unit_cost == Decimal("0")


class TestVariantInventorySummary:

    def test_groups_by_warehouse(self):
        lots = [
            _lot(quantity=3, lot_id=1, warehouse=Warehouse.COMPANY),
            _lot(quantity=4, reserved=1, lot_id=2, warehouse=Warehouse.PRIVATE),
        ]
        summary = VariantInventorySummary.of("V1", lots)
        assert summary.total_quantity == 7
        assert summary.reserved == 1
        assert summary.available == 6
        assert summary.by_warehouse == {Warehouse.COMPANY: 3, Warehouse.PRIVATE: 4}


# ── Variant ──────────────────────────────────────────────────────────────────


class TestVariant:

    def test_create_strips_whitespace(self):
        variant = Variant.create(" V1 ", " WINE ", Decimal("1.00"))
        assert variant.id == "V1"
        assert variant.code == "WINE"
        assert variant.stock_quantity == 0

    def test_code_required(self):
        with pytest.raises(ValidationError, match="code is required"):
            Variant.create("V1", "", Decimal("1.00"))

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Variant.create("V1", "V1", Decimal("-1"))

    def test_apply_totals(self):
        variant = Variant.create("V1", "V1", Decimal("1.00"))
        variant.apply_totals(10, 3)
        assert variant.available_stock == 7

    def test_apply_totals_rejects_over_reservation(self):
        variant = Variant.create("V1", "V1", Decimal("1.00"))
        with pytest.raises(InvariantViolation):
            variant.apply_totals(2, 3)
