"""Tests for stock transfers between variants and warehouses."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import (
    InsufficientStock,
    InvalidTransfer,
    NotFound,
)
from stockledger.domain.model.enums import MovementKind, ReferenceType, Warehouse
from stockledger.domain.model.transfer import TransferRequest
from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.filters import MovementFilter
from stockledger.domain.service.inventory_store import InventoryStore
from stockledger.domain.service.transfer_service import TransferService
from tests.fakes import FakeUnitOfWork

CO = Warehouse.COMPANY


def _setup():
    uow = FakeUnitOfWork()
    with uow:
        uow.variants.save(Variant.create("V1", "V1", Decimal("10.00")))
        uow.variants.save(Variant.create("V2", "V2", Decimal("5.00")))
    store = InventoryStore(uow)
    store.adjust("V1", CO, 10, "Opening stock", "alice")
    return uow, store, TransferService(uow, store)


def _request(quantity=3, target="V2", target_warehouse=CO, reason="Damaged"):
    return TransferRequest(
        source_variant_id="V1",
        source_warehouse=CO,
        target_variant_id=target,
        target_warehouse=target_warehouse,
        quantity=quantity,
        reason=reason,
    )


class TestTransfer:

    def test_moves_units_and_carries_cost(self):
        uow, store, service = _setup()
        transfer = service.transfer(_request(), "alice")

        assert transfer.transfer_number == "ST-000001"
        assert transfer.unit_cost == Decimal("10.00")
        assert transfer.total_cost == Decimal("30.00")
        assert store.snapshot("V1", CO).quantity == 7
        target = store.snapshot("V2", CO)
        assert target.quantity == 3
        assert target.unit_cost == Decimal("10.00")

    def test_numbers_are_sequential(self):
        _, _, service = _setup()
        service.transfer(_request(1), "alice")
        second = service.transfer(_request(1), "alice")
        assert second.transfer_number == "ST-000002"

    def test_writes_paired_movements(self):
        uow, _, service = _setup()
        service.transfer(_request(), "alice")

        movements = uow.movements.list(MovementFilter(reference_id="ST-000001"))
        assert [(m.variant_id, m.quantity_change) for m in movements] == [("V1", -3), ("V2", 3)]
        assert all(m.kind == MovementKind.TRANSFER for m in movements)
        assert all(m.reference_type == ReferenceType.TRANSFER for m in movements)

    def test_cost_drawn_from_several_lots_is_kept(self):
        uow, store, service = _setup()
        store.adjust("V1", CO, 5, "Purchase", "alice", unit_cost=Decimal("20.00"), new_lot=True)

        transfer = service.transfer(_request(12), "alice")

        out, into = uow.movements.list(MovementFilter(reference_id="ST-000001"))
        assert out.total_cost == Decimal("140.00")
        assert into.total_cost == Decimal("140.00")
        assert transfer.total_cost == Decimal("140.00")
        assert transfer.unit_cost == Decimal("10.00")
        assert store.snapshot("V2", CO).unit_cost == Decimal("10.00")

    def test_last_transfer_overwrites_target_cost(self):
        _, store, service = _setup()
        store.adjust("V2", CO, 2, "Opening stock", "alice")
        assert store.snapshot("V2", CO).unit_cost == Decimal("5.00")

        service.transfer(_request(), "alice")

        target = store.snapshot("V2", CO)
        assert target.quantity == 5
        assert target.lot_count == 1
        assert target.unit_cost == Decimal("10.00")

    def test_between_warehouses_of_same_variant(self):
        _, store, service = _setup()
        service.transfer(_request(4, target="V1", target_warehouse=Warehouse.PRIVATE), "alice")
        summary = store.summary("V1")
        assert summary.total_quantity == 10
        assert summary.by_warehouse == {CO: 6, Warehouse.PRIVATE: 4}

    def test_same_stock_rejected(self):
        _, _, service = _setup()
        with pytest.raises(InvalidTransfer):
            service.transfer(_request(target="V1"), "alice")

    def test_insufficient_source_rolls_back(self):
        uow, store, service = _setup()
        with pytest.raises(InsufficientStock):
            service.transfer(_request(11), "alice")
        assert store.snapshot("V1", CO).quantity == 10
        assert store.snapshot("V2", CO).quantity == 0
        assert service.list_transfers() == []

    def test_unknown_target(self):
        _, _, service = _setup()
        with pytest.raises(NotFound, match="Target variant 'V9'"):
            service.transfer(_request(target="V9"), "alice")

    def test_list_newest_first(self):
        _, _, service = _setup()
        service.transfer(_request(1), "alice")
        service.transfer(_request(2), "alice")
        assert [t.transfer_number for t in service.list_transfers()] == ["ST-000002", "ST-000001"]
