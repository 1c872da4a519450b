"""Tests for ledger history and reconciliation."""

from decimal import Decimal

from stockledger.domain.model.enums import MovementKind, Warehouse
from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.filters import MovementFilter
from stockledger.domain.service.inventory_store import InventoryStore
from stockledger.domain.service.ledger_service import LedgerService
from tests.fakes import FakeUnitOfWork

CO = Warehouse.COMPANY


def _setup():
    uow = FakeUnitOfWork()
    with uow:
        uow.variants.save(Variant.create("V1", "V1", Decimal("10.00")))
        uow.variants.save(Variant.create("V2", "V2", Decimal("10.00")))
    return uow, InventoryStore(uow), LedgerService(uow)


class TestHistory:

    def test_filters_and_limits(self):
        _, store, ledger = _setup()
        store.adjust("V1", CO, 5, "Count", "alice")
        store.adjust("V1", CO, -1, "Shrinkage", "alice")
        store.reserve("V1", CO, 2, "alice")
        store.adjust("V2", CO, 1, "Count", "alice")

        assert len(ledger.history()) == 4
        assert len(ledger.history(MovementFilter(variant_id="V1"))) == 3
        reservations = ledger.history(MovementFilter(kind=MovementKind.RESERVATION))
        assert [m.reserved_change for m in reservations] == [2]
        assert len(ledger.history(MovementFilter(variant_id="V1", limit=2))) == 2

    def test_chain_is_unbroken(self):
        _, store, ledger = _setup()
        store.adjust("V1", CO, 5, "Count", "alice")
        store.adjust("V1", CO, 3, "Count", "alice", unit_cost=Decimal("11.00"))
        store.reserve("V1", CO, 6, "alice")
        store.consume_reserved("V1", CO, 6, "alice")

        movements = ledger.history(MovementFilter(variant_id="V1", warehouse=CO))
        for previous, current in zip(movements, movements[1:]):
            assert current.quantity_before == previous.quantity_after
        assert movements[-1].quantity_after == 2


class TestReconcile:

    def test_balanced(self):
        _, store, ledger = _setup()
        store.adjust("V1", CO, 5, "Count", "alice")
        report = ledger.reconcile("V1", CO)
        assert report.balanced
        assert report.difference == 0

    def test_detects_tampering(self):
        uow, store, ledger = _setup()
        store.adjust("V1", CO, 5, "Count", "alice")
        with uow:
            [lot] = uow.inventory.lots_for("V1", CO)
            lot.quantity = 3
            uow.inventory.save(lot)

        report = ledger.reconcile("V1", CO)

        assert not report.balanced
        assert report.ledger_quantity == 5
        assert report.inventory_quantity == 3
        assert report.difference == -2

    def test_reconcile_all_covers_every_pair(self):
        _, store, ledger = _setup()
        store.adjust("V2", CO, 1, "Count", "alice")
        store.adjust("V1", Warehouse.PRIVATE, 2, "Count", "alice")
        store.adjust("V1", CO, 3, "Count", "alice")

        reports = ledger.reconcile_all()

        assert [(r.variant_id, r.warehouse) for r in reports] == [
            ("V1", CO), ("V1", Warehouse.PRIVATE), ("V2", CO),
        ]
        assert all(r.balanced for r in reports)

    def test_empty_store(self):
        _, _, ledger = _setup()
        assert ledger.reconcile_all() == []
