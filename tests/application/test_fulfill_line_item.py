"""Integration tests for reserving, shipping and cancelling line items."""

import pytest

from stockledger.application.add_variant import AddVariantHandler
from stockledger.application.adjust_inventory import AdjustInventoryHandler
from stockledger.application.fulfill_line_item import (
    CancelLineHandler,
    LineStatusHandler,
    ReserveLineHandler,
    ShipLineHandler,
)
from stockledger.application.show_inventory import ShowInventoryHandler
from stockledger.domain.exceptions import InsufficientReservation, InsufficientStock, NotFound
from stockledger.domain.model.enums import Warehouse
from tests.fakes import FakeUnitOfWork

CO = Warehouse.COMPANY


def _setup():
    uow = FakeUnitOfWork()
    AddVariantHandler(uow).handle("V1", "WINE-750", "10.00")
    adjust = AdjustInventoryHandler(uow)
    adjust.handle("V1", CO, 3, "Opening stock", "alice")
    adjust.handle("V1", CO, 10, "Purchase", "alice", unit_cost="12.00")
    return uow


def _level(uow):
    return ShowInventoryHandler(uow).handle("V1", CO)[0]


class TestReserveLine:

    def test_reserve(self):
        uow = _setup()
        dto = ReserveLineHandler(uow).handle("L1", "V1", CO, 5, "alice")
        assert dto.status == "RESERVED"
        assert dto.outstanding == 5
        assert _level(uow).available == 8

    def test_insufficient_stock(self):
        uow = _setup()
        with pytest.raises(InsufficientStock):
            ReserveLineHandler(uow).handle("L1", "V1", CO, 14, "alice")
        assert LineStatusHandler(uow).handle("L1") is None


class TestShipLine:

    def test_ship_everything_outstanding(self):
        uow = _setup()
        ReserveLineHandler(uow).handle("L1", "V1", CO, 5, "alice")

        dto, movements = ShipLineHandler(uow).handle("L1", None, "alice")

        assert dto.status == "SHIPPED"
        assert dto.shipped == 5
        assert [(m.quantity_change, m.unit_cost, m.total_cost) for m in movements] == [
            (-3, "10.00", "30.00"),
            (-2, "12.00", "24.00"),
        ]
        assert [m.reference for m in movements] == ["SALE:L1", "SALE:L1"]
        level = _level(uow)
        assert level.quantity == 8
        assert level.reserved == 0

    def test_partial_ship(self):
        uow = _setup()
        ReserveLineHandler(uow).handle("L1", "V1", CO, 5, "alice")
        dto, movements = ShipLineHandler(uow).handle("L1", 2, "alice")
        assert dto.status == "RESERVED"
        assert dto.outstanding == 3
        assert len(movements) == 1

    def test_ship_more_than_reserved(self):
        uow = _setup()
        ReserveLineHandler(uow).handle("L1", "V1", CO, 2, "alice")
        with pytest.raises(InsufficientReservation):
            ShipLineHandler(uow).handle("L1", 3, "alice")

    def test_ship_unknown_line(self):
        with pytest.raises(NotFound):
            ShipLineHandler(_setup()).handle("L9", None, "alice")


class TestCancelLine:

    def test_cancel_releases_stock(self):
        uow = _setup()
        ReserveLineHandler(uow).handle("L1", "V1", CO, 5, "alice")
        dto = CancelLineHandler(uow).handle("L1", "alice")
        assert dto.status == "CANCELLED"
        assert dto.released == 5
        assert _level(uow).available == 13

    def test_status(self):
        uow = _setup()
        assert LineStatusHandler(uow).handle("L1") is None
        ReserveLineHandler(uow).handle("L1", "V1", CO, 1, "alice")
        assert LineStatusHandler(uow).handle("L1").status == "RESERVED"
