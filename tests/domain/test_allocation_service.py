"""Tests for planning and executing allocations."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.demand import DemandLine
from stockledger.domain.model.enums import (
    AllocationStrategy,
    BackorderStatus,
    ReservationStatus,
    Warehouse,
)
from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.filters import BackorderFilter
from stockledger.domain.service.allocation_service import AllocationService
from stockledger.domain.service.backorder_tracker import BackorderTracker
from stockledger.domain.service.inventory_store import InventoryStore
from stockledger.domain.service.reservation_service import ReservationService
from tests.fakes import FakeUnitOfWork

CO = Warehouse.COMPANY
T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _setup(stock=10):
    uow = FakeUnitOfWork()
    with uow:
        uow.variants.save(Variant.create("V1", "V1", Decimal("10.00")))
    store = InventoryStore(uow)
    if stock:
        store.adjust("V1", CO, stock, "Opening stock", "alice")
    return uow, store, AllocationService(uow, store)


def _demand(line_id, quantity, priority=0, minutes=0):
    return DemandLine(line_id, quantity, T0 + timedelta(minutes=minutes), priority)


class TestPlan:

    def test_uses_current_available_stock(self):
        uow, store, service = _setup(stock=10)
        store.reserve("V1", CO, 4, "alice")

        plan = service.plan("V1", CO, [_demand("L1", 10)])

        assert plan.available_stock == 6
        assert plan.line("L1").allocated_quantity == 6

    def test_planning_writes_nothing(self):
        uow, _, service = _setup()
        service.plan("V1", CO, [_demand("L1", 50)])
        assert BackorderTracker(uow).list(BackorderFilter(status=None)) == []
        assert uow.reservations.get_by_line_item("L1") is None

    def test_explicit_stock_for_what_if(self):
        _, _, service = _setup(stock=10)
        plan = service.plan(
            "V1", CO, [_demand("L1", 10), _demand("L2", 10)],
            AllocationStrategy.PROPORTIONAL, available_stock=4,
        )
        assert plan.available_stock == 4
        assert plan.stats.total_allocated == 4


class TestExecute:

    def test_reserves_allocations_and_backorders_shortages(self):
        uow, store, service = _setup(stock=10)
        demand = [_demand("L1", 10), _demand("L2", 5), _demand("L3", 5)]
        plan = service.plan("V1", CO, demand)

        result = service.execute(plan, "alice")

        assert result.succeeded
        assert {r.line_item_id: r.reserved_quantity for r in result.reserved} == {
            "L1": 5, "L2": 3, "L3": 2,
        }
        assert {b.line_item_id: b.shortage_quantity for b in result.backorders} == {
            "L1": 5, "L2": 2, "L3": 3,
        }
        assert all(b.status == BackorderStatus.PENDING for b in result.backorders)
        assert store.get_available("V1", CO) == 0

    def test_fully_allocated_line_gets_no_backorder(self):
        _, _, service = _setup(stock=10)
        result = service.execute(service.plan("V1", CO, [_demand("L1", 4)]), "alice")
        assert len(result.reserved) == 1
        assert result.backorders == []

    def test_zero_allocation_backorders_everything(self):
        _, _, service = _setup(stock=0)
        result = service.execute(service.plan("V1", CO, [_demand("L1", 4)]), "alice")
        assert result.reserved == []
        [backorder] = result.backorders
        assert backorder.shortage_quantity == 4
        assert backorder.notes == "Created by allocation - requested 4, short 4"

    def test_backorder_keeps_demand_priority_and_age(self):
        _, _, service = _setup(stock=0)
        line = _demand("L1", 4, priority=100, minutes=30)
        [backorder] = service.execute(service.plan("V1", CO, [line]), "alice").backorders
        assert backorder.priority == 100
        assert backorder.demand_created_at == line.created_at

    def test_over_committed_override_fails_only_the_late_line(self):
        uow, store, service = _setup(stock=10)
        plan = service.plan("V1", CO, [_demand("L1", 10), _demand("L2", 10)])
        plan.override("L1", 10)
        plan.override("L2", 10)

        result = service.execute(plan, "alice")

        assert not result.succeeded
        assert [r.line_item_id for r in result.reserved] == ["L1"]
        [error] = result.errors
        assert error.line_item_id == "L2"
        assert "Insufficient stock" in error.message
        reservations = ReservationService(uow, store)
        assert reservations.status_of("L2") == ReservationStatus.UNRESERVED
        assert BackorderTracker(uow).list() == []

    def test_cancelled_backorder_reported_as_error(self):
        uow, _, service = _setup(stock=0)
        tracker = BackorderTracker(uow)
        [backorder] = service.execute(service.plan("V1", CO, [_demand("L1", 4)]), "alice").backorders
        tracker.cancel(backorder.id, "alice")

        result = service.execute(service.plan("V1", CO, [_demand("L1", 4)]), "alice")

        [error] = result.errors
        assert isinstance(error.error, ValidationError)
        assert tracker.get(backorder.id).status == BackorderStatus.CANCELLED

    def test_each_line_commits_separately(self):
        uow, _, service = _setup(stock=10)
        plan = service.plan("V1", CO, [_demand("L1", 2), _demand("L2", 2)])
        commits_before = uow.commits
        service.execute(plan, "alice")
        assert uow.commits - commits_before == 2
