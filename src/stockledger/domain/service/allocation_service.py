"""Domain service: plan and commit stock allocations.

Planning is read-only. Execution commits each line in its own
transaction: a line whose reservation fails is skipped and reported,
and the remaining lines still go through. Partial progress is preferred
over all-or-nothing at the batch level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.backorder import Backorder
from stockledger.domain.model.demand import DemandLine
from stockledger.domain.model.enums import AllocationStrategy, Warehouse
from stockledger.domain.model.reservation import Reservation
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.allocation import AllocationLine, AllocationPlan, allocate
from stockledger.domain.service.backorder_tracker import BackorderTracker
from stockledger.domain.service.inventory_store import InventoryStore
from stockledger.domain.service.reservation_service import ReservationService
from stockledger.domain.service.transaction import transactional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionError:
    line_item_id: str
    error: DomainException

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class ExecutionResult:
    reserved: list[Reservation] = field(default_factory=list)
    backorders: list[Backorder] = field(default_factory=list)
    errors: list[ExecutionError] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


class AllocationService:

    def __init__(
        self,
        uow: UnitOfWork,
        store: InventoryStore | None = None,
        reservations: ReservationService | None = None,
        backorders: BackorderTracker | None = None,
    ) -> None:
        self._uow = uow
        self._store = store or InventoryStore(uow)
        self._reservations = reservations or ReservationService(uow, self._store)
        self._backorders = backorders or BackorderTracker(uow)

    def plan(
        self,
        variant_id: str,
        warehouse: Warehouse,
        demand: list[DemandLine],
        strategy: AllocationStrategy = AllocationStrategy.PROPORTIONAL,
        available_stock: int | None = None,
    ) -> AllocationPlan:
        """Compute who gets what. Nothing is written.

        Without an explicit ``available_stock`` the current available
        quantity of the (variant, warehouse) is used.
        """
        if available_stock is None:
            available_stock = self._store.get_available(variant_id, warehouse)
        plan = AllocationPlan(
            variant_id=variant_id,
            warehouse=warehouse,
            available_stock=available_stock,
            strategy=strategy,
            lines=allocate(available_stock, demand, strategy),
        )
        stats = plan.stats
        logger.info(
            "Allocation planned",
            extra={"extra_fields": {
                "variant_id": variant_id,
                "warehouse": warehouse.value,
                "strategy": strategy.value,
                "available_stock": available_stock,
                "total_requested": stats.total_requested,
                "total_allocated": stats.total_allocated,
            }},
        )
        return plan

    def execute(self, plan: AllocationPlan, actor: str) -> ExecutionResult:
        """Commit a plan line by line."""
        result = ExecutionResult()
        for line in plan.lines:
            try:
                reservation, backorder = self._commit_line(plan, line, actor)
            except DomainException as exc:
                logger.warning(
                    "Allocation line skipped",
                    extra={"extra_fields": {
                        "line_item_id": line.line_item_id,
                        "allocated": line.allocated_quantity,
                        "error": str(exc),
                    }},
                )
                result.errors.append(ExecutionError(line.line_item_id, exc))
                continue
            if reservation is not None:
                result.reserved.append(reservation)
            if backorder is not None:
                result.backorders.append(backorder)

        logger.info(
            "Allocation executed",
            extra={"extra_fields": {
                "variant_id": plan.variant_id,
                "reserved": len(result.reserved),
                "backorders": len(result.backorders),
                "errors": len(result.errors),
            }},
        )
        return result

    @transactional
    def _commit_line(
        self, plan: AllocationPlan, line: AllocationLine, actor: str
    ) -> tuple[Reservation | None, Backorder | None]:
        reservation = None
        if line.allocated_quantity > 0:
            reservation = self._reservations.reserve(
                line.line_item_id,
                plan.variant_id,
                plan.warehouse,
                line.allocated_quantity,
                actor,
            )
        backorder = self._backorders.upsert(
            line.demand, plan.variant_id, plan.warehouse, line.shortage_quantity, actor
        )
        return reservation, backorder
