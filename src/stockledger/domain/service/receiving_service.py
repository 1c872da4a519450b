"""Domain service: Receiving.

Books inbound stock and, when shortages are waiting on the same
(variant, warehouse), immediately shares the new stock among them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from stockledger.domain.model.enums import (
    AllocationStrategy,
    MovementKind,
    ReferenceType,
    Warehouse,
)
from stockledger.domain.model.inventory import InventorySnapshot
from stockledger.domain.model.value_objects import Reference
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.allocation import AllocationPlan
from stockledger.domain.service.allocation_service import AllocationService, ExecutionResult
from stockledger.domain.service.backorder_tracker import BackorderTracker
from stockledger.domain.service.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


@dataclass
class ReceiptResult:
    snapshot: InventorySnapshot
    plan: AllocationPlan | None = None
    execution: ExecutionResult | None = None


class ReceivingService:

    def __init__(
        self,
        uow: UnitOfWork,
        store: InventoryStore | None = None,
        allocations: AllocationService | None = None,
        backorders: BackorderTracker | None = None,
        default_strategy: AllocationStrategy = AllocationStrategy.PRIORITY,
    ) -> None:
        self._uow = uow
        self._store = store or InventoryStore(uow)
        self._backorders = backorders or BackorderTracker(uow)
        self._allocations = allocations or AllocationService(
            uow, self._store, backorders=self._backorders
        )
        self._default_strategy = default_strategy

    def receive(
        self,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
        unit_cost: Decimal | None = None,
        reference: Reference | None = None,
        reason: str = "Stock received",
        reallocate: bool = True,
        strategy: AllocationStrategy | None = None,
    ) -> ReceiptResult:
        """Receive ``quantity`` units into a new cost lot.

        The receipt itself commits first. Re-allocation then runs over the
        pending backorders of the pair, one transaction per line, so a
        failing line never undoes the receipt.
        """
        self._store.deposit(
            variant_id,
            warehouse,
            quantity,
            actor,
            kind=MovementKind.RECEIPT,
            reference=reference or Reference(ReferenceType.RECEIPT),
            reason=reason,
            unit_cost=unit_cost,
            new_lot=True,
        )
        result = ReceiptResult(snapshot=self._store.snapshot(variant_id, warehouse))
        if not reallocate:
            return result

        demand = self._backorders.pending_demand(variant_id, warehouse)
        if not demand:
            return result

        result.plan = self._allocations.plan(
            variant_id, warehouse, demand, strategy or self._default_strategy
        )
        result.execution = self._allocations.execute(result.plan, actor)
        result.snapshot = self._store.snapshot(variant_id, warehouse)
        logger.info(
            "Backorders re-allocated after receipt",
            extra={"extra_fields": {
                "variant_id": variant_id,
                "warehouse": warehouse.value,
                "received": quantity,
                "backorders": len(demand),
                "allocated": result.plan.stats.total_allocated,
            }},
        )
        return result
