"""Application service: Receive Stock use case.

Books a delivery and lets any pending backorders of the same
(variant, warehouse) claim it straight away.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.application.dto import AllocationDTO, StockLevelDTO
from stockledger.domain.model.enums import AllocationStrategy, ReferenceType, Warehouse
from stockledger.domain.model.value_objects import Reference, parse_cost
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.receiving_service import ReceivingService


@dataclass(frozen=True)
class ReceiptDTO:
    stock: StockLevelDTO
    allocation: AllocationDTO | None


class ReceiveStockHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        default_strategy: AllocationStrategy = AllocationStrategy.PRIORITY,
    ) -> None:
        self._receiving = ReceivingService(uow, default_strategy=default_strategy)

    def handle(
        self,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
        unit_cost: str | None = None,
        reference_id: str | None = None,
        reallocate: bool = True,
        strategy: AllocationStrategy | None = None,
    ) -> ReceiptDTO:
        result = self._receiving.receive(
            variant_id,
            warehouse,
            quantity,
            actor,
            unit_cost=parse_cost(unit_cost) if unit_cost is not None else None,
            reference=Reference(ReferenceType.RECEIPT, reference_id),
            reason=f"Received {reference_id}" if reference_id else "Stock received",
            reallocate=reallocate,
            strategy=strategy,
        )

        allocation = None
        if result.plan is not None:
            allocation = AllocationDTO.of(result.plan)
            if result.execution is not None:
                allocation = allocation.with_execution(result.execution)
        return ReceiptDTO(stock=StockLevelDTO.of(result.snapshot), allocation=allocation)

