"""Application service: Allocate Stock use case.

Shares the available stock of one (variant, warehouse) among competing
demand lines, optionally applies manual overrides, and optionally commits
the result as reservations and backorders.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from stockledger.application.dto import AllocationDTO, DemandSpec
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.demand import DemandLine, customer_priority
from stockledger.domain.model.enums import AllocationStrategy, Warehouse
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.allocation_service import AllocationService


class AllocateStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._service = AllocationService(uow)

    def handle(
        self,
        variant_id: str,
        warehouse: Warehouse,
        demand: list[DemandSpec],
        strategy: AllocationStrategy,
        actor: str,
        overrides: dict[str, int] | None = None,
        execute: bool = False,
        available_stock: int | None = None,
    ) -> AllocationDTO:
        """Plan, adjust and (with ``execute``) commit an allocation.

        Args:
            demand: Competing lines, oldest first when they carry no
                timestamp of their own.
            overrides: line_item_id -> allocated quantity, applied after
                the strategy has run.
            available_stock: Plan against this figure instead of the
                current available stock (what-if planning).
        """
        if not demand:
            raise ValidationError("At least one demand line is required")

        plan = self._service.plan(
            variant_id,
            warehouse,
            self._to_demand_lines(demand),
            strategy,
            available_stock=available_stock,
        )
        for line_item_id, quantity in (overrides or {}).items():
            plan.override(line_item_id, quantity)

        dto = AllocationDTO.of(plan)
        if not execute:
            return dto
        return dto.with_execution(self._service.execute(plan, actor))

    @staticmethod
    def _to_demand_lines(specs: list[DemandSpec]) -> list[DemandLine]:
        # Untimed lines are spaced a microsecond apart so list order is age order
        base = datetime.now(timezone.utc) - timedelta(microseconds=len(specs))
        return [
            DemandLine(
                line_item_id=spec.line_item_id,
                requested_quantity=spec.quantity,
                created_at=spec.created_at or base + timedelta(microseconds=i),
                priority=customer_priority(spec.tier, spec.priority),
            )
            for i, spec in enumerate(specs)
        ]
