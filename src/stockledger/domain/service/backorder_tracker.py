"""Domain service: Backorder Tracker.

Keeps one backorder per (line item, variant), tied to the warehouse it was
first raised in, and feeds pending shortages back into allocation when new
stock arrives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stockledger.domain.exceptions import NotFound, ValidationError
from stockledger.domain.model.backorder import Backorder
from stockledger.domain.model.demand import DemandLine
from stockledger.domain.model.enums import BackorderStatus, Warehouse
from stockledger.domain.repository.filters import BackorderFilter
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.transaction import transactional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantShortage:
    """Pending shortages of one variant, summed."""

    variant_id: str
    total_shortage: int
    backorder_count: int
    line_item_ids: tuple[str, ...]


class BackorderTracker:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    @transactional
    def upsert(
        self,
        demand: DemandLine,
        variant_id: str,
        warehouse: Warehouse,
        shortage: int,
        actor: str,
    ) -> Backorder | None:
        """Record the shortage left for a line after an allocation run.

        Creates the backorder on the first shortage, updates it afterwards
        and resolves it once the shortage reaches zero. Returns None when
        there is neither a shortage nor an existing backorder.
        """
        existing = self._uow.backorders.find(demand.line_item_id, variant_id)
        if existing is not None and existing.warehouse != warehouse:
            raise ValidationError(
                f"Line item '{demand.line_item_id}' is backordered against "
                f"{variant_id}@{existing.warehouse.value}"
            )
        if existing is None:
            if shortage == 0:
                return None
            backorder = self._uow.backorders.save(
                Backorder(
                    id=None,
                    line_item_id=demand.line_item_id,
                    variant_id=variant_id,
                    warehouse=warehouse,
                    shortage_quantity=shortage,
                    priority=demand.priority,
                    demand_created_at=demand.created_at,
                    notes=f"Created by allocation - requested {demand.requested_quantity}, "
                          f"short {shortage}",
                )
            )
            logger.info(
                "Backorder created",
                extra={"extra_fields": {
                    "backorder_id": backorder.id,
                    "line_item_id": demand.line_item_id,
                    "shortage": shortage,
                }},
            )
            return backorder

        if existing.status == BackorderStatus.RESOLVED and shortage == 0:
            return existing
        existing.update_shortage(shortage, actor)
        backorder = self._uow.backorders.save(existing)
        logger.info(
            "Backorder updated",
            extra={"extra_fields": {
                "backorder_id": backorder.id,
                "line_item_id": backorder.line_item_id,
                "shortage": shortage,
                "status": backorder.status.value,
            }},
        )
        return backorder

    @transactional
    def pending_demand(self, variant_id: str, warehouse: Warehouse) -> list[DemandLine]:
        """Open shortages as demand lines, highest priority then oldest first."""
        backorders = self._uow.backorders.list(
            BackorderFilter(
                status=BackorderStatus.PENDING, variant_id=variant_id, warehouse=warehouse
            )
        )
        backorders.sort(key=lambda b: (-b.priority, b.demand_created_at, b.id or 0))
        return [
            DemandLine(
                line_item_id=b.line_item_id,
                requested_quantity=b.shortage_quantity,
                created_at=b.demand_created_at,
                priority=b.priority,
            )
            for b in backorders
            if b.shortage_quantity > 0
        ]

    @transactional
    def get(self, backorder_id: int) -> Backorder:
        backorder = self._uow.backorders.get(backorder_id)
        if backorder is None:
            raise NotFound(f"Backorder #{backorder_id} not found")
        return backorder

    @transactional
    def list(self, criteria: BackorderFilter | None = None) -> list[Backorder]:
        return self._uow.backorders.list(criteria or BackorderFilter())

    @transactional
    def resolve(self, backorder_id: int, actor: str) -> Backorder:
        backorder = self.get(backorder_id)
        backorder.resolve(actor)
        logger.info("Backorder resolved by hand", extra={"extra_fields": {"backorder_id": backorder_id}})
        return self._uow.backorders.save(backorder)

    @transactional
    def cancel(self, backorder_id: int, actor: str, note: str | None = None) -> Backorder:
        backorder = self.get(backorder_id)
        backorder.cancel(actor, note)
        logger.info("Backorder cancelled", extra={"extra_fields": {"backorder_id": backorder_id}})
        return self._uow.backorders.save(backorder)

    @transactional
    def cancel_for_line(
        self, line_item_id: str, variant_id: str, actor: str, note: str | None = None
    ) -> Backorder | None:
        """Cancel the line's pending backorder, if it has one."""
        backorder = self._uow.backorders.find(line_item_id, variant_id)
        if backorder is None or backorder.status != BackorderStatus.PENDING:
            return None
        return self.cancel(backorder.id, actor, note)

    @transactional
    def summarize_by_variant(
        self, status: BackorderStatus = BackorderStatus.PENDING
    ) -> list[VariantShortage]:
        grouped: dict[str, list[Backorder]] = {}
        for backorder in self._uow.backorders.list(BackorderFilter(status=status)):
            grouped.setdefault(backorder.variant_id, []).append(backorder)
        return [
            VariantShortage(
                variant_id=variant_id,
                total_shortage=sum(b.shortage_quantity for b in group),
                backorder_count=len(group),
                line_item_ids=tuple(b.line_item_id for b in group),
            )
            for variant_id, group in sorted(grouped.items())
        ]
