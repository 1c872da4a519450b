"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world. Costs are formatted
strings; enums are their string values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from stockledger.domain.model.backorder import Backorder
from stockledger.domain.model.inventory import InventorySnapshot
from stockledger.domain.model.movement import Movement
from stockledger.domain.model.reservation import Reservation
from stockledger.domain.model.transfer import StockTransfer
from stockledger.domain.model.variant import Variant
from stockledger.domain.service.allocation import AllocationPlan
from stockledger.domain.service.allocation_service import ExecutionResult


def format_cost(amount: Decimal) -> str:
    return f"{amount:.2f}"


def format_time(value: datetime | None) -> str:
    return value.isoformat(timespec="seconds") if value is not None else ""


@dataclass(frozen=True)
class DemandSpec:
    """Input: one demand line as typed by an operator.

    ``priority`` wins over ``tier`` when both are given. Lines without a
    ``created_at`` are aged in the order they are listed.
    """

    line_item_id: str
    quantity: int
    priority: int | None = None
    tier: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class VariantDTO:
    id: str
    code: str
    unit_cost: str
    stock_quantity: int
    reserved_stock: int
    available_stock: int

    @staticmethod
    def of(variant: Variant) -> VariantDTO:
        return VariantDTO(
            id=variant.id,
            code=variant.code,
            unit_cost=format_cost(variant.unit_cost),
            stock_quantity=variant.stock_quantity,
            reserved_stock=variant.reserved_stock,
            available_stock=variant.available_stock,
        )


@dataclass(frozen=True)
class StockLevelDTO:
    """Output: stock of one variant in one warehouse."""

    variant_id: str
    warehouse: str
    quantity: int
    reserved: int
    available: int
    unit_cost: str
    lot_count: int

    @staticmethod
    def of(snapshot: InventorySnapshot) -> StockLevelDTO:
        return StockLevelDTO(
            variant_id=snapshot.variant_id,
            warehouse=snapshot.warehouse.value,
            quantity=snapshot.quantity,
            reserved=snapshot.reserved,
            available=snapshot.available,
            unit_cost=format_cost(snapshot.unit_cost),
            lot_count=snapshot.lot_count,
        )


@dataclass(frozen=True)
class MovementDTO:
    id: int
    created_at: str
    variant_id: str
    warehouse: str
    kind: str
    quantity_before: int
    quantity_change: int
    quantity_after: int
    reserved_change: int
    unit_cost: str
    total_cost: str
    reference: str
    created_by: str
    reason: str

    @staticmethod
    def of(movement: Movement) -> MovementDTO:
        reference = ""
        if movement.reference_type is not None:
            reference = movement.reference_type.value
            if movement.reference_id:
                reference += f":{movement.reference_id}"
        return MovementDTO(
            id=movement.id,  # type: ignore[arg-type]
            created_at=format_time(movement.created_at),
            variant_id=movement.variant_id,
            warehouse=movement.warehouse.value,
            kind=movement.kind.value,
            quantity_before=movement.quantity_before,
            quantity_change=movement.quantity_change,
            quantity_after=movement.quantity_after,
            reserved_change=movement.reserved_change,
            unit_cost=format_cost(movement.unit_cost),
            total_cost=format_cost(movement.total_cost),
            reference=reference,
            created_by=movement.created_by,
            reason=movement.reason,
        )


@dataclass(frozen=True)
class TransferDTO:
    transfer_number: str
    source: str
    target: str
    quantity: int
    unit_cost: str
    total_cost: str
    reason: str
    created_by: str
    created_at: str

    @staticmethod
    def of(transfer: StockTransfer) -> TransferDTO:
        return TransferDTO(
            transfer_number=transfer.transfer_number,
            source=f"{transfer.source_variant_id}@{transfer.source_warehouse.value}",
            target=f"{transfer.target_variant_id}@{transfer.target_warehouse.value}",
            quantity=transfer.quantity,
            unit_cost=format_cost(transfer.unit_cost),
            total_cost=format_cost(transfer.total_cost),
            reason=transfer.reason,
            created_by=transfer.created_by,
            created_at=format_time(transfer.created_at),
        )


@dataclass(frozen=True)
class ReservationDTO:
    line_item_id: str
    variant_id: str
    warehouse: str
    status: str
    reserved: int
    shipped: int
    released: int
    outstanding: int

    @staticmethod
    def of(reservation: Reservation) -> ReservationDTO:
        return ReservationDTO(
            line_item_id=reservation.line_item_id,
            variant_id=reservation.variant_id,
            warehouse=reservation.warehouse.value,
            status=reservation.status.value,
            reserved=reservation.reserved_quantity,
            shipped=reservation.shipped_quantity,
            released=reservation.released_quantity,
            outstanding=reservation.outstanding,
        )


@dataclass(frozen=True)
class BackorderDTO:
    id: int
    line_item_id: str
    variant_id: str
    warehouse: str
    shortage: int
    priority: int
    status: str
    demand_created_at: str
    resolved_by: str

    @staticmethod
    def of(backorder: Backorder) -> BackorderDTO:
        return BackorderDTO(
            id=backorder.id,  # type: ignore[arg-type]
            line_item_id=backorder.line_item_id,
            variant_id=backorder.variant_id,
            warehouse=backorder.warehouse.value,
            shortage=backorder.shortage_quantity,
            priority=backorder.priority,
            status=backorder.status.value,
            demand_created_at=format_time(backorder.demand_created_at),
            resolved_by=backorder.resolved_by or "",
        )


@dataclass(frozen=True)
class AllocationLineDTO:
    line_item_id: str
    priority: int
    requested: int
    allocated: int
    shortage: int
    fulfillment_rate: str  # e.g. "62.5%"


@dataclass(frozen=True)
class AllocationDTO:
    """Output: a plan, and what happened if it was executed."""

    variant_id: str
    warehouse: str
    strategy: str
    available_stock: int
    unallocated_stock: int
    lines: list[AllocationLineDTO]
    total_requested: int
    total_allocated: int
    total_shortage: int
    fulfillment_rate: str
    executed: bool = False
    reserved_lines: tuple[str, ...] = ()
    backordered_lines: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @staticmethod
    def of(plan: AllocationPlan) -> AllocationDTO:
        stats = plan.stats
        return AllocationDTO(
            variant_id=plan.variant_id,
            warehouse=plan.warehouse.value,
            strategy=plan.strategy.value,
            available_stock=plan.available_stock,
            unallocated_stock=plan.unallocated_stock,
            lines=[
                AllocationLineDTO(
                    line_item_id=line.line_item_id,
                    priority=line.priority,
                    requested=line.requested_quantity,
                    allocated=line.allocated_quantity,
                    shortage=line.shortage_quantity,
                    fulfillment_rate=f"{line.fulfillment_rate:.1%}",
                )
                for line in plan.lines
            ],
            total_requested=stats.total_requested,
            total_allocated=stats.total_allocated,
            total_shortage=stats.total_shortage,
            fulfillment_rate=f"{stats.overall_fulfillment_rate:.1%}",
        )

    def with_execution(self, execution: ExecutionResult) -> AllocationDTO:
        return replace(
            self,
            executed=True,
            reserved_lines=tuple(r.line_item_id for r in execution.reserved),
            backordered_lines=tuple(b.line_item_id for b in execution.backorders if b.is_open),
            errors=tuple(f"{e.line_item_id}: {e.message}" for e in execution.errors),
        )


@dataclass(frozen=True)
class ReconciliationDTO:
    variant_id: str
    warehouse: str
    ledger_quantity: int
    inventory_quantity: int
    balanced: bool
