"""Movement: an immutable ledger entry recording one stock change.

``quantity_before`` and ``quantity_after`` are totals for the whole
(variant, warehouse), so the entries of one pair form an unbroken chain:
each entry starts where the previous one ended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from stockledger.domain.exceptions import InvariantViolation
from stockledger.domain.model.enums import MovementKind, ReferenceType, Warehouse
from stockledger.domain.model.value_objects import Reference


@dataclass(frozen=True)
class Movement:

    id: int | None
    variant_id: str
    warehouse: Warehouse
    kind: MovementKind
    quantity_before: int
    quantity_change: int
    quantity_after: int
    unit_cost: Decimal
    total_cost: Decimal
    created_by: str
    reference_type: ReferenceType | None = None
    reference_id: str | None = None
    reserved_change: int = 0
    lot_id: int | None = None
    reason: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.quantity_after != self.quantity_before + self.quantity_change:
            raise InvariantViolation(
                f"Movement for {self.variant_id}@{self.warehouse.value} does not add up: "
                f"{self.quantity_before} + {self.quantity_change} != {self.quantity_after}"
            )
        if self.quantity_after < 0:
            raise InvariantViolation(
                f"Movement for {self.variant_id}@{self.warehouse.value} "
                f"would leave {self.quantity_after} units"
            )

    @staticmethod
    def record(
        variant_id: str,
        warehouse: Warehouse,
        kind: MovementKind,
        quantity_before: int,
        quantity_change: int,
        unit_cost: Decimal,
        actor: str,
        *,
        reference: Reference | None = None,
        reserved_change: int = 0,
        lot_id: int | None = None,
        reason: str = "",
        total_cost: Decimal | None = None,
    ) -> Movement:
        """Build a new (unsaved) movement, deriving ``quantity_after``.

        ``total_cost`` defaults to ``unit_cost`` times the units moved.
        """
        if total_cost is None:
            total_cost = unit_cost * abs(quantity_change)
        return Movement(
            id=None,
            variant_id=variant_id,
            warehouse=warehouse,
            kind=kind,
            quantity_before=quantity_before,
            quantity_change=quantity_change,
            quantity_after=quantity_before + quantity_change,
            unit_cost=unit_cost,
            total_cost=total_cost,
            created_by=actor,
            reference_type=reference.type if reference else None,
            reference_id=reference.id if reference else None,
            reserved_change=reserved_change,
            lot_id=lot_id,
            reason=reason,
        )
