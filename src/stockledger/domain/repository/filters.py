"""Query filters passed to repositories.

Every field is optional; ``None`` means "do not filter on this".
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.model.backorder import Backorder
from stockledger.domain.model.enums import (
    BackorderStatus,
    MovementKind,
    ReferenceType,
    Warehouse,
)
from stockledger.domain.model.movement import Movement


@dataclass(frozen=True)
class MovementFilter:

    variant_id: str | None = None
    warehouse: Warehouse | None = None
    kind: MovementKind | None = None
    reference_type: ReferenceType | None = None
    reference_id: str | None = None
    limit: int | None = None
    offset: int = 0

    def matches(self, movement: Movement) -> bool:
        return (
            (self.variant_id is None or movement.variant_id == self.variant_id)
            and (self.warehouse is None or movement.warehouse == self.warehouse)
            and (self.kind is None or movement.kind == self.kind)
            and (self.reference_type is None or movement.reference_type == self.reference_type)
            and (self.reference_id is None or movement.reference_id == self.reference_id)
        )


@dataclass(frozen=True)
class BackorderFilter:

    status: BackorderStatus | None = BackorderStatus.PENDING
    variant_id: str | None = None
    warehouse: Warehouse | None = None
    line_item_id: str | None = None

    def matches(self, backorder: Backorder) -> bool:
        return (
            (self.status is None or backorder.status == self.status)
            and (self.variant_id is None or backorder.variant_id == self.variant_id)
            and (self.warehouse is None or backorder.warehouse == self.warehouse)
            and (self.line_item_id is None or backorder.line_item_id == self.line_item_id)
        )
