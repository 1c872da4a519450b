"""Backorder: demand that could not be satisfied from available stock.

Created when an allocation leaves a shortage, updated when a later run
fills some or all of it, cancelled only by an operator. Never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.enums import BackorderStatus, Warehouse


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Backorder:

    id: int | None
    line_item_id: str
    variant_id: str
    warehouse: Warehouse
    shortage_quantity: int
    priority: int
    demand_created_at: datetime
    status: BackorderStatus = BackorderStatus.PENDING
    notes: str = ""
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    resolved_at: datetime | None = None
    resolved_by: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status == BackorderStatus.PENDING

    def update_shortage(self, shortage: int, actor: str) -> None:
        """Record the shortage left after an allocation run.

        A shortage of zero resolves the backorder.
        """
        if shortage < 0:
            raise ValidationError("Shortage cannot be negative")
        if self.status == BackorderStatus.CANCELLED:
            raise ValidationError(
                f"Backorder #{self.id} for line '{self.line_item_id}' is cancelled"
            )
        self.shortage_quantity = shortage
        self.updated_at = _now()
        if shortage == 0:
            self._close(BackorderStatus.RESOLVED, actor)
        else:
            self.status = BackorderStatus.PENDING
            self.resolved_at = None
            self.resolved_by = None

    def resolve(self, actor: str) -> None:
        """Mark resolved by hand (stock arrived through another channel)."""
        if self.status != BackorderStatus.PENDING:
            raise ValidationError(
                f"Backorder #{self.id} is {self.status.value}, expected PENDING"
            )
        self._close(BackorderStatus.RESOLVED, actor)

    def cancel(self, actor: str, note: str | None = None) -> None:
        if self.status == BackorderStatus.CANCELLED:
            raise ValidationError(f"Backorder #{self.id} is already cancelled")
        if self.status == BackorderStatus.RESOLVED:
            raise ValidationError(f"Cannot cancel resolved backorder #{self.id}")
        self._close(BackorderStatus.CANCELLED, actor)
        if note:
            self.notes = f"{self.notes}\n{note}".strip()

    def _close(self, status: BackorderStatus, actor: str) -> None:
        now = _now()
        self.status = status
        self.resolved_at = now
        self.resolved_by = actor
        self.updated_at = now
