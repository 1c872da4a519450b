"""InventoryLot: tracks stock and reservations for one cost lot.

Each (variant, warehouse) pair owns one or more lots. A lot knows its
physical quantity, how much of it is committed to confirmed demand, and the
unit cost it was bought or transferred in at.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from stockledger.domain.exceptions import (
    InsufficientReservation,
    InsufficientStock,
    ValidationError,
)
from stockledger.domain.model.enums import Warehouse


@dataclass
class InventoryLot:
    """One inventory row.

    Invariants:
    - ``quantity`` is never negative
    - ``reserved`` stays within ``[0, quantity]``
    - ``available`` is always ``quantity - reserved``
    """

    id: int | None
    variant_id: str
    warehouse: Warehouse
    quantity: int = 0
    reserved: int = 0
    unit_cost: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # Row version as read; 0 until the lot is stored
    version: int = 0

    @property
    def available(self) -> int:
        return self.quantity - self.reserved

    @property
    def fifo_key(self) -> tuple:
        return (self.created_at, self.id if self.id is not None else 0)

    def add(self, quantity: int) -> None:
        """Put physical stock into the lot."""
        _require_positive(quantity, "Inbound")
        self.quantity += quantity

    def withdraw(self, quantity: int) -> None:
        """Remove unreserved stock (adjustments, transfers)."""
        _require_positive(quantity, "Withdraw")
        if quantity > self.available:
            raise InsufficientStock(self.variant_id, self.warehouse, quantity, self.available)
        self.quantity -= quantity

    def reserve(self, quantity: int) -> None:
        """Commit stock to confirmed demand without moving it."""
        _require_positive(quantity, "Reservation")
        if quantity > self.available:
            raise InsufficientStock(self.variant_id, self.warehouse, quantity, self.available)
        self.reserved += quantity

    def release(self, quantity: int) -> None:
        """Release previously reserved stock (e.g. on cancellation)."""
        _require_positive(quantity, "Release")
        if quantity > self.reserved:
            raise InsufficientReservation(self._subject(), quantity, self.reserved)
        self.reserved -= quantity

    def consume(self, quantity: int) -> None:
        """Permanently deduct shipped stock.

        Moves items from reserved to shipped: both ``quantity`` and
        ``reserved`` decrease by the same amount.
        """
        _require_positive(quantity, "Consume")
        if quantity > self.reserved:
            raise InsufficientReservation(self._subject(), quantity, self.reserved)
        self.reserved -= quantity
        self.quantity -= quantity

    def _subject(self) -> str:
        return f"lot #{self.id} of variant '{self.variant_id}'"


@dataclass(frozen=True)
class InventorySnapshot:
    """Point-in-time view of one (variant, warehouse)."""

    variant_id: str
    warehouse: Warehouse
    quantity: int
    reserved: int
    available: int
    unit_cost: Decimal
    lot_count: int

    @staticmethod
    def of(variant_id: str, warehouse: Warehouse, lots: list[InventoryLot]) -> InventorySnapshot:
        ordered = sorted(lots, key=lambda lot: lot.fifo_key)
        quantity = sum(lot.quantity for lot in ordered)
        reserved = sum(lot.reserved for lot in ordered)
        return InventorySnapshot(
            variant_id=variant_id,
            warehouse=warehouse,
            quantity=quantity,
            reserved=reserved,
            available=quantity - reserved,
            unit_cost=ordered[-1].unit_cost if ordered else Decimal("0"),
            lot_count=len(ordered),
        )


@dataclass(frozen=True)
class VariantInventorySummary:
    """Stock of one variant summed over every warehouse."""

    variant_id: str
    total_quantity: int
    reserved: int
    available: int
    by_warehouse: dict[Warehouse, int]

    @staticmethod
    def of(variant_id: str, lots: list[InventoryLot]) -> VariantInventorySummary:
        by_warehouse = {w: 0 for w in Warehouse}
        for lot in lots:
            by_warehouse[lot.warehouse] += lot.quantity
        quantity = sum(lot.quantity for lot in lots)
        reserved = sum(lot.reserved for lot in lots)
        return VariantInventorySummary(
            variant_id=variant_id,
            total_quantity=quantity,
            reserved=reserved,
            available=quantity - reserved,
            by_warehouse=by_warehouse,
        )


def _require_positive(quantity: int, label: str) -> None:
    if quantity <= 0:
        raise ValidationError(f"{label} quantity must be positive")
