"""Domain service: Warehouse Inventory Store.

The only code path that changes inventory lots. Every mutating call:

  1. loads and locks the lots of one (variant, warehouse), oldest first,
  2. checks the ledger balance still equals the lot total,
  3. validates and applies the change on the lot objects (which refuse to
     go negative),
  4. appends the matching movement(s) and refreshes the variant counters,

all inside one transaction, so a failure at any step leaves nothing behind.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from stockledger.domain.exceptions import (
    InsufficientReservation,
    InsufficientStock,
    InvariantViolation,
    NotFound,
    ValidationError,
)
from stockledger.domain.model.enums import MovementKind, ReferenceType, Warehouse
from stockledger.domain.model.inventory import (
    InventoryLot,
    InventorySnapshot,
    VariantInventorySummary,
)
from stockledger.domain.model.movement import Movement
from stockledger.domain.model.value_objects import Quantity, Reference, StockKey
from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.transaction import transactional

logger = logging.getLogger(__name__)


class InventoryStore:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    # --- Queries --------------------------------------------------------------

    @transactional
    def get_available(self, variant_id: str, warehouse: Warehouse) -> int:
        return self.snapshot(variant_id, warehouse).available

    @transactional
    def snapshot(self, variant_id: str, warehouse: Warehouse) -> InventorySnapshot:
        self._require_variant(variant_id)
        lots = self._uow.inventory.lots_for(variant_id, warehouse)
        return InventorySnapshot.of(variant_id, warehouse, lots)

    @transactional
    def summary(self, variant_id: str) -> VariantInventorySummary:
        self._require_variant(variant_id)
        return VariantInventorySummary.of(
            variant_id, self._uow.inventory.lots_for_variant(variant_id)
        )

    # --- Mutations ------------------------------------------------------------

    @transactional
    def adjust(
        self,
        variant_id: str,
        warehouse: Warehouse,
        delta: int,
        reason: str,
        actor: str,
        *,
        kind: MovementKind = MovementKind.ADJUSTMENT,
        reference: Reference | None = None,
        unit_cost: Decimal | None = None,
        new_lot: bool = False,
    ) -> InventorySnapshot:
        """Change physical stock by a signed ``delta``.

        Inbound stock lands in the newest lot (or a fresh one); outbound
        stock is taken from unreserved units, oldest lot first.
        """
        if delta == 0:
            raise ValidationError("Adjustment quantity cannot be zero")
        reference = reference or Reference(ReferenceType.ADJUSTMENT)
        if delta > 0:
            self.deposit(
                variant_id, warehouse, delta, actor,
                kind=kind, reference=reference, reason=reason,
                unit_cost=unit_cost, new_lot=new_lot,
            )
        else:
            self.withdraw(
                variant_id, warehouse, -delta, actor,
                kind=kind, reference=reference, reason=reason,
            )
        return self.snapshot(variant_id, warehouse)

    @transactional
    def deposit(
        self,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
        *,
        kind: MovementKind,
        reference: Reference | None = None,
        reason: str = "",
        unit_cost: Decimal | None = None,
        new_lot: bool = False,
        overwrite_cost: bool = False,
        total_cost: Decimal | None = None,
    ) -> Movement:
        """Add stock, creating the lot if the pair has none yet.

        A ``unit_cost`` different from the newest lot's starts a new cost
        lot unless ``overwrite_cost`` is set, in which case the newest lot
        takes the new cost. ``total_cost`` overrides the recorded value of
        the units when they arrive from several cost lots.
        """
        Quantity(quantity)
        variant = self._require_variant(variant_id)
        lots = self._locked_lots(variant_id, warehouse)
        before = _total(lots)

        cost = variant.unit_cost if unit_cost is None else unit_cost
        newest = lots[-1] if lots else None
        starts_new_lot = (
            newest is None
            or new_lot
            or (unit_cost is not None and not overwrite_cost and newest.unit_cost != cost)
        )
        if starts_new_lot:
            lot = self._uow.inventory.add(
                InventoryLot(id=None, variant_id=variant_id, warehouse=warehouse, unit_cost=cost)
            )
        else:
            lot = newest
            if overwrite_cost:
                lot.unit_cost = cost
        lot.add(quantity)
        self._uow.inventory.save(lot)

        movement = self._uow.movements.add(
            Movement.record(
                variant_id, warehouse, kind, before, quantity, lot.unit_cost, actor,
                reference=reference, lot_id=lot.id, reason=reason, total_cost=total_cost,
            )
        )
        self._refresh_variant(variant)
        logger.info(
            "Stock added",
            extra={"extra_fields": _fields(movement, lot_id=lot.id)},
        )
        return movement

    @transactional
    def withdraw(
        self,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
        *,
        kind: MovementKind,
        reference: Reference | None = None,
        reason: str = "",
    ) -> tuple[Movement, list[tuple[InventoryLot, int]]]:
        """Remove unreserved stock FIFO across lots.

        Returns the single movement written and the ``(lot, units)`` pairs
        that were drawn from, oldest first.
        """
        Quantity(quantity)
        variant = self._require_variant(variant_id)
        lots = self._locked_lots(variant_id, warehouse)
        if not lots:
            raise NotFound(f"No inventory for variant '{variant_id}' in {warehouse.value}")
        before = _total(lots)
        available = sum(lot.available for lot in lots)
        if quantity > available:
            raise InsufficientStock(variant_id, warehouse, quantity, available)

        taken = self._spread(lots, quantity, lambda lot: lot.available, InventoryLot.withdraw)
        movement = self._uow.movements.add(
            Movement.record(
                variant_id, warehouse, kind, before, -quantity, taken[0][0].unit_cost, actor,
                reference=reference,
                lot_id=taken[0][0].id if len(taken) == 1 else None,
                reason=reason,
                total_cost=sum((lot.unit_cost * n for lot, n in taken), Decimal("0")),
            )
        )
        self._refresh_variant(variant)
        logger.info("Stock removed", extra={"extra_fields": _fields(movement, lots=len(taken))})
        return movement, taken

    @transactional
    def reserve(
        self,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
        reference: Reference | None = None,
    ) -> InventorySnapshot:
        """Hold available stock for confirmed demand, oldest lot first."""
        Quantity(quantity)
        variant = self._require_variant(variant_id)
        lots = self._locked_lots(variant_id, warehouse)
        if not lots:
            raise NotFound(f"No inventory for variant '{variant_id}' in {warehouse.value}")
        available = sum(lot.available for lot in lots)
        if quantity > available:
            raise InsufficientStock(variant_id, warehouse, quantity, available)

        touched = self._spread(lots, quantity, lambda lot: lot.available, InventoryLot.reserve)
        self._record_reservation_change(
            variant, warehouse, lots, touched, quantity, actor,
            MovementKind.RESERVATION, reference, "Stock reserved",
        )
        return InventorySnapshot.of(variant_id, warehouse, lots)

    @transactional
    def release(
        self,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
        reference: Reference | None = None,
    ) -> InventorySnapshot:
        """Return reserved stock to available, oldest lot first."""
        Quantity(quantity)
        variant = self._require_variant(variant_id)
        lots = self._locked_lots(variant_id, warehouse)
        if not lots:
            raise NotFound(f"No inventory for variant '{variant_id}' in {warehouse.value}")
        reserved = sum(lot.reserved for lot in lots)
        if quantity > reserved:
            raise InsufficientReservation(str(StockKey(variant_id, warehouse)), quantity, reserved)

        touched = self._spread(lots, quantity, lambda lot: lot.reserved, InventoryLot.release)
        self._record_reservation_change(
            variant, warehouse, lots, touched, -quantity, actor,
            MovementKind.RELEASE, reference, "Stock released",
        )
        return InventorySnapshot.of(variant_id, warehouse, lots)

    @transactional
    def consume_reserved(
        self,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
        reference: Reference | None = None,
        reason: str = "",
    ) -> list[Movement]:
        """Ship reserved stock, oldest lot first.

        Writes one SALE movement per lot touched, each carrying that lot's
        own unit cost.
        """
        Quantity(quantity)
        variant = self._require_variant(variant_id)
        lots = self._locked_lots(variant_id, warehouse)
        if not lots:
            raise NotFound(f"No inventory for variant '{variant_id}' in {warehouse.value}")
        reserved = sum(lot.reserved for lot in lots)
        if quantity > reserved:
            raise InsufficientReservation(str(StockKey(variant_id, warehouse)), quantity, reserved)

        running = _total(lots)
        movements: list[Movement] = []
        for lot, take in self._spread(lots, quantity, lambda lot: lot.reserved, InventoryLot.consume):
            movement = self._uow.movements.add(
                Movement.record(
                    variant_id, warehouse, MovementKind.SALE, running, -take, lot.unit_cost, actor,
                    reference=reference, reserved_change=-take, lot_id=lot.id, reason=reason,
                )
            )
            running = movement.quantity_after
            movements.append(movement)
        self._refresh_variant(variant)
        logger.info(
            "Reserved stock shipped",
            extra={"extra_fields": {
                "variant_id": variant_id,
                "warehouse": warehouse.value,
                "quantity": quantity,
                "lots": len(movements),
            }},
        )
        return movements

    # --- Internal helpers -----------------------------------------------------

    def _require_variant(self, variant_id: str) -> Variant:
        variant = self._uow.variants.get(variant_id)
        if variant is None:
            raise NotFound(f"Variant '{variant_id}' not found")
        return variant

    def _locked_lots(self, variant_id: str, warehouse: Warehouse) -> list[InventoryLot]:
        """Lock the pair's lots and check them against the ledger."""
        lots = sorted(
            self._uow.inventory.lots_for(variant_id, warehouse, for_update=True),
            key=lambda lot: lot.fifo_key,
        )
        lot_total = _total(lots)
        ledger_total = self._uow.movements.balance(variant_id, warehouse)
        if ledger_total != lot_total:
            raise InvariantViolation(
                f"Ledger for {StockKey(variant_id, warehouse)} sums to {ledger_total} "
                f"but inventory holds {lot_total}"
            )
        return lots

    def _spread(self, lots, quantity, capacity, apply) -> list[tuple[InventoryLot, int]]:
        """Apply ``quantity`` across lots in order, bounded by ``capacity``."""
        touched: list[tuple[InventoryLot, int]] = []
        remaining = quantity
        for lot in lots:
            if remaining == 0:
                break
            take = min(capacity(lot), remaining)
            if take <= 0:
                continue
            apply(lot, take)
            self._uow.inventory.save(lot)
            touched.append((lot, take))
            remaining -= take
        return touched

    def _record_reservation_change(
        self, variant, warehouse, lots, touched, reserved_change, actor, kind, reference, message
    ) -> Movement:
        total = _total(lots)
        movement = self._uow.movements.add(
            Movement.record(
                variant.id, warehouse, kind, total, 0, touched[0][0].unit_cost, actor,
                reference=reference,
                reserved_change=reserved_change,
                lot_id=touched[0][0].id if len(touched) == 1 else None,
                reason=message,
            )
        )
        self._refresh_variant(variant)
        logger.info(message, extra={"extra_fields": _fields(movement)})
        return movement

    def _refresh_variant(self, variant: Variant) -> None:
        lots = self._uow.inventory.lots_for_variant(variant.id)
        variant.apply_totals(
            sum(lot.quantity for lot in lots),
            sum(lot.reserved for lot in lots),
        )
        self._uow.variants.save(variant)


def _total(lots: list[InventoryLot]) -> int:
    return sum(lot.quantity for lot in lots)


def _fields(movement: Movement, **extra) -> dict:
    fields = {
        "variant_id": movement.variant_id,
        "warehouse": movement.warehouse.value,
        "kind": movement.kind.value,
        "quantity_change": movement.quantity_change,
        "reserved_change": movement.reserved_change,
        "quantity_after": movement.quantity_after,
        "reference_id": movement.reference_id,
        "actor": movement.created_by,
    }
    fields.update(extra)
    return fields
