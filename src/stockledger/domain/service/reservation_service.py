"""Domain service: Reservation & Fulfillment.

Coordinates the per-line Reservation record with the inventory store so
the two never disagree: both are changed inside the same transaction.
"""

from __future__ import annotations

import logging

from stockledger.domain.exceptions import NotFound, ValidationError
from stockledger.domain.model.enums import ReferenceType, ReservationStatus, Warehouse
from stockledger.domain.model.movement import Movement
from stockledger.domain.model.reservation import Reservation
from stockledger.domain.model.value_objects import Quantity, Reference
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.backorder_tracker import BackorderTracker
from stockledger.domain.service.inventory_store import InventoryStore
from stockledger.domain.service.transaction import transactional

logger = logging.getLogger(__name__)


class ReservationService:

    def __init__(self, uow: UnitOfWork, store: InventoryStore | None = None) -> None:
        self._uow = uow
        self._store = store or InventoryStore(uow)
        self._backorders = BackorderTracker(uow)

    @transactional
    def get(self, line_item_id: str) -> Reservation:
        reservation = self._uow.reservations.get_by_line_item(line_item_id)
        if reservation is None:
            raise NotFound(f"No reservation for line item '{line_item_id}'")
        return reservation

    @transactional
    def status_of(self, line_item_id: str) -> ReservationStatus:
        reservation = self._uow.reservations.get_by_line_item(line_item_id)
        if reservation is None:
            return ReservationStatus.UNRESERVED
        return reservation.status

    @transactional
    def reserve(
        self,
        line_item_id: str,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
    ) -> Reservation:
        """Hold ``quantity`` units of stock for a line item.

        Raises InsufficientStock if fewer units are available.
        """
        Quantity(quantity)
        reservation = self._uow.reservations.get_by_line_item(line_item_id)
        if reservation is None:
            reservation = Reservation(
                id=None,
                line_item_id=line_item_id,
                variant_id=variant_id,
                warehouse=warehouse,
            )
        elif (reservation.variant_id, reservation.warehouse) != (variant_id, warehouse):
            raise ValidationError(
                f"Line item '{line_item_id}' is reserved against "
                f"{reservation.variant_id}@{reservation.warehouse.value}"
            )

        # Validate the state transition before touching stock
        reservation.add(quantity)
        self._store.reserve(
            variant_id, warehouse, quantity, actor,
            reference=Reference(ReferenceType.RESERVATION, line_item_id),
        )
        reservation = self._uow.reservations.save(reservation)
        logger.info(
            "Line item reserved",
            extra={"extra_fields": {
                "line_item_id": line_item_id,
                "quantity": quantity,
                "outstanding": reservation.outstanding,
            }},
        )
        return reservation

    @transactional
    def ship(self, line_item_id: str, quantity: int, actor: str) -> list[Movement]:
        """Ship reserved units, consuming lots oldest first.

        Returns one SALE movement per lot touched.
        """
        reservation = self.get(line_item_id)
        reservation.ship(quantity)
        movements = self._store.consume_reserved(
            reservation.variant_id,
            reservation.warehouse,
            quantity,
            actor,
            reference=Reference(ReferenceType.SALE, line_item_id),
            reason=f"Shipment for line {line_item_id}",
        )
        self._uow.reservations.save(reservation)
        logger.info(
            "Line item shipped",
            extra={"extra_fields": {
                "line_item_id": line_item_id,
                "quantity": quantity,
                "lots": len(movements),
                "status": reservation.status.value,
            }},
        )
        return movements

    @transactional
    def cancel(self, line_item_id: str, actor: str) -> Reservation:
        """Release whatever is still held and close the line.

        A pending backorder for the line is cancelled with it so later
        receipts are not offered to a dead line.
        """
        reservation = self.get(line_item_id)
        to_release = reservation.cancel()
        if to_release > 0:
            self._store.release(
                reservation.variant_id,
                reservation.warehouse,
                to_release,
                actor,
                reference=Reference(ReferenceType.RESERVATION, line_item_id),
            )
        reservation = self._uow.reservations.save(reservation)
        backorder = self._backorders.cancel_for_line(
            line_item_id, reservation.variant_id, actor, note="Line item cancelled"
        )
        logger.info(
            "Line item cancelled",
            extra={"extra_fields": {
                "line_item_id": line_item_id,
                "released": to_release,
                "backorder_id": backorder.id if backorder else None,
            }},
        )
        return reservation
