"""Reservation: the stock held for one demand line item.

A line item without a reservation record is UNRESERVED. Reserving moves it
to RESERVED; shipping everything outstanding moves it to SHIPPED;
cancelling releases what is left and moves it to CANCELLED for good.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from stockledger.domain.exceptions import InsufficientReservation, ValidationError
from stockledger.domain.model.enums import ReservationStatus, Warehouse


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Reservation:

    id: int | None
    line_item_id: str
    variant_id: str
    warehouse: Warehouse
    reserved_quantity: int = 0
    shipped_quantity: int = 0
    released_quantity: int = 0
    status: ReservationStatus = ReservationStatus.RESERVED
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @property
    def outstanding(self) -> int:
        """Units still held in stock for this line."""
        return self.reserved_quantity - self.shipped_quantity - self.released_quantity

    # --- State transitions ----------------------------------------------------

    def add(self, quantity: int) -> None:
        """Record more stock reserved for the line.

        A fully shipped line that receives a top-up (e.g. when its backorder
        is filled) goes back to RESERVED.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if self.status == ReservationStatus.CANCELLED:
            raise ValidationError(
                f"Cannot reserve for line '{self.line_item_id}' - reservation is cancelled"
            )
        self.reserved_quantity += quantity
        self.status = ReservationStatus.RESERVED
        self.updated_at = _now()

    def ship(self, quantity: int) -> None:
        """Record that *quantity* reserved units left the warehouse."""
        if quantity <= 0:
            raise ValidationError("Ship quantity must be positive")
        if self.status != ReservationStatus.RESERVED:
            raise ValidationError(
                f"Cannot ship line '{self.line_item_id}' in {self.status.value} status"
            )
        if quantity > self.outstanding:
            raise InsufficientReservation(
                f"line '{self.line_item_id}'", quantity, self.outstanding
            )
        self.shipped_quantity += quantity
        if self.outstanding == 0:
            self.status = ReservationStatus.SHIPPED
        self.updated_at = _now()

    def cancel(self) -> int:
        """Transition RESERVED -> CANCELLED, returning the units to release."""
        if self.status == ReservationStatus.CANCELLED:
            raise ValidationError(f"Line '{self.line_item_id}' is already cancelled")
        if self.status != ReservationStatus.RESERVED:
            raise ValidationError(
                f"Cannot cancel line '{self.line_item_id}' in {self.status.value} status"
            )
        to_release = self.outstanding
        self.released_quantity += to_release
        self.status = ReservationStatus.CANCELLED
        self.updated_at = _now()
        return to_release
