"""Abstract repository for line item reservations."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def get_by_line_item(self, line_item_id: str) -> Reservation | None:
        """Return the reservation of a line item, or None if never reserved."""

    @abstractmethod
    def save(self, reservation: Reservation) -> Reservation:
        """Persist a new or updated reservation, assigning an ID if new."""
