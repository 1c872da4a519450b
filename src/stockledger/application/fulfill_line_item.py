"""Application services: reserve, ship and cancel single line items.

Orchestrates the reservation service, which keeps the line's reservation
record and the warehouse stock in step.
"""

from __future__ import annotations

from stockledger.application.dto import MovementDTO, ReservationDTO
from stockledger.domain.model.enums import ReservationStatus, Warehouse
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.reservation_service import ReservationService


class ReserveLineHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._service = ReservationService(uow)

    def handle(
        self,
        line_item_id: str,
        variant_id: str,
        warehouse: Warehouse,
        quantity: int,
        actor: str,
    ) -> ReservationDTO:
        reservation = self._service.reserve(line_item_id, variant_id, warehouse, quantity, actor)
        return ReservationDTO.of(reservation)


class ShipLineHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._service = ReservationService(uow)

    def handle(
        self, line_item_id: str, quantity: int | None, actor: str
    ) -> tuple[ReservationDTO, list[MovementDTO]]:
        """Ship ``quantity`` units, or everything outstanding if None.

        Returns the updated line and one SALE movement per lot consumed.
        """
        if quantity is None:
            quantity = self._service.get(line_item_id).outstanding
        movements = self._service.ship(line_item_id, quantity, actor)
        reservation = self._service.get(line_item_id)
        return ReservationDTO.of(reservation), [MovementDTO.of(m) for m in movements]


class CancelLineHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._service = ReservationService(uow)

    def handle(self, line_item_id: str, actor: str) -> ReservationDTO:
        return ReservationDTO.of(self._service.cancel(line_item_id, actor))


class LineStatusHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._service = ReservationService(uow)

    def handle(self, line_item_id: str) -> ReservationDTO | None:
        """The line's reservation, or None while it is UNRESERVED."""
        if self._service.status_of(line_item_id) == ReservationStatus.UNRESERVED:
            return None
        return ReservationDTO.of(self._service.get(line_item_id))
