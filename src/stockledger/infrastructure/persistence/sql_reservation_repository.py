"""SQLAlchemy implementation of ReservationRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.domain.model.reservation import Reservation
from stockledger.domain.repository.reservation_repository import ReservationRepository
from stockledger.infrastructure.persistence.errors import as_utc, flush
from stockledger.infrastructure.persistence.orm import ReservationRow


class SqlReservationRepository(ReservationRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_line_item(self, line_item_id: str) -> Reservation | None:
        row = self._session.scalar(
            select(ReservationRow).where(ReservationRow.line_item_id == line_item_id)
        )
        return self._to_domain(row) if row is not None else None

    def save(self, reservation: Reservation) -> Reservation:
        row = None
        if reservation.id is not None:
            row = self._session.get(ReservationRow, reservation.id)
        if row is None:
            row = ReservationRow(
                line_item_id=reservation.line_item_id,
                created_at=reservation.created_at,
            )
            self._session.add(row)
        row.variant_id = reservation.variant_id
        row.warehouse = reservation.warehouse
        row.reserved_quantity = reservation.reserved_quantity
        row.shipped_quantity = reservation.shipped_quantity
        row.released_quantity = reservation.released_quantity
        row.status = reservation.status
        row.updated_at = reservation.updated_at
        flush(self._session)
        reservation.id = row.id
        return reservation

    @staticmethod
    def _to_domain(row: ReservationRow) -> Reservation:
        return Reservation(
            id=row.id,
            line_item_id=row.line_item_id,
            variant_id=row.variant_id,
            warehouse=row.warehouse,
            reserved_quantity=row.reserved_quantity,
            shipped_quantity=row.shipped_quantity,
            released_quantity=row.released_quantity,
            status=row.status,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
