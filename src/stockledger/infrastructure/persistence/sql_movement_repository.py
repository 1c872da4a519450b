"""SQLAlchemy implementation of the append-only MovementRepository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.movement import Movement
from stockledger.domain.model.value_objects import StockKey
from stockledger.domain.repository.filters import MovementFilter
from stockledger.domain.repository.movement_repository import MovementRepository
from stockledger.infrastructure.persistence.errors import as_utc, flush
from stockledger.infrastructure.persistence.orm import MovementRow


class SqlMovementRepository(MovementRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, movement: Movement) -> Movement:
        row = MovementRow(
            variant_id=movement.variant_id,
            warehouse=movement.warehouse,
            kind=movement.kind,
            quantity_before=movement.quantity_before,
            quantity_change=movement.quantity_change,
            quantity_after=movement.quantity_after,
            reserved_change=movement.reserved_change,
            unit_cost=movement.unit_cost,
            total_cost=movement.total_cost,
            reference_type=movement.reference_type,
            reference_id=movement.reference_id,
            lot_id=movement.lot_id,
            reason=movement.reason,
            created_by=movement.created_by,
            created_at=movement.created_at,
        )
        self._session.add(row)
        flush(self._session)
        return self._to_domain(row)

    def list(self, criteria: MovementFilter) -> list[Movement]:
        stmt = select(MovementRow)
        if criteria.variant_id is not None:
            stmt = stmt.where(MovementRow.variant_id == criteria.variant_id)
        if criteria.warehouse is not None:
            stmt = stmt.where(MovementRow.warehouse == criteria.warehouse)
        if criteria.kind is not None:
            stmt = stmt.where(MovementRow.kind == criteria.kind)
        if criteria.reference_type is not None:
            stmt = stmt.where(MovementRow.reference_type == criteria.reference_type)
        if criteria.reference_id is not None:
            stmt = stmt.where(MovementRow.reference_id == criteria.reference_id)
        stmt = stmt.order_by(MovementRow.id).offset(criteria.offset)
        if criteria.limit is not None:
            stmt = stmt.limit(criteria.limit)
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def balance(self, variant_id: str, warehouse: Warehouse) -> int:
        stmt = select(func.coalesce(func.sum(MovementRow.quantity_change), 0)).where(
            MovementRow.variant_id == variant_id,
            MovementRow.warehouse == warehouse,
        )
        return int(self._session.scalar(stmt))

    def keys(self) -> list[StockKey]:
        stmt = (
            select(MovementRow.variant_id, MovementRow.warehouse)
            .distinct()
            .order_by(MovementRow.variant_id, MovementRow.warehouse)
        )
        return [StockKey(variant_id, warehouse) for variant_id, warehouse in self._session.execute(stmt)]

    @staticmethod
    def _to_domain(row: MovementRow) -> Movement:
        return Movement(
            id=row.id,
            variant_id=row.variant_id,
            warehouse=row.warehouse,
            kind=row.kind,
            quantity_before=row.quantity_before,
            quantity_change=row.quantity_change,
            quantity_after=row.quantity_after,
            unit_cost=row.unit_cost,
            total_cost=row.total_cost,
            created_by=row.created_by,
            reference_type=row.reference_type,
            reference_id=row.reference_id,
            reserved_change=row.reserved_change,
            lot_id=row.lot_id,
            reason=row.reason,
            created_at=as_utc(row.created_at),
        )
