"""SQLAlchemy implementation of BackorderRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.domain.model.backorder import Backorder
from stockledger.domain.repository.backorder_repository import BackorderRepository
from stockledger.domain.repository.filters import BackorderFilter
from stockledger.infrastructure.persistence.errors import as_utc, flush
from stockledger.infrastructure.persistence.orm import BackorderRow


class SqlBackorderRepository(BackorderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, backorder_id: int) -> Backorder | None:
        row = self._session.get(BackorderRow, backorder_id)
        return self._to_domain(row) if row is not None else None

    def find(self, line_item_id: str, variant_id: str) -> Backorder | None:
        row = self._session.scalar(
            select(BackorderRow).where(
                BackorderRow.line_item_id == line_item_id,
                BackorderRow.variant_id == variant_id,
            )
        )
        return self._to_domain(row) if row is not None else None

    def list(self, criteria: BackorderFilter) -> list[Backorder]:
        stmt = select(BackorderRow)
        if criteria.status is not None:
            stmt = stmt.where(BackorderRow.status == criteria.status)
        if criteria.variant_id is not None:
            stmt = stmt.where(BackorderRow.variant_id == criteria.variant_id)
        if criteria.warehouse is not None:
            stmt = stmt.where(BackorderRow.warehouse == criteria.warehouse)
        if criteria.line_item_id is not None:
            stmt = stmt.where(BackorderRow.line_item_id == criteria.line_item_id)
        stmt = stmt.order_by(
            BackorderRow.priority.desc(), BackorderRow.demand_created_at, BackorderRow.id
        )
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def save(self, backorder: Backorder) -> Backorder:
        row = None
        if backorder.id is not None:
            row = self._session.get(BackorderRow, backorder.id)
        if row is None:
            row = BackorderRow(
                line_item_id=backorder.line_item_id,
                variant_id=backorder.variant_id,
                created_at=backorder.created_at,
            )
            self._session.add(row)
        row.warehouse = backorder.warehouse
        row.shortage_quantity = backorder.shortage_quantity
        row.priority = backorder.priority
        row.status = backorder.status
        row.notes = backorder.notes
        row.demand_created_at = backorder.demand_created_at
        row.updated_at = backorder.updated_at
        row.resolved_at = backorder.resolved_at
        row.resolved_by = backorder.resolved_by
        flush(self._session)
        backorder.id = row.id
        return backorder

    @staticmethod
    def _to_domain(row: BackorderRow) -> Backorder:
        return Backorder(
            id=row.id,
            line_item_id=row.line_item_id,
            variant_id=row.variant_id,
            warehouse=row.warehouse,
            shortage_quantity=row.shortage_quantity,
            priority=row.priority,
            demand_created_at=as_utc(row.demand_created_at),
            status=row.status,
            notes=row.notes,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
            resolved_at=as_utc(row.resolved_at),
            resolved_by=row.resolved_by,
        )
