"""SQLAlchemy implementation of TransferRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.domain.model.transfer import StockTransfer
from stockledger.domain.repository.transfer_repository import TransferRepository
from stockledger.infrastructure.persistence.errors import as_utc, flush
from stockledger.infrastructure.persistence.orm import StockTransferRow


class SqlTransferRepository(TransferRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, transfer: StockTransfer) -> StockTransfer:
        row = StockTransferRow(
            transfer_number=transfer.transfer_number,
            source_variant_id=transfer.source_variant_id,
            source_warehouse=transfer.source_warehouse,
            target_variant_id=transfer.target_variant_id,
            target_warehouse=transfer.target_warehouse,
            quantity=transfer.quantity,
            unit_cost=transfer.unit_cost,
            total_cost=transfer.total_cost,
            reason=transfer.reason,
            notes=transfer.notes,
            created_by=transfer.created_by,
            created_at=transfer.created_at,
        )
        self._session.add(row)
        # A duplicate transfer number means a concurrent transfer won the race
        flush(self._session)
        return self._to_domain(row)

    def get(self, transfer_id: int) -> StockTransfer | None:
        row = self._session.get(StockTransferRow, transfer_id)
        return self._to_domain(row) if row is not None else None

    def last_number(self) -> str | None:
        stmt = (
            select(StockTransferRow.transfer_number)
            .order_by(StockTransferRow.id.desc())
            .limit(1)
        )
        return self._session.scalar(stmt)

    def list(self, limit: int = 50, offset: int = 0) -> list[StockTransfer]:
        stmt = (
            select(StockTransferRow)
            .order_by(StockTransferRow.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    @staticmethod
    def _to_domain(row: StockTransferRow) -> StockTransfer:
        return StockTransfer(
            id=row.id,
            transfer_number=row.transfer_number,
            source_variant_id=row.source_variant_id,
            source_warehouse=row.source_warehouse,
            target_variant_id=row.target_variant_id,
            target_warehouse=row.target_warehouse,
            quantity=row.quantity,
            unit_cost=row.unit_cost,
            total_cost=row.total_cost,
            reason=row.reason,
            created_by=row.created_by,
            notes=row.notes,
            created_at=as_utc(row.created_at),
        )
