"""SQLAlchemy implementation of VariantRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.variant_repository import VariantRepository
from stockledger.infrastructure.persistence.errors import as_utc, flush
from stockledger.infrastructure.persistence.orm import VariantRow


class SqlVariantRepository(VariantRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- VariantRepository interface ------------------------------------------

    def get(self, variant_id: str) -> Variant | None:
        row = self._session.get(VariantRow, variant_id)
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Variant]:
        rows = self._session.scalars(select(VariantRow).order_by(VariantRow.code))
        return [self._to_domain(row) for row in rows]

    def save(self, variant: Variant) -> None:
        row = self._session.get(VariantRow, variant.id)
        if row is None:
            row = VariantRow(id=variant.id, created_at=variant.created_at)
            self._session.add(row)
        row.code = variant.code
        row.unit_cost = variant.unit_cost
        row.stock_quantity = variant.stock_quantity
        row.reserved_stock = variant.reserved_stock
        row.available_stock = variant.available_stock
        flush(self._session)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: VariantRow) -> Variant:
        return Variant(
            id=row.id,
            code=row.code,
            unit_cost=row.unit_cost,
            stock_quantity=row.stock_quantity,
            reserved_stock=row.reserved_stock,
            available_stock=row.available_stock,
            created_at=as_utc(row.created_at),
        )
