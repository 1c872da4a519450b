"""SQLAlchemy implementation of InventoryRepository.

Lots carry a version counter. The domain lot remembers the version it was
read at; saving it after another transaction has changed the row raises
ConcurrencyConflict, whether the change is seen on re-read or on flush.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.domain.exceptions import ConcurrencyConflict, NotFound
from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.inventory import InventoryLot
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.infrastructure.persistence.errors import as_utc, flush
from stockledger.infrastructure.persistence.orm import InventoryLotRow

_FIFO = (InventoryLotRow.created_at, InventoryLotRow.id)


class SqlInventoryRepository(InventoryRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- InventoryRepository interface ----------------------------------------

    def lots_for(
        self, variant_id: str, warehouse: Warehouse, for_update: bool = False
    ) -> list[InventoryLot]:
        stmt = (
            select(InventoryLotRow)
            .where(
                InventoryLotRow.variant_id == variant_id,
                InventoryLotRow.warehouse == warehouse,
            )
            .order_by(*_FIFO)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def lots_for_variant(self, variant_id: str) -> list[InventoryLot]:
        stmt = (
            select(InventoryLotRow)
            .where(InventoryLotRow.variant_id == variant_id)
            .order_by(*_FIFO)
        )
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def list_all(self) -> list[InventoryLot]:
        stmt = select(InventoryLotRow).order_by(InventoryLotRow.variant_id, *_FIFO)
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def add(self, lot: InventoryLot) -> InventoryLot:
        row = InventoryLotRow(
            variant_id=lot.variant_id,
            warehouse=lot.warehouse,
            created_at=lot.created_at,
        )
        self._copy(lot, row)
        self._session.add(row)
        flush(self._session)
        lot.id = row.id
        lot.version = row.version
        return lot

    def save(self, lot: InventoryLot) -> None:
        row = self._session.get(InventoryLotRow, lot.id)
        if row is None:
            raise NotFound(f"Inventory lot #{lot.id} not found")
        if row.version != lot.version:
            raise ConcurrencyConflict(
                f"Inventory lot #{lot.id} was changed by another transaction"
            )
        self._copy(lot, row)
        flush(self._session)
        lot.version = row.version

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _copy(lot: InventoryLot, row: InventoryLotRow) -> None:
        row.quantity = lot.quantity
        row.reserved = lot.reserved
        row.unit_cost = lot.unit_cost

    @staticmethod
    def _to_domain(row: InventoryLotRow) -> InventoryLot:
        return InventoryLot(
            id=row.id,
            variant_id=row.variant_id,
            warehouse=row.warehouse,
            quantity=row.quantity,
            reserved=row.reserved,
            unit_cost=row.unit_cost,
            created_at=as_utc(row.created_at),
            version=row.version,
        )
