"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from stockledger.application.dto import StockLevelDTO
from stockledger.domain.model.enums import Warehouse
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.inventory_store import InventoryStore


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._store = InventoryStore(uow)

    def handle(self, variant_id: str, warehouse: Warehouse | None = None) -> list[StockLevelDTO]:
        """Stock levels of a variant, one row per warehouse."""
        warehouses = [warehouse] if warehouse is not None else list(Warehouse)
        return [StockLevelDTO.of(self._store.snapshot(variant_id, w)) for w in warehouses]
