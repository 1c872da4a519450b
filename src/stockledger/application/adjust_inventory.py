"""Application service: Adjust Inventory use case.

Manual corrections after a stock count, breakage, samples and the like.
"""

from __future__ import annotations

from stockledger.application.dto import StockLevelDTO
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.value_objects import parse_cost
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.inventory_store import InventoryStore


class AdjustInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._store = InventoryStore(uow)

    def handle(
        self,
        variant_id: str,
        warehouse: Warehouse,
        delta: int,
        reason: str,
        actor: str,
        unit_cost: str | None = None,
    ) -> StockLevelDTO:
        if not reason or not reason.strip():
            raise ValidationError("An adjustment needs a reason")
        if unit_cost is not None and delta < 0:
            raise ValidationError("A unit cost only applies to inbound adjustments")
        snapshot = self._store.adjust(
            variant_id,
            warehouse,
            delta,
            reason.strip(),
            actor,
            unit_cost=parse_cost(unit_cost) if unit_cost is not None else None,
        )
        return StockLevelDTO.of(snapshot)
