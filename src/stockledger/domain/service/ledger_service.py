"""Domain service: ledger queries and reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.movement import Movement
from stockledger.domain.model.value_objects import StockKey
from stockledger.domain.repository.filters import MovementFilter
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.transaction import transactional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationReport:
    variant_id: str
    warehouse: Warehouse
    ledger_quantity: int
    inventory_quantity: int

    @property
    def balanced(self) -> bool:
        return self.ledger_quantity == self.inventory_quantity

    @property
    def difference(self) -> int:
        return self.inventory_quantity - self.ledger_quantity


class LedgerService:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    @transactional
    def history(self, criteria: MovementFilter | None = None) -> list[Movement]:
        return self._uow.movements.list(criteria or MovementFilter())

    @transactional
    def reconcile(self, variant_id: str, warehouse: Warehouse) -> ReconciliationReport:
        """Compare the ledger sum for a pair with what its lots hold."""
        lots = self._uow.inventory.lots_for(variant_id, warehouse)
        report = ReconciliationReport(
            variant_id=variant_id,
            warehouse=warehouse,
            ledger_quantity=self._uow.movements.balance(variant_id, warehouse),
            inventory_quantity=sum(lot.quantity for lot in lots),
        )
        if not report.balanced:
            logger.error(
                "Ledger out of balance",
                extra={"extra_fields": {
                    "variant_id": variant_id,
                    "warehouse": warehouse.value,
                    "ledger_quantity": report.ledger_quantity,
                    "inventory_quantity": report.inventory_quantity,
                }},
            )
        return report

    @transactional
    def reconcile_all(self) -> list[ReconciliationReport]:
        """Reconcile every pair that has a lot or a ledger entry."""
        keys = set(self._uow.movements.keys())
        keys.update(StockKey(lot.variant_id, lot.warehouse) for lot in self._uow.inventory.list_all())
        ordered = sorted(keys, key=lambda k: (k.variant_id, k.warehouse.value))
        return [self.reconcile(k.variant_id, k.warehouse) for k in ordered]
