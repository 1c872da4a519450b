"""Application service: ledger history and reconciliation (queries)."""

from __future__ import annotations

from stockledger.application.dto import MovementDTO, ReconciliationDTO
from stockledger.domain.model.enums import MovementKind, Warehouse
from stockledger.domain.repository.filters import MovementFilter
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.ledger_service import LedgerService, ReconciliationReport


class ShowMovementsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._ledger = LedgerService(uow)

    def handle(
        self,
        variant_id: str | None = None,
        warehouse: Warehouse | None = None,
        kind: MovementKind | None = None,
        reference_id: str | None = None,
        limit: int | None = None,
    ) -> list[MovementDTO]:
        criteria = MovementFilter(
            variant_id=variant_id,
            warehouse=warehouse,
            kind=kind,
            reference_id=reference_id,
            limit=limit,
        )
        return [MovementDTO.of(m) for m in self._ledger.history(criteria)]


class ReconcileHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._ledger = LedgerService(uow)

    def handle(
        self, variant_id: str | None = None, warehouse: Warehouse | None = None
    ) -> list[ReconciliationDTO]:
        """Reconcile one variant (optionally one warehouse), or everything."""
        if variant_id is None:
            reports = self._ledger.reconcile_all()
        else:
            warehouses = [warehouse] if warehouse is not None else list(Warehouse)
            reports = [self._ledger.reconcile(variant_id, w) for w in warehouses]
        return [self._to_dto(r) for r in reports]

    @staticmethod
    def _to_dto(report: ReconciliationReport) -> ReconciliationDTO:
        return ReconciliationDTO(
            variant_id=report.variant_id,
            warehouse=report.warehouse.value,
            ledger_quantity=report.ledger_quantity,
            inventory_quantity=report.inventory_quantity,
            balanced=report.balanced,
        )
