"""Application services: inspect and close backorders."""

from __future__ import annotations

from stockledger.application.dto import BackorderDTO
from stockledger.domain.model.enums import BackorderStatus, Warehouse
from stockledger.domain.repository.filters import BackorderFilter
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.backorder_tracker import BackorderTracker, VariantShortage


class ListBackordersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._tracker = BackorderTracker(uow)

    def handle(
        self,
        status: BackorderStatus | None = BackorderStatus.PENDING,
        variant_id: str | None = None,
        warehouse: Warehouse | None = None,
    ) -> list[BackorderDTO]:
        criteria = BackorderFilter(status=status, variant_id=variant_id, warehouse=warehouse)
        return [BackorderDTO.of(b) for b in self._tracker.list(criteria)]


class CancelBackorderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._tracker = BackorderTracker(uow)

    def handle(self, backorder_id: int, actor: str, note: str | None = None) -> BackorderDTO:
        return BackorderDTO.of(self._tracker.cancel(backorder_id, actor, note))


class ResolveBackorderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._tracker = BackorderTracker(uow)

    def handle(self, backorder_id: int, actor: str) -> BackorderDTO:
        return BackorderDTO.of(self._tracker.resolve(backorder_id, actor))


class BackorderSummaryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._tracker = BackorderTracker(uow)

    def handle(self, status: BackorderStatus = BackorderStatus.PENDING) -> list[VariantShortage]:
        return self._tracker.summarize_by_variant(status)
