"""Application service: Transfer Stock use case."""

from __future__ import annotations

from stockledger.application.dto import TransferDTO
from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.transfer import TransferRequest
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.transfer_service import TransferService


class TransferStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._service = TransferService(uow)

    def handle(
        self,
        source_variant_id: str,
        source_warehouse: Warehouse,
        target_variant_id: str,
        target_warehouse: Warehouse,
        quantity: int,
        reason: str,
        actor: str,
        notes: str | None = None,
    ) -> TransferDTO:
        request = TransferRequest(
            source_variant_id=source_variant_id,
            source_warehouse=source_warehouse,
            target_variant_id=target_variant_id,
            target_warehouse=target_warehouse,
            quantity=quantity,
            reason=reason,
            notes=notes,
        )
        return TransferDTO.of(self._service.transfer(request, actor))


class ListTransfersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._service = TransferService(uow)

    def handle(self, limit: int = 50, offset: int = 0) -> list[TransferDTO]:
        return [TransferDTO.of(t) for t in self._service.list_transfers(limit, offset)]
