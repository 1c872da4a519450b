"""Domain service: Stock Transfer.

Moves units from one (variant, warehouse) to another, e.g. reclassifying a
damaged bottle from the normal variant into its damaged variant. The total
number of units in the system does not change; the target inherits the
cost basis of the source.
"""

from __future__ import annotations

import logging

from stockledger.domain.exceptions import NotFound
from stockledger.domain.model.enums import MovementKind, ReferenceType
from stockledger.domain.model.transfer import (
    StockTransfer,
    TransferRequest,
    next_transfer_number,
)
from stockledger.domain.model.value_objects import Reference
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.service.inventory_store import InventoryStore
from stockledger.domain.service.transaction import transactional

logger = logging.getLogger(__name__)


class TransferService:

    def __init__(self, uow: UnitOfWork, store: InventoryStore | None = None) -> None:
        self._uow = uow
        self._store = store or InventoryStore(uow)

    @transactional
    def transfer(self, request: TransferRequest, actor: str) -> StockTransfer:
        """Move ``request.quantity`` units from source to target atomically.

        The unit cost carried over is that of the oldest source lot drawn
        from. The target lot takes that cost even if it already held stock
        at another cost (last transfer wins). Both ledger entries and the
        transfer record carry the exact cost of the units drawn.
        """
        request.validate()
        if self._uow.variants.get(request.target_variant_id) is None:
            raise NotFound(f"Target variant '{request.target_variant_id}' not found")

        transfer_number = next_transfer_number(self._uow.transfers.last_number())
        reference = Reference(ReferenceType.TRANSFER, transfer_number)
        reason = request.reason.strip()

        out, taken = self._store.withdraw(
            request.source_variant_id,
            request.source_warehouse,
            request.quantity,
            actor,
            kind=MovementKind.TRANSFER,
            reference=reference,
            reason=f"{transfer_number} out: {reason}",
        )
        inherited_cost = taken[0][0].unit_cost
        self._store.deposit(
            request.target_variant_id,
            request.target_warehouse,
            request.quantity,
            actor,
            kind=MovementKind.TRANSFER,
            reference=reference,
            reason=f"{transfer_number} in: {reason}",
            unit_cost=inherited_cost,
            overwrite_cost=True,
            total_cost=out.total_cost,
        )

        transfer = self._uow.transfers.add(
            StockTransfer(
                id=None,
                transfer_number=transfer_number,
                source_variant_id=request.source_variant_id,
                source_warehouse=request.source_warehouse,
                target_variant_id=request.target_variant_id,
                target_warehouse=request.target_warehouse,
                quantity=request.quantity,
                unit_cost=inherited_cost,
                total_cost=out.total_cost,
                reason=reason,
                notes=request.notes,
                created_by=actor,
            )
        )
        logger.info(
            "Stock transferred",
            extra={"extra_fields": {
                "transfer_number": transfer.transfer_number,
                "source": str(request.source),
                "target": str(request.target),
                "quantity": request.quantity,
                "unit_cost": str(inherited_cost),
                "total_cost": str(out.total_cost),
                "actor": actor,
            }},
        )
        return transfer

    @transactional
    def list_transfers(self, limit: int = 50, offset: int = 0) -> list[StockTransfer]:
        return self._uow.transfers.list(limit=limit, offset=offset)
