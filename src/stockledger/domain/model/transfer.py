"""StockTransfer: an immutable record of one adjustment between two lots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from stockledger.domain.exceptions import InvalidTransfer, ValidationError
from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.value_objects import Quantity, StockKey

TRANSFER_NUMBER_PREFIX = "ST-"


@dataclass(frozen=True)
class TransferRequest:
    """Input: what the operator asked to move."""

    source_variant_id: str
    source_warehouse: Warehouse
    target_variant_id: str
    target_warehouse: Warehouse
    quantity: int
    reason: str
    notes: str | None = None

    @property
    def source(self) -> StockKey:
        return StockKey(self.source_variant_id, self.source_warehouse)

    @property
    def target(self) -> StockKey:
        return StockKey(self.target_variant_id, self.target_warehouse)

    def validate(self) -> None:
        Quantity(self.quantity)
        if not self.reason or not self.reason.strip():
            raise ValidationError("Transfer reason is required")
        if self.source == self.target:
            raise InvalidTransfer(
                f"Source and target are the same stock ({self.source})"
            )


@dataclass(frozen=True)
class StockTransfer:

    id: int | None
    transfer_number: str
    source_variant_id: str
    source_warehouse: Warehouse
    target_variant_id: str
    target_warehouse: Warehouse
    quantity: int
    unit_cost: Decimal
    total_cost: Decimal
    reason: str
    created_by: str
    notes: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def format_transfer_number(sequence: int) -> str:
    """``1`` -> ``ST-000001``."""
    return f"{TRANSFER_NUMBER_PREFIX}{sequence:06d}"


def next_transfer_number(last_number: str | None) -> str:
    if not last_number or not last_number.startswith(TRANSFER_NUMBER_PREFIX):
        return format_transfer_number(1)
    try:
        sequence = int(last_number[len(TRANSFER_NUMBER_PREFIX):])
    except ValueError:
        return format_transfer_number(1)
    return format_transfer_number(sequence + 1)
