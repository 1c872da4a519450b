"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.enums import ReferenceType, Warehouse


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot move zero or negative units.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StockKey:
    """Identifies the stock of one variant inside one warehouse."""

    variant_id: str
    warehouse: Warehouse

    def __post_init__(self) -> None:
        if not self.variant_id or not self.variant_id.strip():
            raise ValidationError("Variant ID is required")
        if not isinstance(self.warehouse, Warehouse):
            raise ValidationError(f"Unknown warehouse: {self.warehouse!r}")

    def __str__(self) -> str:
        return f"{self.variant_id}@{self.warehouse.value}"


@dataclass(frozen=True)
class Reference:
    """Pointer to the business object that caused a stock change."""

    type: ReferenceType
    id: str | None = None


def parse_cost(amount: str | float | int | Decimal | None) -> Decimal:
    """Coerce a cost figure to Decimal.

    Costs are carried through the ledger untouched; the only rule applied
    here is that they cannot be negative.
    """
    if amount is None:
        return Decimal("0")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid cost amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValidationError(f"Invalid cost amount: {amount!r}")
    if value < 0:
        raise ValidationError(f"Cost cannot be negative, got {value}")
    return value


def parse_warehouse(raw: str | Warehouse) -> Warehouse:
    if isinstance(raw, Warehouse):
        return raw
    try:
        return Warehouse(raw.strip().upper())
    except (ValueError, AttributeError) as exc:
        raise ValidationError(
            f"Warehouse must be one of {', '.join(w.value for w in Warehouse)}, got {raw!r}"
        ) from exc
