"""Variant: a sellable product configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from stockledger.domain.exceptions import InvariantViolation, ValidationError


@dataclass
class Variant:
    """A sellable configuration of a product.

    The stock counters are a denormalized cache of the variant's inventory
    lots. Only the inventory store writes them, via ``apply_totals``.
    """

    id: str
    code: str
    unit_cost: Decimal = Decimal("0")
    stock_quantity: int = 0
    reserved_stock: int = 0
    available_stock: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(variant_id: str, code: str, unit_cost: Decimal) -> Variant:
        if not variant_id or not variant_id.strip():
            raise ValidationError("Variant ID is required")
        if not code or not code.strip():
            raise ValidationError("Variant code is required")
        if unit_cost < 0:
            raise ValidationError("Unit cost cannot be negative")
        return Variant(id=variant_id.strip(), code=code.strip(), unit_cost=unit_cost)

    def apply_totals(self, quantity: int, reserved: int) -> None:
        """Overwrite the cached counters with freshly summed lot totals."""
        if quantity < 0 or reserved < 0 or reserved > quantity:
            raise InvariantViolation(
                f"Variant {self.code} totals out of range "
                f"(quantity={quantity}, reserved={reserved})"
            )
        self.stock_quantity = quantity
        self.reserved_stock = reserved
        self.available_stock = quantity - reserved
