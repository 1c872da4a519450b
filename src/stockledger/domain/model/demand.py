"""DemandLine: an outstanding request for stock, owned by an external order."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Quantity

VIP_PRIORITY = 100
DEFAULT_PRIORITY = 50


@dataclass(frozen=True)
class DemandLine:
    """Input to the allocation engine.

    Higher ``priority`` outranks lower; ``created_at`` breaks ties and
    drives first-come-first-served ordering.
    """

    line_item_id: str
    requested_quantity: int
    created_at: datetime
    priority: int = 0

    def __post_init__(self) -> None:
        if not self.line_item_id:
            raise ValidationError("Line item ID is required")
        Quantity(self.requested_quantity)


def customer_priority(tier: str | None = None, explicit: int | None = None) -> int:
    """Priority score for a customer's demand.

    An explicitly assigned score wins; otherwise VIP customers rank above
    everyone else.
    """
    if explicit is not None:
        return explicit
    if tier is not None and tier.strip().upper() == "VIP":
        return VIP_PRIORITY
    return DEFAULT_PRIORITY
