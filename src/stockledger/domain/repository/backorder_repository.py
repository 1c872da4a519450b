"""Abstract repository for Backorder records.

Backorders are kept for audit, so there is no delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.backorder import Backorder
from stockledger.domain.repository.filters import BackorderFilter


class BackorderRepository(ABC):

    @abstractmethod
    def get(self, backorder_id: int) -> Backorder | None:
        """Return a backorder by ID, or None."""

    @abstractmethod
    def find(self, line_item_id: str, variant_id: str) -> Backorder | None:
        """Return the backorder of a line item for a variant, whatever its status."""

    @abstractmethod
    def list(self, criteria: BackorderFilter) -> list[Backorder]:
        """Return matching backorders, highest priority first, then oldest."""

    @abstractmethod
    def save(self, backorder: Backorder) -> Backorder:
        """Persist a new or updated backorder, assigning an ID if new."""
