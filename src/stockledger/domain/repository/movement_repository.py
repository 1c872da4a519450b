"""Abstract repository for the append-only movement ledger.

There is deliberately no save/update/delete: entries are only ever added.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.movement import Movement
from stockledger.domain.model.value_objects import StockKey
from stockledger.domain.repository.filters import MovementFilter


class MovementRepository(ABC):

    @abstractmethod
    def add(self, movement: Movement) -> Movement:
        """Append an entry and return it with its ID assigned."""

    @abstractmethod
    def list(self, criteria: MovementFilter) -> list[Movement]:
        """Return matching entries in ledger (commit) order."""

    @abstractmethod
    def balance(self, variant_id: str, warehouse: Warehouse) -> int:
        """Sum of ``quantity_change`` over every entry of the pair."""

    @abstractmethod
    def keys(self) -> list[StockKey]:
        """Every (variant, warehouse) that has at least one entry."""
