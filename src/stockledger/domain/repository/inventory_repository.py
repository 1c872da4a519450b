"""Abstract repository for InventoryLot rows."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.inventory import InventoryLot


class InventoryRepository(ABC):

    @abstractmethod
    def lots_for(
        self, variant_id: str, warehouse: Warehouse, for_update: bool = False
    ) -> list[InventoryLot]:
        """Return the lots of one (variant, warehouse), oldest first.

        With ``for_update`` the rows are locked until the transaction ends.
        """

    @abstractmethod
    def lots_for_variant(self, variant_id: str) -> list[InventoryLot]:
        """Return every lot of a variant across warehouses, oldest first."""

    @abstractmethod
    def list_all(self) -> list[InventoryLot]:
        """Return every lot."""

    @abstractmethod
    def add(self, lot: InventoryLot) -> InventoryLot:
        """Insert a new lot and return it with its ID assigned."""

    @abstractmethod
    def save(self, lot: InventoryLot) -> None:
        """Persist changes to an existing lot."""
