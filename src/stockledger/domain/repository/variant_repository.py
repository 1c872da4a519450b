"""Abstract repository for Variant.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.variant import Variant


class VariantRepository(ABC):

    @abstractmethod
    def get(self, variant_id: str) -> Variant | None:
        """Return a variant by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Variant]:
        """Return every variant."""

    @abstractmethod
    def save(self, variant: Variant) -> None:
        """Persist a new or updated variant."""
