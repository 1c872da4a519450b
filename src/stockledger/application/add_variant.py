"""Application service: Add Variant use case."""

from __future__ import annotations

from stockledger.application.dto import VariantDTO
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import parse_cost
from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.unit_of_work import UnitOfWork


class AddVariantHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, variant_id: str, code: str, unit_cost: str | None = None) -> VariantDTO:
        """Register a variant with empty stock."""
        variant = Variant.create(variant_id, code, parse_cost(unit_cost))
        with self._uow:
            if self._uow.variants.get(variant.id) is not None:
                raise ValidationError(f"Variant '{variant.id}' already exists")
            self._uow.variants.save(variant)
        return VariantDTO.of(variant)


class ListVariantsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[VariantDTO]:
        with self._uow:
            return [VariantDTO.of(v) for v in self._uow.variants.list_all()]
