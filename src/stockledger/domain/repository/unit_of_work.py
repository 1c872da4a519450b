"""Abstract Unit of Work: one atomic transaction over every repository.

Usage::

    with uow:
        lots = uow.inventory.lots_for(variant_id, warehouse, for_update=True)
        ...

Leaving the block normally commits; leaving it with an exception rolls
back and lets the exception propagate. A unit of work is not re-entrant:
services check ``in_transaction`` and join the open transaction instead of
starting a new one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.repository.backorder_repository import BackorderRepository
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.movement_repository import MovementRepository
from stockledger.domain.repository.reservation_repository import ReservationRepository
from stockledger.domain.repository.transfer_repository import TransferRepository
from stockledger.domain.repository.variant_repository import VariantRepository

DEFAULT_MAX_ATTEMPTS = 3


class UnitOfWork(ABC):

    variants: VariantRepository
    inventory: InventoryRepository
    movements: MovementRepository
    transfers: TransferRepository
    reservations: ReservationRepository
    backorders: BackorderRepository

    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __init__(self) -> None:
        self._active = False

    @property
    def in_transaction(self) -> bool:
        return self._active

    def __enter__(self) -> UnitOfWork:
        if self._active:
            raise RuntimeError("Unit of work is already in a transaction")
        self._begin()
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                try:
                    self._commit()
                except BaseException:
                    self._rollback()
                    raise
            else:
                self._rollback()
        finally:
            self._active = False
            self._end()

    @abstractmethod
    def _begin(self) -> None:
        """Open a transaction and bind the repositories to it."""

    @abstractmethod
    def _commit(self) -> None:
        """Commit; raise ConcurrencyConflict if the store rejects it."""

    @abstractmethod
    def _rollback(self) -> None:
        """Discard every change made since ``_begin``."""

    def _end(self) -> None:
        """Release transaction resources. Called after commit or rollback."""
