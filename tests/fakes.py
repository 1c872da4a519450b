"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the SQLAlchemy
repositories but keep everything in dicts. Reads hand out copies, like a
database would, so a service only changes stored state through ``save``.
"""

from __future__ import annotations

import copy
from dataclasses import replace

from stockledger.domain.exceptions import ConcurrencyConflict, NotFound
from stockledger.domain.model.backorder import Backorder
from stockledger.domain.model.enums import Warehouse
from stockledger.domain.model.inventory import InventoryLot
from stockledger.domain.model.movement import Movement
from stockledger.domain.model.reservation import Reservation
from stockledger.domain.model.transfer import StockTransfer
from stockledger.domain.model.value_objects import StockKey
from stockledger.domain.model.variant import Variant
from stockledger.domain.repository.backorder_repository import BackorderRepository
from stockledger.domain.repository.filters import BackorderFilter, MovementFilter
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.movement_repository import MovementRepository
from stockledger.domain.repository.reservation_repository import ReservationRepository
from stockledger.domain.repository.transfer_repository import TransferRepository
from stockledger.domain.repository.unit_of_work import UnitOfWork
from stockledger.domain.repository.variant_repository import VariantRepository


class FakeVariantRepository(VariantRepository):

    def __init__(self) -> None:
        self._store: dict[str, Variant] = {}

    def get(self, variant_id: str) -> Variant | None:
        variant = self._store.get(variant_id)
        return copy.deepcopy(variant) if variant is not None else None

    def list_all(self) -> list[Variant]:
        return [copy.deepcopy(v) for v in sorted(self._store.values(), key=lambda v: v.code)]

    def save(self, variant: Variant) -> None:
        self._store[variant.id] = copy.deepcopy(variant)


class FakeInventoryRepository(InventoryRepository):

    def __init__(self) -> None:
        self._store: dict[int, InventoryLot] = {}
        self._next_id = 1

    def lots_for(
        self, variant_id: str, warehouse: Warehouse, for_update: bool = False
    ) -> list[InventoryLot]:
        return [
            lot for lot in self._ordered()
            if lot.variant_id == variant_id and lot.warehouse == warehouse
        ]

    def lots_for_variant(self, variant_id: str) -> list[InventoryLot]:
        return [lot for lot in self._ordered() if lot.variant_id == variant_id]

    def list_all(self) -> list[InventoryLot]:
        return self._ordered()

    def add(self, lot: InventoryLot) -> InventoryLot:
        lot.id = self._next_id
        lot.version = 1
        self._next_id += 1
        self._store[lot.id] = copy.deepcopy(lot)
        return lot

    def save(self, lot: InventoryLot) -> None:
        stored = self._store.get(lot.id)
        if stored is None:
            raise NotFound(f"Inventory lot #{lot.id} not found")
        if stored.version != lot.version:
            raise ConcurrencyConflict(f"Inventory lot #{lot.id} was changed by another transaction")
        lot.version += 1
        self._store[lot.id] = copy.deepcopy(lot)

    def _ordered(self) -> list[InventoryLot]:
        return [copy.deepcopy(lot) for lot in sorted(self._store.values(), key=lambda l: l.fifo_key)]


class FakeMovementRepository(MovementRepository):

    def __init__(self) -> None:
        self._entries: list[Movement] = []

    def add(self, movement: Movement) -> Movement:
        stored = replace(movement, id=len(self._entries) + 1)
        self._entries.append(stored)
        return stored

    def list(self, criteria: MovementFilter) -> list[Movement]:
        matches = [m for m in self._entries if criteria.matches(m)]
        matches = matches[criteria.offset:]
        if criteria.limit is not None:
            matches = matches[:criteria.limit]
        return matches

    def balance(self, variant_id: str, warehouse: Warehouse) -> int:
        return sum(
            m.quantity_change for m in self._entries
            if m.variant_id == variant_id and m.warehouse == warehouse
        )

    def keys(self) -> list[StockKey]:
        seen: dict[tuple, StockKey] = {}
        for m in self._entries:
            seen.setdefault((m.variant_id, m.warehouse), StockKey(m.variant_id, m.warehouse))
        return list(seen.values())


class FakeTransferRepository(TransferRepository):

    def __init__(self) -> None:
        self._store: list[StockTransfer] = []

    def add(self, transfer: StockTransfer) -> StockTransfer:
        stored = replace(transfer, id=len(self._store) + 1)
        self._store.append(stored)
        return stored

    def get(self, transfer_id: int) -> StockTransfer | None:
        for t in self._store:
            if t.id == transfer_id:
                return t
        return None

    def last_number(self) -> str | None:
        return self._store[-1].transfer_number if self._store else None

    def list(self, limit: int = 50, offset: int = 0) -> list[StockTransfer]:
        return list(reversed(self._store))[offset:offset + limit]


class FakeReservationRepository(ReservationRepository):

    def __init__(self) -> None:
        self._store: dict[str, Reservation] = {}
        self._next_id = 1

    def get_by_line_item(self, line_item_id: str) -> Reservation | None:
        reservation = self._store.get(line_item_id)
        return copy.deepcopy(reservation) if reservation is not None else None

    def save(self, reservation: Reservation) -> Reservation:
        if reservation.id is None:
            reservation.id = self._next_id
            self._next_id += 1
        self._store[reservation.line_item_id] = copy.deepcopy(reservation)
        return reservation


class FakeBackorderRepository(BackorderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Backorder] = {}
        self._next_id = 1

    def get(self, backorder_id: int) -> Backorder | None:
        backorder = self._store.get(backorder_id)
        return copy.deepcopy(backorder) if backorder is not None else None

    def find(self, line_item_id: str, variant_id: str) -> Backorder | None:
        for b in self._store.values():
            if b.line_item_id == line_item_id and b.variant_id == variant_id:
                return copy.deepcopy(b)
        return None

    def list(self, criteria: BackorderFilter) -> list[Backorder]:
        matches = [copy.deepcopy(b) for b in self._store.values() if criteria.matches(b)]
        return sorted(matches, key=lambda b: (-b.priority, b.demand_created_at, b.id))

    def save(self, backorder: Backorder) -> Backorder:
        if backorder.id is None:
            backorder.id = self._next_id
            self._next_id += 1
        self._store[backorder.id] = copy.deepcopy(backorder)
        return backorder


class FakeUnitOfWork(UnitOfWork):
    """Snapshots every repository on begin and restores it on rollback.

    ``conflicts`` makes the first N commits fail with ConcurrencyConflict,
    as a database would when another writer got there first.
    """

    def __init__(self, conflicts: int = 0, max_attempts: int = 3) -> None:
        super().__init__()
        self.variants = FakeVariantRepository()
        self.inventory = FakeInventoryRepository()
        self.movements = FakeMovementRepository()
        self.transfers = FakeTransferRepository()
        self.reservations = FakeReservationRepository()
        self.backorders = FakeBackorderRepository()
        self.max_attempts = max_attempts
        self.conflicts = conflicts
        self.commits = 0
        self.rollbacks = 0
        self._snapshot: dict | None = None

    def _repositories(self) -> dict:
        return {
            "variants": self.variants,
            "inventory": self.inventory,
            "movements": self.movements,
            "transfers": self.transfers,
            "reservations": self.reservations,
            "backorders": self.backorders,
        }

    def _begin(self) -> None:
        self._snapshot = {
            name: copy.deepcopy(repo.__dict__) for name, repo in self._repositories().items()
        }

    def _commit(self) -> None:
        if self.conflicts > 0:
            self.conflicts -= 1
            raise ConcurrencyConflict("Simulated concurrent write")
        self.commits += 1

    def _rollback(self) -> None:
        self.rollbacks += 1
        for name, repo in self._repositories().items():
            repo.__dict__.clear()
            repo.__dict__.update(self._snapshot[name])

    def _end(self) -> None:
        self._snapshot = None
