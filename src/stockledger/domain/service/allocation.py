"""Allocation engine: shares scarce stock between competing demand lines.

Three interchangeable strategies:

  PROPORTIONAL  every line gets the same share of its request, rounded down,
                with leftover units going to the largest fractional
                remainders (largest-remainder method)
  PRIORITY      highest priority first, oldest first among equals; each
                line is filled completely before the next one is looked at
  FCFS          oldest first, priority ignored; greedy like PRIORITY

Whatever the strategy, the total allocated never exceeds the stock and no
line receives more than it asked for. When stock covers all demand every
line is filled.

The functions here are pure; committing a plan is the job of
``AllocationService``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from stockledger.domain.exceptions import NotFound, ValidationError
from stockledger.domain.model.demand import DemandLine
from stockledger.domain.model.enums import AllocationStrategy, Warehouse


@dataclass
class AllocationLine:
    """One demand line and what the plan gives it."""

    line_item_id: str
    requested_quantity: int
    allocated_quantity: int
    priority: int
    demand: DemandLine

    @property
    def shortage_quantity(self) -> int:
        return self.requested_quantity - self.allocated_quantity

    @property
    def fulfillment_rate(self) -> float:
        return self.allocated_quantity / self.requested_quantity

    @property
    def is_fully_allocated(self) -> bool:
        return self.allocated_quantity == self.requested_quantity


@dataclass(frozen=True)
class AllocationStats:

    total_requested: int
    total_allocated: int
    total_shortage: int
    fully_fulfilled: int
    partially_fulfilled: int
    not_fulfilled: int

    @property
    def overall_fulfillment_rate(self) -> float:
        if self.total_requested == 0:
            return 0.0
        return self.total_allocated / self.total_requested

    @staticmethod
    def of(lines: list[AllocationLine]) -> AllocationStats:
        return AllocationStats(
            total_requested=sum(line.requested_quantity for line in lines),
            total_allocated=sum(line.allocated_quantity for line in lines),
            total_shortage=sum(line.shortage_quantity for line in lines),
            fully_fulfilled=sum(1 for line in lines if line.is_fully_allocated),
            partially_fulfilled=sum(
                1 for line in lines
                if 0 < line.allocated_quantity < line.requested_quantity
            ),
            not_fulfilled=sum(1 for line in lines if line.allocated_quantity == 0),
        )


@dataclass
class AllocationPlan:
    """The outcome of one strategy run, open to manual edits until executed."""

    variant_id: str
    warehouse: Warehouse
    available_stock: int
    strategy: AllocationStrategy
    lines: list[AllocationLine]

    @property
    def stats(self) -> AllocationStats:
        return AllocationStats.of(self.lines)

    @property
    def unallocated_stock(self) -> int:
        """Stock left over; negative if manual edits over-commit."""
        return self.available_stock - self.stats.total_allocated

    def line(self, line_item_id: str) -> AllocationLine:
        for line in self.lines:
            if line.line_item_id == line_item_id:
                return line
        raise NotFound(f"Line item '{line_item_id}' is not part of this plan")

    def override(self, line_item_id: str, allocated_quantity: int) -> AllocationLine:
        """Set one line's allocation by hand.

        The value is clamped to ``[0, requested]``. Other lines are left as
        they are: the strategy is not re-run.
        """
        line = self.line(line_item_id)
        line.allocated_quantity = max(0, min(allocated_quantity, line.requested_quantity))
        return line


def allocate(
    available_stock: int,
    demand: list[DemandLine],
    strategy: AllocationStrategy = AllocationStrategy.PROPORTIONAL,
) -> list[AllocationLine]:
    """Run one strategy. Lines come back in the order they were given."""
    if available_stock < 0:
        raise ValidationError("Available stock cannot be negative")
    ids = [d.line_item_id for d in demand]
    if len(set(ids)) != len(ids):
        raise ValidationError("Demand contains the same line item more than once")

    quantities = _STRATEGIES[strategy](available_stock, demand)
    return [
        AllocationLine(
            line_item_id=d.line_item_id,
            requested_quantity=d.requested_quantity,
            allocated_quantity=qty,
            priority=d.priority,
            demand=d,
        )
        for d, qty in zip(demand, quantities)
    ]


def _proportional(stock: int, demand: list[DemandLine]) -> list[int]:
    total = sum(d.requested_quantity for d in demand)
    if stock >= total:
        return [d.requested_quantity for d in demand]

    # Integer arithmetic: floor(requested * stock / total) and its remainder
    shares = [divmod(d.requested_quantity * stock, total) for d in demand]
    allocated = [share for share, _ in shares]
    leftover = stock - sum(allocated)

    by_remainder = sorted(
        range(len(demand)),
        key=lambda i: (-shares[i][1], -demand[i].priority, demand[i].created_at, i),
    )
    for i in by_remainder[:leftover]:
        allocated[i] += 1
    return allocated


def _greedy(order_key: Callable[[DemandLine], tuple]):
    def run(stock: int, demand: list[DemandLine]) -> list[int]:
        allocated = [0] * len(demand)
        remaining = stock
        for i in sorted(range(len(demand)), key=lambda i: (order_key(demand[i]), i)):
            take = min(demand[i].requested_quantity, remaining)
            allocated[i] = take
            remaining -= take
        return allocated

    return run


_STRATEGIES = {
    AllocationStrategy.PROPORTIONAL: _proportional,
    AllocationStrategy.PRIORITY: _greedy(lambda d: (-d.priority, d.created_at)),
    AllocationStrategy.FCFS: _greedy(lambda d: (d.created_at,)),
}
