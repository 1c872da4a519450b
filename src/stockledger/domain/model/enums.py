"""Enumerations shared across the domain."""

from __future__ import annotations

from enum import Enum


class Warehouse(Enum):
    """The two stock partitions, differing in who funded the goods."""

    COMPANY = "COMPANY"
    PRIVATE = "PRIVATE"


class MovementKind(Enum):
    ADJUSTMENT = "ADJUSTMENT"
    TRANSFER = "TRANSFER"
    SALE = "SALE"
    RECEIPT = "RECEIPT"
    RESERVATION = "RESERVATION"
    RELEASE = "RELEASE"


class ReferenceType(Enum):
    """Kind of business object that caused a movement."""

    ADJUSTMENT = "ADJUSTMENT"
    SALE = "SALE"
    TRANSFER = "TRANSFER"
    RECEIPT = "RECEIPT"
    RESERVATION = "RESERVATION"


class ReservationStatus(Enum):
    UNRESERVED = "UNRESERVED"
    RESERVED = "RESERVED"
    SHIPPED = "SHIPPED"
    CANCELLED = "CANCELLED"


class BackorderStatus(Enum):
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"


class AllocationStrategy(Enum):
    PROPORTIONAL = "PROPORTIONAL"
    PRIORITY = "PRIORITY"
    FCFS = "FCFS"
