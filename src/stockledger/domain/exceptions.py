"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Stock errors carry the figures that caused them so callers can react without
parsing the message.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated by the caller's input."""


class NotFound(DomainException):
    """A requested entity (variant, lot, line item, backorder) does not exist."""


class InsufficientStock(DomainException):
    """An outbound quantity exceeds what is available."""

    def __init__(self, variant_id: str, warehouse, requested: int, available: int) -> None:
        self.variant_id = variant_id
        self.warehouse = warehouse
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for variant '{variant_id}' in {_name(warehouse)} "
            f"(need {requested}, have {available} available)"
        )


class InsufficientReservation(DomainException):
    """A ship or release exceeds what is currently reserved."""

    def __init__(self, subject: str, requested: int, reserved: int) -> None:
        self.subject = subject
        self.requested = requested
        self.reserved = reserved
        super().__init__(
            f"Cannot consume {requested} of {subject} "
            f"- only {reserved} currently reserved"
        )


class InvalidTransfer(DomainException):
    """Source and target of a transfer are the same (variant, warehouse)."""


class ConcurrencyConflict(DomainException):
    """The store aborted the transaction because of a concurrent write.

    Callers should retry the whole operation, never resume it.
    """


class InvariantViolation(DomainException):
    """Persisted state contradicts the ledger. Fatal to the transaction."""


def _name(warehouse) -> str:
    return getattr(warehouse, "value", str(warehouse))
