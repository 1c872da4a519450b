"""Translate database failures into domain exceptions."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from stockledger.domain.exceptions import ConcurrencyConflict, InvariantViolation

# PostgreSQL: serialization_failure, deadlock_detected, unique_violation
_RETRYABLE_PGCODES = {"40001", "40P01"}
_UNIQUE_PGCODE = "23505"


@contextmanager
def translated_errors() -> Iterator[None]:
    """Raise ConcurrencyConflict for anything a retry could fix."""
    try:
        yield
    except StaleDataError as exc:
        raise ConcurrencyConflict(
            "Inventory was changed by another transaction"
        ) from exc
    except IntegrityError as exc:
        if _is_unique_violation(exc):
            raise ConcurrencyConflict(
                "A concurrent transaction inserted the same record"
            ) from exc
        raise InvariantViolation(f"Database constraint violated: {exc.orig}") from exc
    except OperationalError as exc:
        if _is_serialization_failure(exc):
            raise ConcurrencyConflict(
                "Transaction aborted by a concurrent write"
            ) from exc
        raise


def flush(session: Session) -> None:
    with translated_errors():
        session.flush()


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands datetimes back without tzinfo; everything is stored in UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _is_unique_violation(exc: IntegrityError) -> bool:
    if getattr(exc.orig, "pgcode", None) == _UNIQUE_PGCODE:
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


def _is_serialization_failure(exc: OperationalError) -> bool:
    if getattr(exc.orig, "pgcode", None) in _RETRYABLE_PGCODES:
        return True
    return "database is locked" in str(exc.orig)
