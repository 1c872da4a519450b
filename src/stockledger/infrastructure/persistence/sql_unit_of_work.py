"""SQLAlchemy Unit of Work: one session per transaction."""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from stockledger.domain.repository.unit_of_work import DEFAULT_MAX_ATTEMPTS, UnitOfWork
from stockledger.infrastructure.persistence.errors import translated_errors
from stockledger.infrastructure.persistence.sql_backorder_repository import (
    SqlBackorderRepository,
)
from stockledger.infrastructure.persistence.sql_inventory_repository import (
    SqlInventoryRepository,
)
from stockledger.infrastructure.persistence.sql_movement_repository import (
    SqlMovementRepository,
)
from stockledger.infrastructure.persistence.sql_reservation_repository import (
    SqlReservationRepository,
)
from stockledger.infrastructure.persistence.sql_transfer_repository import (
    SqlTransferRepository,
)
from stockledger.infrastructure.persistence.sql_variant_repository import (
    SqlVariantRepository,
)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._session: Session | None = None
        self.max_attempts = max_attempts

    def _begin(self) -> None:
        session = self._session_factory()
        self._session = session
        self.variants = SqlVariantRepository(session)
        self.inventory = SqlInventoryRepository(session)
        self.movements = SqlMovementRepository(session)
        self.transfers = SqlTransferRepository(session)
        self.reservations = SqlReservationRepository(session)
        self.backorders = SqlBackorderRepository(session)

    def _commit(self) -> None:
        with translated_errors():
            self._session.commit()

    def _rollback(self) -> None:
        self._session.rollback()

    def _end(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
