"""Abstract repository for StockTransfer records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.transfer import StockTransfer


class TransferRepository(ABC):

    @abstractmethod
    def add(self, transfer: StockTransfer) -> StockTransfer:
        """Insert a transfer and return it with its ID assigned."""

    @abstractmethod
    def get(self, transfer_id: int) -> StockTransfer | None:
        """Return a transfer by ID, or None."""

    @abstractmethod
    def last_number(self) -> str | None:
        """The highest transfer number issued so far."""

    @abstractmethod
    def list(self, limit: int = 50, offset: int = 0) -> list[StockTransfer]:
        """Return transfers, newest first."""
