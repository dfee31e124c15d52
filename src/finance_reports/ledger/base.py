"""Abstract ledger query interface."""

from abc import ABC, abstractmethod
from typing import Union, Mapping

from finance_reports.models.export import TransactionFilters
from finance_reports.models.transaction import Transaction

FilterInput = Union[TransactionFilters, Mapping[str, object], None]


class BaseLedger(ABC):
    """Source of a user's transactions.

    Subclasses must implement fetch(), returning transactions ascending by
    date, and raise NotFoundError for unknown users.
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def fetch(self, user_id: str, filters: FilterInput = None) -> list[Transaction]:
        """Return the user's transactions matching filters, ascending by date.

        Args:
            user_id: Ledger owner.
            filters: Optional date range and type filters.

        Returns:
            List of transactions.

        Raises:
            NotFoundError: If the user has no ledger.
        """
        pass
