"""In-memory ledger."""

from typing import Iterable, Optional

from finance_reports.errors import NotFoundError
from finance_reports.ledger.base import BaseLedger, FilterInput
from finance_reports.models.export import normalize_filters
from finance_reports.models.transaction import Transaction
from finance_reports.processing.filter_engine import filter_transactions


class InMemoryLedger(BaseLedger):
    """Ledger backed by a dict of user id to transactions."""

    def __init__(self, ledgers: Optional[dict[str, Iterable[Transaction]]] = None):
        self._ledgers: dict[str, tuple[Transaction, ...]] = {}
        for user_id, transactions in (ledgers or {}).items():
            self.add(user_id, transactions)

    def add(self, user_id: str, transactions: Iterable[Transaction]) -> None:
        """Register (or replace) a user's transactions."""
        self._ledgers[user_id] = tuple(sorted(transactions, key=lambda t: t.date))

    def fetch(self, user_id: str, filters: FilterInput = None) -> list[Transaction]:
        if user_id not in self._ledgers:
            raise NotFoundError(f"No ledger found for user '{user_id}'")
        return filter_transactions(self._ledgers[user_id], normalize_filters(filters))
