"""Date-range and type filtering over a ledger view."""

from typing import Iterable

from finance_reports.models.export import TransactionFilters
from finance_reports.models.transaction import Transaction
from finance_reports.utils.date_utils import is_date_in_range


def matches_filters(txn: Transaction, filters: TransactionFilters) -> bool:
    """Check one transaction against the filters.

    Args:
        txn: Transaction to check.
        filters: Inclusive date bounds and optional exact type.

    Returns:
        True if the transaction passes every filter present.
    """
    if not is_date_in_range(txn.date, filters.start_date, filters.end_date):
        return False
    if filters.type is not None and txn.type is not filters.type:
        return False
    return True


def filter_transactions(
    ledger: Iterable[Transaction],
    filters: TransactionFilters,
) -> list[Transaction]:
    """Apply filters to a ledger, preserving input order.

    The source ledger is never modified; an empty ledger yields an empty list.

    Args:
        ledger: Transactions to filter.
        filters: Filters to apply.

    Returns:
        New list of matching transactions.
    """
    return [txn for txn in ledger if matches_filters(txn, filters)]
