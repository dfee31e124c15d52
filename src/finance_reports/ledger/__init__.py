"""Ledger query adapters."""

from finance_reports.ledger.base import BaseLedger
from finance_reports.ledger.csv_ledger import CSVLedger
from finance_reports.ledger.memory import InMemoryLedger

__all__ = ["BaseLedger", "CSVLedger", "InMemoryLedger"]
