"""CSV-file ledger: one <user_id>.csv per user."""

import csv
import re
from pathlib import Path

from finance_reports.errors import NotFoundError, ValidationError
from finance_reports.ledger.base import BaseLedger, FilterInput
from finance_reports.models.export import normalize_filters
from finance_reports.models.transaction import Transaction
from finance_reports.processing.filter_engine import filter_transactions
from finance_reports.utils.logging_config import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("id", "date", "type", "amount")

# User ids map straight to file names, so only allow a safe subset
_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")

# Maximum ledger file size (20 MB)
MAX_LEDGER_FILE_SIZE = 20 * 1024 * 1024


class CSVLedger(BaseLedger):
    """Reads ledgers from CSV files under a data directory.

    Expected header: id,date,type,amount,description,category
    Dates may be ISO (2026-01-15) or day-first (15/01/2026).
    Rows that fail to parse are skipped with a warning unless strict.
    """

    def __init__(self, data_dir: Path, strict: bool = False):
        """Initialize the ledger.

        Args:
            data_dir: Directory holding <user_id>.csv files.
            strict: Raise on the first malformed row instead of skipping it.
        """
        self.data_dir = Path(data_dir)
        self.strict = strict

    def path_for(self, user_id: str) -> Path:
        """Ledger file path for a user.

        Raises:
            ValidationError: If the user id contains unsafe characters.
        """
        if not user_id or not _USER_ID_PATTERN.match(user_id) or user_id.startswith("."):
            raise ValidationError(f"Invalid user id: {user_id!r}")
        return self.data_dir / f"{user_id}.csv"

    def fetch(self, user_id: str, filters: FilterInput = None) -> list[Transaction]:
        normalized = normalize_filters(filters)
        path = self.path_for(user_id)
        if not path.is_file():
            raise NotFoundError(f"No ledger found for user '{user_id}' ({path})")

        transactions = self._read(path)
        transactions.sort(key=lambda t: t.date)
        return filter_transactions(transactions, normalized)

    def _read(self, path: Path) -> list[Transaction]:
        if path.stat().st_size > MAX_LEDGER_FILE_SIZE:
            raise ValidationError(f"Ledger file too large: {path}")

        try:
            with open(path, newline="", encoding="utf-8") as f:
                transactions = self._parse(csv.DictReader(f), path)
        except UnicodeDecodeError as e:
            raise ValidationError(f"{path.name}: not valid UTF-8") from e

        logger.info(f"Loaded {len(transactions)} transactions from {path}")
        return transactions

    def _parse(self, reader: csv.DictReader, path: Path) -> list[Transaction]:
        header = [h.strip().lower() for h in (reader.fieldnames or [])]
        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if missing:
            raise ValidationError(
                f"Ledger {path.name} is missing columns: {', '.join(missing)}"
            )

        transactions: list[Transaction] = []
        for line_number, row in enumerate(reader, start=2):
            normalized_row = {
                k.strip().lower(): (v or "").strip()
                for k, v in row.items()
                if k is not None and not isinstance(v, list)
            }
            try:
                transactions.append(Transaction.from_dict(normalized_row))
            except (KeyError, ValueError) as e:
                if self.strict:
                    raise ValidationError(f"{path.name}:{line_number}: {e}") from e
                logger.warning(f"Skipping {path.name}:{line_number}: {e}")
        return transactions
