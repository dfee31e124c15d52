"""Transaction data model for the ledger."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from finance_reports.utils.date_utils import parse_date
from finance_reports.utils.decimal_utils import parse_amount


class TransactionType(Enum):
    """Type of transaction."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def from_value(cls, value: "str | TransactionType | None") -> "TransactionType | None":
        """Look up a type by value, returning None if unrecognized."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Transaction:
    """A single ledger entry.

    Transactions are immutable inside the reporting pipeline.

    Attributes:
        id: Ledger identifier.
        date: Booking date.
        type: Income or expense.
        amount: Positive amount; the sign is carried by type.
        description: Free-text description.
        category: Category name.
    """

    id: str
    date: date
    type: TransactionType
    amount: Decimal
    description: str = ""
    category: str = "Uncategorized"

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"Transaction amount must be positive, got {self.amount}")

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Amount with expenses negative."""
        return self.amount if self.is_income else -self.amount

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Transaction":
        """Create a Transaction from a plain mapping (e.g. a CSV row).

        Args:
            data: Mapping with id, date, type, amount and optional
                description and category.

        Returns:
            Transaction instance.

        Raises:
            ValueError: If a required field is missing or invalid.
        """
        txn_type = TransactionType.from_value(data.get("type"))  # type: ignore[arg-type]
        if txn_type is None:
            raise ValueError(f"Invalid transaction type: {data.get('type')!r}")

        return cls(
            id=str(data["id"]),
            date=parse_date(data["date"]),  # type: ignore[arg-type]
            type=txn_type,
            amount=parse_amount(str(data["amount"])),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or "Uncategorized"),
        )

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, date={self.date}, "
            f"type={self.type.value}, amount={self.amount}, "
            f"category={self.category!r})"
        )
