"""Pattern analysis strategies for the patterns report.

A strategy turns a filtered transaction sequence into an ordered list of
(signal, evidence) pairs. The aggregator bounds and returns the list; the
heuristics live here so they can be swapped per deployment.
"""

import calendar
import re
import statistics
from collections import defaultdict
from decimal import Decimal
from typing import Protocol, Sequence

from finance_reports.models.report import PatternSignal
from finance_reports.models.transaction import Transaction
from finance_reports.utils.decimal_utils import format_currency, percentage, sum_amounts

DEFAULT_LARGE_TRANSACTION_THRESHOLD = Decimal("1000.00")

MONTH_PHASES = (
    ("early", "Early month (days 1-10)", 1, 10),
    ("mid", "Mid month (days 11-20)", 11, 20),
    ("late", "Late month (days 21-31)", 21, 31),
)


class PatternStrategy(Protocol):
    """Anything that can derive pattern signals from transactions."""

    def analyze(self, transactions: Sequence[Transaction]) -> list[PatternSignal]:
        ...


def _normalize_description(description: str) -> str:
    return re.sub(r"\s+", " ", description.lower().strip())


class SpendingPatternStrategy:
    """Default behavioural analysis of income and spending.

    Signals, in this order when present:
    - busiest_expense_weekday: weekday with the highest expense total
    - most_frequent_category: category with the most transactions
    - average_expense_ticket / average_income_ticket: mean and median amount
    - month_phase_concentration: early/mid/late month share of spending
    - large_transactions: transactions at or above a threshold
    - recurring_expenses: descriptions repeated in two or more months
    - activity_density: transactions per active day

    Ties are always broken by a fixed secondary key so output is deterministic.
    """

    def __init__(
        self,
        large_transaction_threshold: Decimal = DEFAULT_LARGE_TRANSACTION_THRESHOLD,
        currency_symbol: str = "$",
    ):
        self.large_transaction_threshold = large_transaction_threshold
        self.currency_symbol = currency_symbol

    def analyze(self, transactions: Sequence[Transaction]) -> list[PatternSignal]:
        if not transactions:
            return []

        expenses = [t for t in transactions if t.is_expense]
        incomes = [t for t in transactions if t.is_income]

        candidates = [
            self._busiest_weekday(expenses),
            self._most_frequent_category(transactions),
            self._average_ticket("average_expense_ticket", "expense", expenses),
            self._average_ticket("average_income_ticket", "income", incomes),
            self._month_phase(expenses),
            self._large_transactions(transactions),
            self._recurring_expenses(expenses),
            self._activity_density(transactions),
        ]
        return [signal for signal in candidates if signal is not None]

    def _money(self, amount: Decimal) -> str:
        return format_currency(amount, self.currency_symbol)

    def _busiest_weekday(self, expenses: list[Transaction]) -> PatternSignal | None:
        if not expenses:
            return None

        totals: dict[int, Decimal] = defaultdict(Decimal)
        counts: dict[int, int] = defaultdict(int)
        for txn in expenses:
            weekday = txn.date.weekday()
            totals[weekday] += txn.amount
            counts[weekday] += 1

        weekday = min(totals, key=lambda d: (-totals[d], d))
        overall = sum_amounts(totals.values())
        return PatternSignal(
            signal="busiest_expense_weekday",
            evidence=(
                f"{calendar.day_name[weekday]}: {counts[weekday]} expenses totalling "
                f"{self._money(totals[weekday])} ({percentage(totals[weekday], overall)}% of spending)"
            ),
        )

    def _most_frequent_category(self, transactions: Sequence[Transaction]) -> PatternSignal | None:
        counts: dict[str, int] = defaultdict(int)
        totals: dict[str, Decimal] = defaultdict(Decimal)
        for txn in transactions:
            counts[txn.category] += 1
            totals[txn.category] += txn.amount

        category = min(counts, key=lambda c: (-counts[c], c))
        share = percentage(Decimal(counts[category]), Decimal(len(transactions)))
        return PatternSignal(
            signal="most_frequent_category",
            evidence=(
                f"{category}: {counts[category]} of {len(transactions)} transactions ({share}%), "
                f"average ticket {self._money(totals[category] / counts[category])}"
            ),
        )

    def _average_ticket(
        self, signal: str, label: str, transactions: list[Transaction]
    ) -> PatternSignal | None:
        if not transactions:
            return None

        amounts = [t.amount for t in transactions]
        average = sum_amounts(amounts) / len(amounts)
        median = statistics.median(amounts)
        return PatternSignal(
            signal=signal,
            evidence=(
                f"Average {label} {self._money(average)}, median {self._money(median)}, "
                f"range {self._money(min(amounts))}-{self._money(max(amounts))} "
                f"across {len(amounts)} {label}s"
            ),
        )

    def _month_phase(self, expenses: list[Transaction]) -> PatternSignal | None:
        if not expenses:
            return None

        totals = {key: Decimal("0") for key, _, _, _ in MONTH_PHASES}
        for txn in expenses:
            for key, _, first, last in MONTH_PHASES:
                if first <= txn.date.day <= last:
                    totals[key] += txn.amount
                    break

        order = [key for key, _, _, _ in MONTH_PHASES]
        busiest = min(order, key=lambda k: (-totals[k], order.index(k)))
        label = next(name for key, name, _, _ in MONTH_PHASES if key == busiest)
        overall = sum_amounts(totals.values())
        return PatternSignal(
            signal="month_phase_concentration",
            evidence=(
                f"{label}: {self._money(totals[busiest])} of {self._money(overall)} spent "
                f"({percentage(totals[busiest], overall)}%)"
            ),
        )

    def _large_transactions(self, transactions: Sequence[Transaction]) -> PatternSignal | None:
        large = [t for t in transactions if t.amount >= self.large_transaction_threshold]
        if not large:
            return None

        largest = max(large, key=lambda t: (t.amount, t.date))
        return PatternSignal(
            signal="large_transactions",
            evidence=(
                f"{len(large)} transactions at or above "
                f"{self._money(self.large_transaction_threshold)}, largest "
                f"{self._money(largest.amount)} ({largest.description or largest.category})"
            ),
        )

    def _recurring_expenses(self, expenses: list[Transaction]) -> PatternSignal | None:
        months_by_description: dict[str, set[tuple[int, int]]] = defaultdict(set)
        display_names: dict[str, str] = {}
        for txn in expenses:
            key = _normalize_description(txn.description)
            if not key:
                continue
            months_by_description[key].add((txn.date.year, txn.date.month))
            display_names.setdefault(key, txn.description.strip())

        recurring = sorted(k for k, months in months_by_description.items() if len(months) >= 2)
        if not recurring:
            return None

        names = ", ".join(display_names[k] for k in recurring[:5])
        more = f" and {len(recurring) - 5} more" if len(recurring) > 5 else ""
        return PatternSignal(
            signal="recurring_expenses",
            evidence=f"{len(recurring)} expenses repeat across months: {names}{more}",
        )

    def _activity_density(self, transactions: Sequence[Transaction]) -> PatternSignal:
        active_days = len({t.date for t in transactions})
        per_day = (Decimal(len(transactions)) / active_days).quantize(Decimal("0.1"))
        return PatternSignal(
            signal="activity_density",
            evidence=(
                f"{len(transactions)} transactions over {active_days} active days "
                f"({per_day} per active day)"
            ),
        )
