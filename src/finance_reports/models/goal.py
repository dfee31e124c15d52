"""Savings goal model.

Progress, projected completion and remaining days are always derived
from the stored amounts and dates; nothing derived is stored.
"""

import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from finance_reports.errors import ValidationError
from finance_reports.utils.date_utils import add_months

URGENT_DAYS = 30


class GoalStatus(Enum):
    """Lifecycle state of a goal."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class GoalProgress:
    """Derived progress figures."""

    percentage: Decimal
    current: Decimal
    target: Decimal
    remaining: Decimal
    is_completed: bool


@dataclass(frozen=True)
class CompletionEstimate:
    """Projected completion from the monthly contribution."""

    date: date
    months_needed: int
    is_on_track: bool


@dataclass(frozen=True)
class Goal:
    """A savings goal.

    Attributes:
        name: Goal name (at least 3 characters).
        target_amount: Amount to reach, strictly positive.
        current_amount: Amount saved so far, non-negative.
        monthly_contribution: Expected monthly saving, if known.
        deadline: Target date, if any.
        status: Lifecycle state.
        id: Optional identifier.
    """

    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    monthly_contribution: Optional[Decimal] = None
    deadline: Optional[date] = None
    status: GoalStatus = GoalStatus.ACTIVE
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or len(self.name.strip()) < 3:
            raise ValidationError("Goal name must have at least 3 characters")
        if self.target_amount <= 0:
            raise ValidationError("Target amount must be greater than zero")
        if self.current_amount < 0:
            raise ValidationError("Current amount cannot be negative")
        if self.monthly_contribution is not None and self.monthly_contribution < 0:
            raise ValidationError("Monthly contribution cannot be negative")

    @classmethod
    def create(
        cls,
        name: str,
        target_amount: Decimal,
        current_amount: Decimal = Decimal("0"),
        monthly_contribution: Optional[Decimal] = None,
        deadline: Optional[date] = None,
        today: Optional[date] = None,
    ) -> "Goal":
        """Create a new active goal.

        Unlike plain construction (used when loading existing goals),
        a new goal's deadline must be strictly in the future.

        Raises:
            ValidationError: If any field is invalid.
        """
        today = today or date.today()
        if deadline is not None and deadline <= today:
            raise ValidationError("Deadline must be a future date")

        return cls(
            name=name,
            target_amount=target_amount,
            current_amount=current_amount,
            monthly_contribution=monthly_contribution,
            deadline=deadline,
        )

    def progress(self) -> GoalProgress:
        ratio = self.current_amount / self.target_amount * 100
        return GoalProgress(
            percentage=min(ratio, Decimal("100")).quantize(Decimal("0.01")),
            current=self.current_amount,
            target=self.target_amount,
            remaining=max(self.target_amount - self.current_amount, Decimal("0")),
            is_completed=ratio >= 100,
        )

    def estimate_completion(self, today: Optional[date] = None) -> Optional[CompletionEstimate]:
        """Project when the goal will be reached.

        Returns:
            None without a positive monthly contribution.
        """
        if not self.monthly_contribution or self.monthly_contribution <= 0:
            return None

        today = today or date.today()
        remaining = self.target_amount - self.current_amount
        if remaining <= 0:
            return CompletionEstimate(date=today, months_needed=0, is_on_track=True)

        months_needed = math.ceil(remaining / self.monthly_contribution)
        estimated = add_months(today, months_needed)
        return CompletionEstimate(
            date=estimated,
            months_needed=months_needed,
            is_on_track=self.deadline is None or estimated <= self.deadline,
        )

    def days_remaining(self, today: Optional[date] = None) -> Optional[int]:
        """Days until the deadline (negative when overdue), or None."""
        if self.deadline is None:
            return None
        return (self.deadline - (today or date.today())).days

    def is_overdue(self, today: Optional[date] = None) -> bool:
        days = self.days_remaining(today)
        return days is not None and days < 0

    def is_urgent(self, today: Optional[date] = None) -> bool:
        days = self.days_remaining(today)
        return days is not None and 0 < days <= URGENT_DAYS

    def is_complete(self) -> bool:
        return self.status is GoalStatus.COMPLETED or self.progress().is_completed

    def is_on_track(self, today: Optional[date] = None) -> bool:
        estimate = self.estimate_completion(today)
        return estimate is None or estimate.is_on_track
