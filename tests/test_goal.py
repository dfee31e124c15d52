"""Tests for the savings goal model."""

from datetime import date
from decimal import Decimal

import pytest

from finance_reports.errors import ValidationError
from finance_reports.models.goal import Goal, GoalStatus

TODAY = date(2026, 10, 19)


class TestGoalValidation:
    """Tests for goal field validation."""

    def test_create_valid(self) -> None:
        """Test a valid goal is active."""
        goal = Goal.create("Emergency fund", Decimal("5000"), deadline=date(2027, 6, 30), today=TODAY)

        assert goal.status is GoalStatus.ACTIVE
        assert goal.current_amount == 0

    @pytest.mark.parametrize("deadline", [TODAY, date(2026, 1, 1)])
    def test_deadline_must_be_future(self, deadline: date) -> None:
        """Test create rejects today or past deadlines."""
        with pytest.raises(ValidationError, match="future"):
            Goal.create("Holiday", Decimal("1000"), deadline=deadline, today=TODAY)

    def test_loaded_goal_may_have_past_deadline(self) -> None:
        """Test plain construction accepts an existing goal past its deadline."""
        goal = Goal("Holiday", Decimal("1000"), deadline=date(2026, 1, 1))

        assert goal.is_overdue(TODAY)

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"name": "TV", "target_amount": Decimal("100")}, "3 characters"),
            ({"name": "Car fund", "target_amount": Decimal("0")}, "greater than zero"),
            ({"name": "Car fund", "target_amount": Decimal("10"), "current_amount": Decimal("-1")}, "negative"),
            (
                {"name": "Car fund", "target_amount": Decimal("10"), "monthly_contribution": Decimal("-5")},
                "negative",
            ),
        ],
    )
    def test_invalid_fields(self, kwargs: dict, message: str) -> None:
        """Test invalid amounts and names raise ValidationError."""
        with pytest.raises(ValidationError, match=message):
            Goal(**kwargs)


class TestGoalProgress:
    """Tests for derived progress."""

    def test_partial_progress(self) -> None:
        """Test percentage and remaining amount."""
        progress = Goal("Laptop", Decimal("1200"), Decimal("300")).progress()

        assert progress.percentage == Decimal("25.00")
        assert progress.remaining == Decimal("900")
        assert not progress.is_completed

    def test_capped_at_100(self) -> None:
        """Test overshooting the target caps the percentage."""
        goal = Goal("Laptop", Decimal("1000"), Decimal("1500"))
        progress = goal.progress()

        assert progress.percentage == Decimal("100.00")
        assert progress.remaining == 0
        assert progress.is_completed
        assert goal.is_complete()


class TestCompletionEstimate:
    """Tests for projected completion."""

    def test_months_needed_rounds_up(self) -> None:
        """Test partial months count as a full month."""
        goal = Goal("Laptop", Decimal("1000"), Decimal("100"), Decimal("200"))
        estimate = goal.estimate_completion(TODAY)

        assert estimate.months_needed == 5
        assert estimate.date == date(2027, 3, 19)
        assert estimate.is_on_track

    def test_behind_schedule(self) -> None:
        """Test an estimate after the deadline is not on track."""
        goal = Goal(
            "Laptop", Decimal("1000"), Decimal("0"), Decimal("100"), deadline=date(2027, 1, 31)
        )

        assert not goal.estimate_completion(TODAY).is_on_track
        assert not goal.is_on_track(TODAY)

    def test_no_contribution(self) -> None:
        """Test no estimate without a monthly contribution."""
        assert Goal("Laptop", Decimal("1000")).estimate_completion(TODAY) is None

    def test_already_reached(self) -> None:
        """Test a reached goal needs zero months."""
        goal = Goal("Laptop", Decimal("1000"), Decimal("1000"), Decimal("50"))

        assert goal.estimate_completion(TODAY).months_needed == 0


class TestDeadlines:
    """Tests for deadline helpers."""

    def test_days_remaining(self) -> None:
        """Test days until the deadline."""
        goal = Goal("Trip", Decimal("500"), deadline=date(2026, 11, 1))

        assert goal.days_remaining(TODAY) == 13
        assert goal.is_urgent(TODAY)
        assert not goal.is_overdue(TODAY)

    def test_no_deadline(self) -> None:
        """Test helpers without a deadline."""
        goal = Goal("Trip", Decimal("500"))

        assert goal.days_remaining(TODAY) is None
        assert not goal.is_urgent(TODAY)
        assert not goal.is_overdue(TODAY)
