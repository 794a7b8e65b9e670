"""Budget status calculation."""

from datetime import date
from decimal import Decimal
from typing import Optional

from billwise.database.base import Database
from billwise.domain.entities import BudgetAlertLevel, BudgetStatus, TransactionType

WARNING_THRESHOLD = 75.0
EXCEEDED_THRESHOLD = 100.0


def alert_level_for(percentage_used: float) -> BudgetAlertLevel:
    """Map a percentage of budget used to an alert level."""
    if percentage_used >= EXCEEDED_THRESHOLD:
        return BudgetAlertLevel.EXCEEDED
    if percentage_used >= WARNING_THRESHOLD:
        return BudgetAlertLevel.WARNING
    return BudgetAlertLevel.NORMAL


def calculate_budget_status(
    spent: Decimal,
    budget_amount: Decimal,
    period_start: date,
    period_end: Optional[date] = None,
    today: Optional[date] = None,
) -> BudgetStatus:
    """Compute spend against a budget and project the period total.

    The projection extends the daily average over the days left in the
    period. Open-ended periods (no ``period_end``) have no remaining days
    and project only what has been spent.

    Args:
        spent: Amount spent so far in the period
        budget_amount: Budget for the period
        period_start: First day of the period
        period_end: Last day of the period, if known
        today: Reference date (defaults to today)

    Returns:
        BudgetStatus
    """
    if today is None:
        today = date.today()
    spent = Decimal(spent)
    budget_amount = Decimal(budget_amount)

    days_elapsed = max(1, (today - period_start).days)
    daily_average = spent / days_elapsed

    days_remaining: Optional[int] = None
    projected_total = spent
    if period_end is not None:
        days_remaining = max(0, (period_end - today).days)
        projected_total = spent + daily_average * days_remaining

    if budget_amount > 0:
        percentage_used = float(spent / budget_amount * 100)
    else:
        percentage_used = 0.0

    return BudgetStatus(
        spent=spent,
        budget_amount=budget_amount,
        percentage_used=percentage_used,
        remaining=budget_amount - spent,
        daily_average=daily_average,
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        projected_total=projected_total,
        projected_over_budget=projected_total > budget_amount,
        alert_level=alert_level_for(percentage_used),
    )


class BudgetService:
    """Service for evaluating a budget against stored debits."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_spent(self, start_date: date, end_date: date) -> Decimal:
        """Total of debit transactions dated within the range."""
        transactions = self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            transaction_type=TransactionType.DEBIT,
        )
        return sum((txn.amount for txn in transactions), Decimal("0"))

    def get_status(
        self,
        budget_amount: Decimal,
        period_start: date,
        period_end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> BudgetStatus:
        """Compute budget status from debits between the period start and today."""
        if today is None:
            today = date.today()
        spend_until = today if period_end is None else min(today, period_end)
        spent = self.get_spent(period_start, spend_until)
        return calculate_budget_status(spent, budget_amount, period_start, period_end, today)
