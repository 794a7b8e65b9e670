"""Recurring rule domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal

from billwise.database.base import Database
from billwise.domain.entities import RecurringFrequency, RecurringRule
from billwise.domain.errors import NotFoundError, ValidationError, rule_not_found
from billwise.utils.merchant import normalize_merchant_pattern

logger = logging.getLogger(__name__)


class RecurringRuleService:
    """Service for managing confirmed recurring rules."""

    def __init__(self, db: Database):
        """Initialize recurring rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_rule(
        self,
        merchant_pattern: str,
        expected_amount: Decimal,
        frequency: RecurringFrequency,
        category_id: Optional[int] = None,
        amount_variance: float = 0.1,
        day_of_period: Optional[int] = None,
        next_expected: Optional[date] = None,
        is_user_confirmed: bool = True,
    ) -> int:
        """Create a recurring rule from manual entry.

        Args:
            merchant_pattern: Merchant name or pattern (normalized before saving)
            expected_amount: Expected amount per occurrence
            frequency: Recurrence frequency
            category_id: Optional category ID
            amount_variance: Tolerated relative amount variance
            day_of_period: Optional day of week (1-7) or month (1-31)
            next_expected: Optional next due date
            is_user_confirmed: Whether the user entered or confirmed the rule

        Returns:
            Rule ID

        Raises:
            ValidationError: If the pattern is blank or the amount is not positive
        """
        pattern = normalize_merchant_pattern(merchant_pattern)
        if not pattern:
            raise ValidationError("Merchant pattern cannot be empty")
        if expected_amount <= 0:
            raise ValidationError("Expected amount must be positive")
        if day_of_period is not None:
            max_day = 7 if frequency == RecurringFrequency.WEEKLY else 31
            if not 1 <= day_of_period <= max_day:
                raise ValidationError(
                    f"Day of period must be between 1 and {max_day} for {frequency.value} rules"
                )

        rule_id = self.db.create_rule(
            merchant_pattern=pattern,
            expected_amount=expected_amount,
            frequency=frequency,
            category_id=category_id,
            amount_variance=amount_variance,
            day_of_period=day_of_period,
            next_expected=next_expected,
            is_user_confirmed=is_user_confirmed,
        )
        logger.info("Created %s rule %d for %s", frequency.value, rule_id, pattern)
        return rule_id

    def get_rule(self, rule_id: int) -> Optional[RecurringRule]:
        """Get rule by ID.

        Args:
            rule_id: Rule ID

        Returns:
            RecurringRule entity or None if not found
        """
        return self.db.get_rule(rule_id)

    def list_active_rules(self) -> list[RecurringRule]:
        """List all active rules."""
        return self.db.list_active_rules()

    def find_by_merchant_pattern(self, merchant_pattern: str) -> Optional[RecurringRule]:
        """Find an active rule covering a merchant.

        Args:
            merchant_pattern: Merchant name or pattern

        Returns:
            Matching RecurringRule or None
        """
        pattern = normalize_merchant_pattern(merchant_pattern)
        if not pattern:
            return None
        return self.db.find_rule_by_merchant_pattern(pattern)

    def record_occurrence(self, rule_id: int, occurred_on: date, next_date: date) -> None:
        """Record a payment against a rule and move its next due date.

        Raises:
            NotFoundError: If the rule doesn't exist
        """
        if self.db.get_rule(rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))
        self.db.record_rule_occurrence(rule_id, occurred_on, next_date)
        logger.info("Rule %d paid on %s, next due %s", rule_id, occurred_on, next_date)

    def deactivate_rule(self, rule_id: int) -> None:
        """Deactivate a rule so it stops producing bills.

        Raises:
            NotFoundError: If the rule doesn't exist
        """
        if self.db.get_rule(rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))
        self.db.deactivate_rule(rule_id)
        logger.info("Deactivated rule %d", rule_id)
