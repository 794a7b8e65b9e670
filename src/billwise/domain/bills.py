"""Upcoming bill aggregation service."""

import hashlib
import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from billwise.database.base import Database
from billwise.domain.entities import (
    BillGroup,
    BillGroupType,
    BillSource,
    BillStatus,
    BillSummary,
    CreditCard,
    MonthSummary,
    PatternSuggestion,
    PaymentStatus,
    RecurringFrequency,
    RecurringRule,
    SuggestionStatus,
    UpcomingBill,
)
from billwise.domain.errors import NotFoundError, rule_not_found, transaction_not_found
from billwise.domain.frequency import advance_by_frequency
from billwise.domain.rules import RecurringRuleService
from billwise.utils.date_parser import month_end, month_start, shift_month
from billwise.utils.merchant import patterns_overlap

logger = logging.getLogger(__name__)

SUMMARY_LOOKBACK_DAYS = 30
GROUPED_LOOKBACK_DAYS = 7
GROUPED_LOOKAHEAD_MONTHS = 2


def pattern_bill_id(merchant_pattern: str) -> str:
    """Stable bill ID for a suggestion, derived from its merchant pattern."""
    digest = hashlib.sha1(merchant_pattern.upper().encode("utf-8")).hexdigest()[:12]
    return f"PATTERN_{digest}"


def _sort_key(bill: UpcomingBill) -> tuple:
    return (bill.due_date, bill.source.precedence, bill.display_name, bill.source_id)


class BillAggregationService:
    """Service for merging rules, card dues and suggestions into one bill list.

    Bills are derived on every call and never stored. When a confirmed rule
    and a pending suggestion describe the same merchant, only the rule's
    bill is kept.
    """

    def __init__(self, db: Database):
        """Initialize bill aggregation service.

        Args:
            db: Database instance
        """
        self.db = db
        self.rules = RecurringRuleService(db)

    def get_upcoming_bills(
        self, start_date: date, end_date: date, today: Optional[date] = None
    ) -> list[UpcomingBill]:
        """Get bills due within a date range.

        Args:
            start_date: Start of range (inclusive)
            end_date: End of range (inclusive)
            today: Reference date for statuses (defaults to today)

        Returns:
            Bills sorted by due date, ties broken by source precedence
        """
        if today is None:
            today = date.today()

        rules = self.db.list_upcoming_rules(start_date, end_date)
        rule_patterns = [rule.merchant_pattern.upper() for rule in rules]

        bills = [self._bill_from_rule(rule, today) for rule in rules]

        for card in self.db.list_active_credit_cards():
            if card.previous_due <= 0 or card.previous_due_date is None:
                continue
            if start_date <= card.previous_due_date <= end_date:
                bills.append(self._bill_from_credit_card(card, today))

        for suggestion in self.db.list_suggestions(status=SuggestionStatus.PENDING):
            if not start_date <= suggestion.next_expected <= end_date:
                continue
            pattern = suggestion.merchant_pattern.upper()
            if any(patterns_overlap(pattern, rule_pattern) for rule_pattern in rule_patterns):
                logger.debug("Suggestion %d shadowed by a rule for %s", suggestion.id, pattern)
                continue
            bills.append(self._bill_from_suggestion(suggestion, today))

        bills.sort(key=_sort_key)
        return bills

    def get_bill_summary(self, today: Optional[date] = None) -> BillSummary:
        """Summarize this month's and next month's bills.

        Overdue and due-today bills always count against this month, even
        when their nominal due date falls in an earlier month.
        """
        if today is None:
            today = date.today()
        next_year, next_month = shift_month(today.year, today.month, 1)

        bills = self.get_upcoming_bills(
            today - timedelta(days=SUMMARY_LOOKBACK_DAYS),
            month_end(next_year, next_month),
            today,
        )

        this_total, this_count = Decimal("0"), 0
        next_total, next_count = Decimal("0"), 0
        overdue_count = 0
        due_today_count = 0
        for bill in bills:
            if bill.status == BillStatus.OVERDUE:
                overdue_count += 1
            elif bill.status == BillStatus.DUE_TODAY:
                due_today_count += 1

            due_month = (bill.due_date.year, bill.due_date.month)
            if bill.status in (BillStatus.OVERDUE, BillStatus.DUE_TODAY) or due_month == (
                today.year,
                today.month,
            ):
                this_total += bill.amount
                this_count += 1
            elif due_month == (next_year, next_month):
                next_total += bill.amount
                next_count += 1

        return BillSummary(
            this_month=MonthSummary(today.year, today.month, this_total, this_count),
            next_month=MonthSummary(next_year, next_month, next_total, next_count),
            overdue_count=overdue_count,
            due_today_count=due_today_count,
        )

    def get_grouped_bills(self, today: Optional[date] = None) -> list[BillGroup]:
        """Group bills from the past week through the next two months by urgency.

        Returns:
            Non-empty groups ordered by their sort order
        """
        if today is None:
            today = date.today()

        bills = self.get_upcoming_bills(
            today - timedelta(days=GROUPED_LOOKBACK_DAYS),
            today + relativedelta(months=GROUPED_LOOKAHEAD_MONTHS),
            today,
        )

        grouped: dict[BillGroupType, list[UpcomingBill]] = defaultdict(list)
        for bill in bills:
            if bill.status == BillStatus.PAID:
                continue
            group_type = BillGroupType.from_bill_status(bill.status)
            if bill.status == BillStatus.UPCOMING:
                same_month = (bill.due_date.year, bill.due_date.month) == (today.year, today.month)
                group_type = BillGroupType.LATER_THIS_MONTH if same_month else BillGroupType.NEXT_MONTH
            grouped[group_type].append(bill)

        return [
            BillGroup(type=group_type, bills=tuple(grouped[group_type]))
            for group_type in sorted(grouped, key=lambda g: g.sort_order)
        ]

    def get_bills_for_calendar(
        self, year: int, month: int, today: Optional[date] = None
    ) -> dict[date, list[UpcomingBill]]:
        """Get a month's bills keyed by due date."""
        bills = self.get_upcoming_bills(month_start(year, month), month_end(year, month), today)
        calendar: dict[date, list[UpcomingBill]] = {}
        for bill in bills:
            calendar.setdefault(bill.due_date, []).append(bill)
        return calendar

    def mark_bill_as_paid(
        self,
        bill: UpcomingBill,
        transaction_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> bool:
        """Settle a rule-sourced bill.

        One-time rules are deactivated. Repeating rules advance one period
        from ``today`` rather than from the original due date, so a late
        payment does not carry its lateness into the next cycle.

        Args:
            bill: Bill to settle
            transaction_id: Optional transaction that paid the bill
            today: Payment date (defaults to today)

        Returns:
            True if a rule was updated, False if the bill is not rule-sourced

        Raises:
            NotFoundError: If the bill's rule or the paying transaction does
                not exist. Nothing is changed in that case.
        """
        if bill.source != BillSource.RECURRING_RULE:
            logger.debug("Bill %s from %s cannot be marked paid", bill.id, bill.source.value)
            return False
        if today is None:
            today = date.today()

        rule = self.db.get_rule(bill.source_id)
        if rule is None:
            raise NotFoundError(rule_not_found(bill.source_id))
        if not rule.is_active:
            return False
        if transaction_id is not None and self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if rule.frequency == RecurringFrequency.ONE_TIME:
            self.rules.deactivate_rule(rule.id)
        else:
            next_date = advance_by_frequency(today, rule.frequency)
            self.rules.record_occurrence(rule.id, today, next_date)

        if transaction_id is not None:
            self.db.update_transaction_payment_status(transaction_id, PaymentStatus.PAID)
        return True

    def find_bill(self, bill_id: str, today: Optional[date] = None) -> Optional[UpcomingBill]:
        """Look up a bill by its ID in the grouped view's date window."""
        if today is None:
            today = date.today()
        bills = self.get_upcoming_bills(
            today - timedelta(days=SUMMARY_LOOKBACK_DAYS),
            today + relativedelta(months=GROUPED_LOOKAHEAD_MONTHS),
            today,
        )
        for bill in bills:
            if bill.id == bill_id:
                return bill
        return None

    def _bill_from_rule(self, rule: RecurringRule, today: date) -> UpcomingBill:
        return UpcomingBill(
            id=UpcomingBill.generate_bill_id(BillSource.RECURRING_RULE, rule.id),
            source=BillSource.RECURRING_RULE,
            merchant_name=rule.merchant_pattern,
            display_name=rule.merchant_pattern.title(),
            amount=rule.expected_amount,
            amount_variance=rule.amount_variance,
            due_date=rule.next_expected,
            frequency=rule.frequency,
            category_id=rule.category_id,
            status=BillStatus.calculate_status(rule.next_expected, False, today),
            is_user_confirmed=rule.is_user_confirmed,
            confidence=1.0,
            source_id=rule.id,
        )

    def _bill_from_credit_card(self, card: CreditCard, today: date) -> UpcomingBill:
        return UpcomingBill(
            id=UpcomingBill.generate_bill_id(BillSource.CREDIT_CARD, card.id),
            source=BillSource.CREDIT_CARD,
            merchant_name=card.bank_name,
            display_name=f"{card.bank_name} Credit Card",
            amount=card.previous_due,
            due_date=card.previous_due_date,
            status=BillStatus.calculate_status(card.previous_due_date, False, today),
            is_user_confirmed=True,
            confidence=1.0,
            credit_card_last_four=card.last_four_digits,
            source_id=card.id,
        )

    def _bill_from_suggestion(self, suggestion: PatternSuggestion, today: date) -> UpcomingBill:
        return UpcomingBill(
            id=pattern_bill_id(suggestion.merchant_pattern),
            source=BillSource.PATTERN_SUGGESTION,
            merchant_name=suggestion.merchant_pattern,
            display_name=suggestion.display_name,
            amount=suggestion.average_amount,
            amount_variance=suggestion.amount_variance,
            due_date=suggestion.next_expected,
            frequency=suggestion.frequency,
            category_id=suggestion.category_id,
            status=BillStatus.calculate_status(suggestion.next_expected, False, today),
            is_user_confirmed=False,
            confidence=suggestion.confidence,
            source_id=suggestion.id,
        )
