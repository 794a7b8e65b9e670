"""Recurring expense predictions and subscription health checks."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from billwise.database.base import Database
from billwise.domain.entities import (
    DormantStatus,
    DormantSubscription,
    NewSubscription,
    PredictedExpense,
    PredictionSource,
    RecurringFrequency,
    RecurringHealthSummary,
    RecurringRule,
    SuggestionStatus,
    Transaction,
    TransactionType,
)
from billwise.domain.frequency import advance_by_frequency, average_amount, classify_occurrences
from billwise.domain.pattern_detection import PatternDetectionService
from billwise.utils.merchant import normalize_merchant_pattern, patterns_overlap

logger = logging.getLogger(__name__)

ANALYSIS_MONTHS = 6
NEW_SUBSCRIPTION_WINDOW_MONTHS = 2
DORMANT_THRESHOLD_MISSED_PAYMENTS = 2
MISSED_PAYMENT_GRACE_DAYS = 5

RULE_PREDICTION_CONFIDENCE = 0.95
UNCLASSIFIED_SUBSCRIPTION_CONFIDENCE = 0.6

# Nominal days between payments when counting missed ones
EXPECTED_INTERVAL_DAYS = {
    RecurringFrequency.WEEKLY: 7,
    RecurringFrequency.MONTHLY: 30,
    RecurringFrequency.YEARLY: 365,
}


def count_missed_payments(last_date: date, frequency: RecurringFrequency, today: date) -> int:
    """Whole payment intervals elapsed since ``last_date``, after a grace period."""
    interval = EXPECTED_INTERVAL_DAYS.get(frequency)
    if interval is None:
        return 0
    adjusted_days = max(0, (today - last_date).days - MISSED_PAYMENT_GRACE_DAYS)
    return adjusted_days // interval


class RecurringPredictionService:
    """Service for forecasting recurring expenses and spotting changes in them."""

    def __init__(self, db: Database, detector: Optional[PatternDetectionService] = None):
        """Initialize recurring prediction service.

        Args:
            db: Database instance
            detector: Pattern detector (defaults to one built on the same database)
        """
        self.db = db
        self.detector = detector or PatternDetectionService(db)

    def predict_next_month_expenses(self, today: Optional[date] = None) -> list[PredictedExpense]:
        """Predict the expenses due next calendar month.

        Confirmed rules are combined with detected patterns and pending
        suggestions. A pattern is left out when an active rule already
        covers its merchant.

        Args:
            today: Reference date (defaults to today)

        Returns:
            Predicted expenses sorted by expected date
        """
        if today is None:
            today = date.today()
        next_month = today + relativedelta(months=1)

        def in_next_month(day: Optional[date]) -> bool:
            return day is not None and (day.year, day.month) == (next_month.year, next_month.month)

        active_rules = self.db.list_active_rules()
        predictions = [
            PredictedExpense(
                merchant_name=rule.merchant_pattern,
                display_name=rule.merchant_pattern.title(),
                amount=rule.expected_amount,
                expected_date=rule.next_expected,
                frequency=rule.frequency,
                confidence=RULE_PREDICTION_CONFIDENCE,
                source=PredictionSource.CONFIRMED_RULE,
                category_id=rule.category_id,
            )
            for rule in active_rules
            if in_next_month(rule.next_expected)
        ]

        seen_patterns = {rule.merchant_pattern for rule in active_rules}
        # Candidates and pending suggestions share the fields used here
        patterns = list(self.detector.detect_patterns())
        patterns.extend(self.db.list_suggestions(status=SuggestionStatus.PENDING))
        for pattern in patterns:
            if any(patterns_overlap(pattern.merchant_pattern, seen) for seen in seen_patterns):
                continue
            seen_patterns.add(pattern.merchant_pattern)
            if not in_next_month(pattern.next_expected):
                continue
            predictions.append(
                PredictedExpense(
                    merchant_name=pattern.merchant_pattern,
                    display_name=pattern.display_name,
                    amount=pattern.average_amount,
                    expected_date=pattern.next_expected,
                    frequency=pattern.frequency,
                    confidence=pattern.confidence,
                    source=PredictionSource.DETECTED_PATTERN,
                    category_id=pattern.category_id,
                )
            )

        predictions.sort(key=lambda p: (p.expected_date, p.source != PredictionSource.CONFIRMED_RULE))
        return predictions

    def identify_new_subscriptions(self, today: Optional[date] = None) -> list[NewSubscription]:
        """Find recurring charges that started within the last two months.

        A merchant counts as new when it has at least two debits inside the
        window and none in the preceding months of the analysis period.

        Returns:
            New subscriptions, most confident first
        """
        if today is None:
            today = date.today()
        window_start = today - relativedelta(months=NEW_SUBSCRIPTION_WINDOW_MONTHS)
        history_start = today - relativedelta(months=ANALYSIS_MONTHS)

        transactions = self.db.list_transactions(
            start_date=history_start, end_date=today, transaction_type=TransactionType.DEBIT
        )
        groups = self.detector.group_by_merchant(transactions)

        subscriptions = []
        for merchant_pattern, group in groups.items():
            recent = [txn for txn in group if txn.date >= window_start]
            older = [txn for txn in group if txn.date < window_start]
            if len(recent) < 2 or older:
                continue

            dates = [txn.date for txn in recent]
            amounts = [txn.amount for txn in recent]
            classification = classify_occurrences(dates, amounts)
            if classification is not None:
                frequency = classification.frequency
                confidence = classification.confidence
            else:
                frequency = None
                confidence = UNCLASSIFIED_SUBSCRIPTION_CONFIDENCE

            subscriptions.append(
                NewSubscription(
                    merchant_name=merchant_pattern,
                    display_name=recent[0].merchant_name,
                    amount=average_amount(amounts),
                    first_seen_date=min(dates),
                    occurrence_count=len(recent),
                    detected_frequency=frequency,
                    confidence=confidence,
                )
            )

        subscriptions.sort(key=lambda s: s.confidence, reverse=True)
        return subscriptions

    def flag_dormant_subscriptions(self, today: Optional[date] = None) -> list[DormantSubscription]:
        """Flag active rules whose payments have stopped.

        One-time rules never recur and are not checked.

        Returns:
            Dormant subscriptions, most missed payments first
        """
        if today is None:
            today = date.today()
        transactions = self.db.list_transactions(
            end_date=today, transaction_type=TransactionType.DEBIT
        )

        dormant = []
        for rule in self.db.list_active_rules():
            if rule.frequency == RecurringFrequency.ONE_TIME:
                continue
            flagged = self._check_rule(rule, transactions, today)
            if flagged is not None:
                dormant.append(flagged)

        dormant.sort(key=lambda d: d.missed_payments, reverse=True)
        if dormant:
            logger.info("Flagged %d dormant subscription(s)", len(dormant))
        return dormant

    def _check_rule(
        self, rule: RecurringRule, transactions: list[Transaction], today: date
    ) -> Optional[DormantSubscription]:
        matching_dates = [
            txn.date
            for txn in transactions
            if txn.date is not None
            and patterns_overlap(normalize_merchant_pattern(txn.merchant_name), rule.merchant_pattern)
        ]

        if not matching_dates:
            start_date = rule.last_occurrence or rule.created_at.date()
            return DormantSubscription(
                merchant_name=rule.merchant_pattern,
                expected_amount=rule.expected_amount,
                last_transaction_date=start_date,
                missed_payments=count_missed_payments(start_date, rule.frequency, today),
                status=DormantStatus.INACTIVE,
            )

        last_date = max(matching_dates)
        if today <= advance_by_frequency(last_date, rule.frequency):
            return None

        missed = count_missed_payments(last_date, rule.frequency, today)
        if missed >= DORMANT_THRESHOLD_MISSED_PAYMENTS:
            status = DormantStatus.POSSIBLY_CANCELLED
        elif missed >= 1:
            status = DormantStatus.PAYMENT_ISSUE
        else:
            return None

        return DormantSubscription(
            merchant_name=rule.merchant_pattern,
            expected_amount=rule.expected_amount,
            last_transaction_date=last_date,
            missed_payments=missed,
            status=status,
        )

    def get_recurring_health_summary(self, today: Optional[date] = None) -> RecurringHealthSummary:
        """Aggregate predictions, new subscriptions and dormant ones."""
        if today is None:
            today = date.today()
        predictions = self.predict_next_month_expenses(today)
        new_subscriptions = self.identify_new_subscriptions(today)
        dormant = self.flag_dormant_subscriptions(today)

        def total(amounts) -> Decimal:
            return sum(amounts, Decimal("0"))

        return RecurringHealthSummary(
            next_month_predicted_total=total(p.amount for p in predictions),
            confirmed_recurring_total=total(
                p.amount for p in predictions if p.source == PredictionSource.CONFIRMED_RULE
            ),
            detected_pattern_total=total(
                p.amount for p in predictions if p.source == PredictionSource.DETECTED_PATTERN
            ),
            predicted_expense_count=len(predictions),
            new_subscription_count=len(new_subscriptions),
            dormant_subscription_count=len(dormant),
            potential_savings=total(
                d.expected_amount for d in dormant if d.status == DormantStatus.POSSIBLY_CANCELLED
            ),
        )
