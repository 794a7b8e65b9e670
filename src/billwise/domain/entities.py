"""Domain model entities for billwise.

These are pure data classes representing business concepts, independent of
database schema. Persisted records (transactions, rules, suggestions, cards)
are converted from ORM rows by the mappers in ``billwise.database.mappers``;
bills, summaries and budget figures are derived on every query and never
stored.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of money movement."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    SAVINGS = "SAVINGS"


class PaymentStatus(str, Enum):
    """Settlement state of a transaction carrying a due date."""

    PAID = "PAID"
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    OVERDUE = "OVERDUE"


class RecurringFrequency(str, Enum):
    """How often a recurring expense repeats."""

    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    ONE_TIME = "ONE_TIME"


class SuggestionStatus(str, Enum):
    """Lifecycle state of a pattern suggestion."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DISMISSED = "DISMISSED"


class SuggestionSource(str, Enum):
    """Where a pattern suggestion came from."""

    SMS_SUBSCRIPTION = "SMS_SUBSCRIPTION"
    PATTERN_DETECTION = "PATTERN_DETECTION"


class BillSource(str, Enum):
    """Origin of an upcoming bill, listed in merge precedence order."""

    RECURRING_RULE = "RECURRING_RULE"
    CREDIT_CARD = "CREDIT_CARD"
    PATTERN_SUGGESTION = "PATTERN_SUGGESTION"

    @property
    def precedence(self) -> int:
        return list(BillSource).index(self)


class BillStatus(str, Enum):
    """Status of a bill relative to today, ordered by urgency."""

    OVERDUE = "OVERDUE"
    DUE_TODAY = "DUE_TODAY"
    DUE_TOMORROW = "DUE_TOMORROW"
    DUE_THIS_WEEK = "DUE_THIS_WEEK"
    UPCOMING = "UPCOMING"
    PAID = "PAID"

    @classmethod
    def calculate_status(
        cls, due_date: date, is_paid: bool, today: Optional[date] = None
    ) -> "BillStatus":
        """Classify a bill by calendar days between today and its due date.

        Bills due in 2 to 6 days are DUE_THIS_WEEK. Bills due in 7 or more days
        are UPCOMING, so a bill due 2024-03-22 is UPCOMING on 2024-03-15.

        Args:
            due_date: Date the bill is due
            is_paid: Whether the bill has been settled
            today: Reference date (defaults to the current date)

        Returns:
            The matching BillStatus
        """
        if is_paid:
            return cls.PAID

        if today is None:
            today = date.today()
        if isinstance(due_date, datetime):
            due_date = due_date.date()
        if isinstance(today, datetime):
            today = today.date()

        days_until_due = (due_date - today).days
        if days_until_due < 0:
            return cls.OVERDUE
        if days_until_due == 0:
            return cls.DUE_TODAY
        if days_until_due == 1:
            return cls.DUE_TOMORROW
        if days_until_due < 7:
            return cls.DUE_THIS_WEEK
        return cls.UPCOMING


class BillGroupType(Enum):
    """Time buckets used for the grouped bills view."""

    TODAY = ("Today", 0)
    TOMORROW = ("Tomorrow", 1)
    THIS_WEEK = ("This Week", 2)
    LATER_THIS_MONTH = ("Later This Month", 3)
    NEXT_MONTH = ("Next Month", 4)

    def __init__(self, display_label: str, sort_order: int):
        self.display_label = display_label
        self.sort_order = sort_order

    @classmethod
    def from_bill_status(cls, status: BillStatus) -> "BillGroupType":
        """Default bucket for a status; overdue bills sit with today's."""
        if status in (BillStatus.OVERDUE, BillStatus.DUE_TODAY):
            return cls.TODAY
        if status == BillStatus.DUE_TOMORROW:
            return cls.TOMORROW
        if status == BillStatus.DUE_THIS_WEEK:
            return cls.THIS_WEEK
        return cls.LATER_THIS_MONTH


class BudgetAlertLevel(str, Enum):
    """Alert threshold reached by a budget."""

    NORMAL = "NORMAL"
    WARNING = "WARNING"
    EXCEEDED = "EXCEEDED"


class DormantStatus(str, Enum):
    """Why a recurring rule looks dormant."""

    POSSIBLY_CANCELLED = "POSSIBLY_CANCELLED"
    PAYMENT_ISSUE = "PAYMENT_ISSUE"
    INACTIVE = "INACTIVE"


class PredictionSource(str, Enum):
    """Where a predicted expense came from."""

    CONFIRMED_RULE = "CONFIRMED_RULE"
    DETECTED_PATTERN = "DETECTED_PATTERN"


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``date`` is optional because upstream parsing can hand over records
    without a usable date; such records are ignored by pattern detection.
    """

    id: int
    amount: Decimal
    merchant_name: str
    date: Optional[date]
    type: TransactionType = TransactionType.DEBIT
    merchant_normalized: Optional[str] = None
    category_id: Optional[int] = None
    due_date: Optional[date] = None
    payment_status: Optional[PaymentStatus] = None


@dataclass(frozen=True)
class ParsedTransaction:
    """Structured transaction produced by the external SMS parser."""

    merchant_name: str
    amount: Decimal
    transaction_date: date
    is_likely_subscription: bool = False


@dataclass(frozen=True)
class CreditCard:
    """Credit card with its latest statement due."""

    id: int
    bank_name: str
    last_four_digits: str
    previous_due: Decimal
    previous_due_date: Optional[date]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class RecurringRule:
    """Confirmed recurring obligation used to generate upcoming bills."""

    id: int
    merchant_pattern: str
    expected_amount: Decimal
    frequency: RecurringFrequency
    created_at: datetime
    category_id: Optional[int] = None
    amount_variance: float = 0.1
    day_of_period: Optional[int] = None
    last_occurrence: Optional[date] = None
    next_expected: Optional[date] = None
    occurrence_count: int = 0
    is_active: bool = True
    is_user_confirmed: bool = False


@dataclass(frozen=True)
class PatternCandidate:
    """Recurring pattern inferred during one detection pass."""

    merchant_pattern: str
    display_name: str
    average_amount: Decimal
    amount_variance: float
    frequency: RecurringFrequency
    typical_day_of_period: int
    occurrence_count: int
    confidence: float
    next_expected: date
    category_id: Optional[int] = None
    amount_variance_flagged: bool = False


@dataclass(frozen=True)
class PatternSuggestion:
    """Persisted, not yet confirmed recurring pattern."""

    id: int
    merchant_pattern: str
    display_name: str
    average_amount: Decimal
    amount_variance: float
    frequency: RecurringFrequency
    typical_day_of_period: int
    occurrence_count: int
    confidence: float
    next_expected: date
    status: SuggestionStatus
    source: SuggestionSource
    created_at: datetime
    category_id: Optional[int] = None
    dismissed_at: Optional[datetime] = None

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence >= 0.8


@dataclass(frozen=True)
class UpcomingBill:
    """A due obligation from any source, as shown in the bills view."""

    id: str
    source: BillSource
    merchant_name: str
    display_name: str
    amount: Decimal
    due_date: date
    status: BillStatus
    source_id: int
    amount_variance: Optional[float] = None
    frequency: Optional[RecurringFrequency] = None
    category_id: Optional[int] = None
    is_paid: bool = False
    is_user_confirmed: bool = False
    confidence: float = 1.0
    credit_card_last_four: Optional[str] = None

    @staticmethod
    def generate_bill_id(source: BillSource, source_id: int) -> str:
        return f"{source.value}_{source_id}"


@dataclass(frozen=True)
class MonthSummary:
    """Bill totals for one calendar month."""

    year: int
    month: int
    total_amount: Decimal = Decimal("0")
    bill_count: int = 0

    @property
    def average_amount(self) -> Decimal:
        if self.bill_count == 0:
            return Decimal("0")
        return self.total_amount / self.bill_count

    @property
    def display_month(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")


@dataclass(frozen=True)
class BillSummary:
    """This-month and next-month bill totals."""

    this_month: MonthSummary
    next_month: MonthSummary
    overdue_count: int = 0
    due_today_count: int = 0

    @property
    def total_amount(self) -> Decimal:
        return self.this_month.total_amount + self.next_month.total_amount

    @property
    def total_bill_count(self) -> int:
        return self.this_month.bill_count + self.next_month.bill_count

    @property
    def has_urgent_bills(self) -> bool:
        return self.overdue_count > 0 or self.due_today_count > 0


@dataclass(frozen=True)
class BillGroup:
    """Bills that fall in the same time bucket."""

    type: BillGroupType
    bills: tuple[UpcomingBill, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        return self.type.display_label

    @property
    def total_amount(self) -> Decimal:
        return sum((bill.amount for bill in self.bills), Decimal("0"))

    @property
    def bill_count(self) -> int:
        return len(self.bills)

    @property
    def has_overdue_bills(self) -> bool:
        return any(bill.status == BillStatus.OVERDUE for bill in self.bills)


@dataclass(frozen=True)
class BudgetStatus:
    """Spend-to-date against a budget with a linear projection."""

    spent: Decimal
    budget_amount: Decimal
    percentage_used: float
    remaining: Decimal
    daily_average: Decimal
    days_elapsed: int
    days_remaining: Optional[int]
    projected_total: Decimal
    projected_over_budget: bool
    alert_level: BudgetAlertLevel


@dataclass(frozen=True)
class PredictedExpense:
    """Expense expected next month."""

    merchant_name: str
    display_name: str
    amount: Decimal
    expected_date: date
    frequency: RecurringFrequency
    confidence: float
    source: PredictionSource
    category_id: Optional[int] = None


@dataclass(frozen=True)
class NewSubscription:
    """Recurring charge that only started recently."""

    merchant_name: str
    display_name: str
    amount: Decimal
    first_seen_date: date
    occurrence_count: int
    detected_frequency: Optional[RecurringFrequency]
    confidence: float


@dataclass(frozen=True)
class DormantSubscription:
    """Active rule whose payments have stopped showing up."""

    merchant_name: str
    expected_amount: Decimal
    last_transaction_date: date
    missed_payments: int
    status: DormantStatus


@dataclass(frozen=True)
class RecurringHealthSummary:
    """Aggregate view over predictions, new and dormant subscriptions."""

    next_month_predicted_total: Decimal
    confirmed_recurring_total: Decimal
    detected_pattern_total: Decimal
    predicted_expense_count: int
    new_subscription_count: int
    dormant_subscription_count: int
    potential_savings: Decimal
