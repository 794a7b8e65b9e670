"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from billwise.domain.entities import (
    CreditCard,
    PatternSuggestion,
    PaymentStatus,
    RecurringFrequency,
    RecurringRule,
    SuggestionSource,
    SuggestionStatus,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for billwise.

    Covers the three external collaborators the engine reads from and
    writes to: the transaction store, the credit card store and the rule
    store (recurring rules plus pattern suggestions).
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        amount: Decimal,
        merchant_name: str,
        date: Optional[date],
        type: TransactionType = TransactionType.DEBIT,
        merchant_normalized: Optional[str] = None,
        category_id: Optional[int] = None,
        due_date: Optional[date] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions in chronological order with optional filters."""
        pass

    @abstractmethod
    def update_transaction_payment_status(
        self, transaction_id: int, payment_status: PaymentStatus
    ) -> None:
        """Update the payment status of a transaction."""
        pass

    # Credit card operations
    @abstractmethod
    def create_credit_card(
        self,
        bank_name: str,
        last_four_digits: str,
        previous_due: Decimal = Decimal("0"),
        previous_due_date: Optional[date] = None,
    ) -> int:
        """Create a credit card. Returns card ID."""
        pass

    @abstractmethod
    def get_credit_card(self, card_id: int) -> Optional[CreditCard]:
        """Get credit card by ID."""
        pass

    @abstractmethod
    def list_active_credit_cards(self) -> list[CreditCard]:
        """List credit cards that are being tracked."""
        pass

    @abstractmethod
    def update_credit_card_due(
        self, card_id: int, previous_due: Decimal, previous_due_date: Optional[date]
    ) -> None:
        """Record the latest statement due for a card."""
        pass

    # Recurring rule operations
    @abstractmethod
    def create_rule(
        self,
        merchant_pattern: str,
        expected_amount: Decimal,
        frequency: RecurringFrequency,
        category_id: Optional[int] = None,
        amount_variance: float = 0.1,
        day_of_period: Optional[int] = None,
        next_expected: Optional[date] = None,
        occurrence_count: int = 0,
        is_user_confirmed: bool = False,
    ) -> int:
        """Create a recurring rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[RecurringRule]:
        """Get recurring rule by ID."""
        pass

    @abstractmethod
    def list_active_rules(self) -> list[RecurringRule]:
        """List all active recurring rules."""
        pass

    @abstractmethod
    def list_upcoming_rules(self, start_date: date, end_date: date) -> list[RecurringRule]:
        """List active rules whose next expected date falls within the range."""
        pass

    @abstractmethod
    def find_rule_by_merchant_pattern(self, merchant_pattern: str) -> Optional[RecurringRule]:
        """Find an active rule whose pattern contains the given pattern."""
        pass

    @abstractmethod
    def record_rule_occurrence(self, rule_id: int, occurred_on: date, next_date: date) -> None:
        """Advance a rule's last/next occurrence and increment its count."""
        pass

    @abstractmethod
    def deactivate_rule(self, rule_id: int) -> None:
        """Soft-delete a rule."""
        pass

    # Pattern suggestion operations
    @abstractmethod
    def create_suggestion(
        self,
        merchant_pattern: str,
        display_name: str,
        average_amount: Decimal,
        amount_variance: float,
        frequency: RecurringFrequency,
        typical_day_of_period: int,
        occurrence_count: int,
        confidence: float,
        next_expected: date,
        source: SuggestionSource,
        category_id: Optional[int] = None,
    ) -> int:
        """Create a pending suggestion. Returns suggestion ID.

        Raises:
            ConflictError: If a non-dismissed suggestion already exists for
                the merchant pattern
        """
        pass

    @abstractmethod
    def get_suggestion(self, suggestion_id: int) -> Optional[PatternSuggestion]:
        """Get suggestion by ID."""
        pass

    @abstractmethod
    def list_suggestions(self, status: Optional[SuggestionStatus] = None) -> list[PatternSuggestion]:
        """List suggestions, optionally filtered by status."""
        pass

    @abstractmethod
    def suggestion_exists(self, merchant_pattern: str, include_dismissed: bool = False) -> bool:
        """Check if a suggestion exists for the pattern.

        Dismissed suggestions only count when ``include_dismissed`` is set.
        """
        pass

    @abstractmethod
    def update_suggestion_status(
        self,
        suggestion_id: int,
        status: SuggestionStatus,
        dismissed_at: Optional[datetime] = None,
    ) -> None:
        """Update suggestion status."""
        pass

    @abstractmethod
    def delete_dismissed_suggestions(self, older_than: datetime) -> int:
        """Purge suggestions dismissed before the cutoff. Returns count deleted."""
        pass
