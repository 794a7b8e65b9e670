"""Credit card domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal

from billwise.database.base import Database
from billwise.domain.entities import CreditCard
from billwise.domain.errors import NotFoundError, ValidationError, credit_card_not_found


class CreditCardService:
    """Service for tracking credit cards and their statement dues."""

    def __init__(self, db: Database):
        """Initialize credit card service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_card(
        self,
        bank_name: str,
        last_four_digits: str,
        previous_due: Decimal = Decimal("0"),
        previous_due_date: Optional[date] = None,
    ) -> int:
        """Add a credit card.

        Args:
            bank_name: Issuing bank
            last_four_digits: Last four digits of the card number
            previous_due: Amount due on the latest statement
            previous_due_date: Due date of the latest statement

        Returns:
            Credit card ID

        Raises:
            ValidationError: If the bank is blank, the digits are malformed,
                or the due amount is negative
        """
        bank_name = bank_name.strip() if bank_name else ""
        if not bank_name:
            raise ValidationError("Bank name cannot be empty")
        if len(last_four_digits) != 4 or not last_four_digits.isdigit():
            raise ValidationError("Last four digits must be exactly 4 digits")
        if previous_due < 0:
            raise ValidationError("Due amount cannot be negative")

        return self.db.create_credit_card(
            bank_name=bank_name,
            last_four_digits=last_four_digits,
            previous_due=previous_due,
            previous_due_date=previous_due_date,
        )

    def get_card(self, card_id: int) -> Optional[CreditCard]:
        """Get credit card by ID."""
        return self.db.get_credit_card(card_id)

    def list_active_cards(self) -> list[CreditCard]:
        """List tracked credit cards."""
        return self.db.list_active_credit_cards()

    def update_due(
        self, card_id: int, previous_due: Decimal, previous_due_date: Optional[date]
    ) -> None:
        """Record a new statement due for a card.

        Raises:
            NotFoundError: If the card doesn't exist
            ValidationError: If the due amount is negative
        """
        if self.db.get_credit_card(card_id) is None:
            raise NotFoundError(credit_card_not_found(card_id))
        if previous_due < 0:
            raise ValidationError("Due amount cannot be negative")
        self.db.update_credit_card_due(card_id, previous_due, previous_due_date)
