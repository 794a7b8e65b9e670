"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal

from billwise.database.base import Database
from billwise.domain.entities import PaymentStatus, Transaction, TransactionType
from billwise.domain.errors import NotFoundError, ValidationError, transaction_not_found
from billwise.utils.merchant import normalize_merchant_pattern


class TransactionService:
    """Service for recording and reading transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        amount: Decimal,
        merchant_name: str,
        date: Optional[date],
        type: TransactionType = TransactionType.DEBIT,
        category_id: Optional[int] = None,
        due_date: Optional[date] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> int:
        """Create a transaction.

        Args:
            amount: Transaction amount (positive)
            merchant_name: Merchant name as reported upstream
            date: Transaction date
            type: Direction of money movement
            category_id: Optional category ID
            due_date: Optional due date for bill-like transactions
            payment_status: Optional settlement state

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the merchant is blank or the amount is not positive
        """
        merchant_name = merchant_name.strip() if merchant_name else ""
        if not merchant_name:
            raise ValidationError("Merchant name cannot be empty")
        if amount <= 0:
            raise ValidationError("Amount must be positive")

        return self.db.create_transaction(
            amount=amount,
            merchant_name=merchant_name,
            date=date,
            type=type,
            merchant_normalized=normalize_merchant_pattern(merchant_name),
            category_id=category_id,
            due_date=due_date,
            payment_status=payment_status,
        )

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions in chronological order."""
        return self.db.list_transactions(start_date, end_date, transaction_type)

    def mark_paid(self, transaction_id: int) -> None:
        """Mark a transaction as settled.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        self.db.update_transaction_payment_status(transaction_id, PaymentStatus.PAID)
