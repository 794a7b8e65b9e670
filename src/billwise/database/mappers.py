"""Mapper functions to convert between domain models and SQLAlchemy models.

Keeps ORM rows from leaking into the domain layer; services only ever see
the frozen entities from ``billwise.domain.entities``.
"""

from decimal import Decimal

from billwise.domain import entities as domain
from billwise.database.models import (
    CreditCard as ORMCreditCard,
    PatternSuggestion as ORMPatternSuggestion,
    RecurringRule as ORMRecurringRule,
    Transaction as ORMTransaction,
)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        amount=Decimal(orm_transaction.amount),
        merchant_name=orm_transaction.merchant_name,
        date=orm_transaction.date,
        type=orm_transaction.type,
        merchant_normalized=orm_transaction.merchant_normalized,
        category_id=orm_transaction.category_id,
        due_date=orm_transaction.due_date,
        payment_status=orm_transaction.payment_status,
    )


def credit_card_to_domain(orm_card: ORMCreditCard) -> domain.CreditCard:
    """Convert SQLAlchemy CreditCard model to domain CreditCard entity."""
    return domain.CreditCard(
        id=orm_card.id,
        bank_name=orm_card.bank_name,
        last_four_digits=orm_card.last_four_digits,
        previous_due=Decimal(orm_card.previous_due),
        previous_due_date=orm_card.previous_due_date,
        is_active=orm_card.is_active,
        created_at=orm_card.created_at,
    )


def recurring_rule_to_domain(orm_rule: ORMRecurringRule) -> domain.RecurringRule:
    """Convert SQLAlchemy RecurringRule model to domain RecurringRule entity."""
    return domain.RecurringRule(
        id=orm_rule.id,
        merchant_pattern=orm_rule.merchant_pattern,
        expected_amount=Decimal(orm_rule.expected_amount),
        frequency=orm_rule.frequency,
        created_at=orm_rule.created_at,
        category_id=orm_rule.category_id,
        amount_variance=orm_rule.amount_variance,
        day_of_period=orm_rule.day_of_period,
        last_occurrence=orm_rule.last_occurrence,
        next_expected=orm_rule.next_expected,
        occurrence_count=orm_rule.occurrence_count,
        is_active=orm_rule.is_active,
        is_user_confirmed=orm_rule.is_user_confirmed,
    )


def pattern_suggestion_to_domain(orm_suggestion: ORMPatternSuggestion) -> domain.PatternSuggestion:
    """Convert SQLAlchemy PatternSuggestion model to domain PatternSuggestion entity."""
    return domain.PatternSuggestion(
        id=orm_suggestion.id,
        merchant_pattern=orm_suggestion.merchant_pattern,
        display_name=orm_suggestion.display_name,
        average_amount=Decimal(orm_suggestion.average_amount),
        amount_variance=orm_suggestion.amount_variance,
        frequency=orm_suggestion.frequency,
        typical_day_of_period=orm_suggestion.typical_day_of_period,
        occurrence_count=orm_suggestion.occurrence_count,
        confidence=orm_suggestion.confidence,
        next_expected=orm_suggestion.next_expected,
        status=orm_suggestion.status,
        source=orm_suggestion.source,
        created_at=orm_suggestion.created_at,
        category_id=orm_suggestion.category_id,
        dismissed_at=orm_suggestion.dismissed_at,
    )
