"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


def suggestion_not_found(suggestion_id: int) -> str:
    """Return message for a missing or already resolved suggestion."""
    return f"Suggestion {suggestion_id} not found"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing recurring rule."""
    return f"Recurring rule {rule_id} not found"


def credit_card_not_found(card_id: int) -> str:
    """Return message for missing credit card."""
    return f"Credit card {card_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_suggestion(merchant_pattern: str) -> str:
    """Return message when a live suggestion already covers a pattern."""
    return f"A suggestion for '{merchant_pattern}' already exists"
