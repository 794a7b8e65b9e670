"""Domain layer for billwise application."""

# Services import the database interface, which itself imports
# billwise.domain.entities, so services are resolved lazily.
_SERVICES = {
    "PatternDetectionService": "billwise.domain.pattern_detection",
    "SuggestionService": "billwise.domain.suggestions",
    "RecurringRuleService": "billwise.domain.rules",
    "BillAggregationService": "billwise.domain.bills",
    "BudgetService": "billwise.domain.budget",
    "calculate_budget_status": "billwise.domain.budget",
    "RecurringPredictionService": "billwise.domain.predictions",
    "TransactionService": "billwise.domain.transactions",
    "CreditCardService": "billwise.domain.cards",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module
        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
