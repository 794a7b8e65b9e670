"""Recurring pattern detection over transaction history."""

import logging
from collections import Counter, defaultdict
from datetime import date
from typing import Optional

from billwise.database.base import Database
from billwise.domain.entities import PatternCandidate, Transaction, TransactionType
from billwise.domain.frequency import (
    MIN_OCCURRENCES,
    ConfidenceWeights,
    classify_occurrences,
)
from billwise.utils.merchant import normalize_merchant_pattern, patterns_overlap

logger = logging.getLogger(__name__)

# Candidates scoring below this are not worth surfacing to the user
MIN_CONFIDENCE = 0.55


class PatternDetectionService:
    """Service for inferring recurring payment patterns from debits."""

    def __init__(
        self,
        db: Database,
        min_confidence: float = MIN_CONFIDENCE,
        weights: Optional[ConfidenceWeights] = None,
    ):
        """Initialize pattern detection service.

        Args:
            db: Database instance
            min_confidence: Lowest confidence a candidate may have
            weights: Optional confidence weights passed to the classifier
        """
        self.db = db
        self.min_confidence = min_confidence
        self.weights = weights

    def detect_patterns(self) -> list[PatternCandidate]:
        """Detect recurring patterns in the stored transaction history.

        Merchants already covered by an active rule or by a stored
        suggestion (including a recently dismissed one) are left out. The pass only reads from the database.

        Returns:
            Pattern candidates sorted by confidence, highest first
        """
        transactions = self.db.list_transactions(transaction_type=TransactionType.DEBIT)
        return self.detect_from_transactions(transactions)

    def detect_from_transactions(self, transactions: list[Transaction]) -> list[PatternCandidate]:
        """Detect recurring patterns in the given transactions.

        Args:
            transactions: Transaction history in any order

        Returns:
            Pattern candidates sorted by confidence, highest first
        """
        groups = self.group_by_merchant(transactions)
        active_patterns = [rule.merchant_pattern for rule in self.db.list_active_rules()]

        candidates = []
        for merchant_pattern, group in groups.items():
            if len(group) < MIN_OCCURRENCES:
                continue
            if self._is_covered(merchant_pattern, active_patterns):
                logger.debug("Skipping %s: already tracked", merchant_pattern)
                continue

            candidate = self._analyze_group(merchant_pattern, group)
            if candidate is None:
                continue
            if candidate.confidence < self.min_confidence:
                logger.debug(
                    "Skipping %s: confidence %.2f below %.2f",
                    merchant_pattern,
                    candidate.confidence,
                    self.min_confidence,
                )
                continue
            candidates.append(candidate)

        candidates.sort(key=lambda c: c.confidence, reverse=True)
        logger.info(
            "Detected %d recurring pattern(s) across %d merchant(s)", len(candidates), len(groups)
        )
        return candidates

    def group_by_merchant(self, transactions: list[Transaction]) -> dict[str, list[Transaction]]:
        """Group dated debits by normalized merchant pattern, each group sorted by date."""
        groups: dict[str, list[Transaction]] = defaultdict(list)
        for txn in transactions:
            if txn.type != TransactionType.DEBIT:
                continue
            if not isinstance(txn.date, date):
                logger.debug("Skipping transaction %s without a usable date", txn.id)
                continue
            merchant_pattern = normalize_merchant_pattern(
                txn.merchant_normalized or txn.merchant_name
            )
            if not merchant_pattern:
                continue
            groups[merchant_pattern].append(txn)

        for group in groups.values():
            group.sort(key=lambda t: (t.date, t.id))
        return groups

    def _is_covered(self, merchant_pattern: str, active_patterns: list[str]) -> bool:
        if any(patterns_overlap(merchant_pattern, pattern) for pattern in active_patterns):
            return True
        # Dismissed suggestions keep the merchant quiet until cleanup purges them
        return self.db.suggestion_exists(merchant_pattern, include_dismissed=True)

    def _analyze_group(
        self, merchant_pattern: str, group: list[Transaction]
    ) -> Optional[PatternCandidate]:
        classification = classify_occurrences(
            [txn.date for txn in group],
            [txn.amount for txn in group],
            self.weights,
        )
        if classification is None:
            logger.debug("No recurring frequency for %s (%d txns)", merchant_pattern, len(group))
            return None

        logger.debug(
            "Classified %s as %s (confidence %.2f, median gap %.1f days)",
            merchant_pattern,
            classification.frequency.value,
            classification.confidence,
            classification.median_gap,
        )
        return PatternCandidate(
            merchant_pattern=merchant_pattern,
            display_name=group[0].merchant_name,
            average_amount=classification.average_amount,
            amount_variance=classification.amount_variance,
            frequency=classification.frequency,
            typical_day_of_period=classification.typical_day_of_period,
            occurrence_count=classification.occurrence_count,
            confidence=classification.confidence,
            next_expected=classification.next_expected,
            category_id=_modal_category(group),
            amount_variance_flagged=classification.amount_variance_flagged,
        )


def _modal_category(group: list[Transaction]) -> Optional[int]:
    categories = [txn.category_id for txn in group if txn.category_id is not None]
    if not categories:
        return None
    return Counter(categories).most_common(1)[0][0]
