"""Pattern suggestion lifecycle service."""

import logging
from typing import Optional
from datetime import datetime, timedelta, UTC
from decimal import Decimal

from billwise.database.base import Database
from billwise.domain.entities import (
    ParsedTransaction,
    PatternCandidate,
    PatternSuggestion,
    RecurringFrequency,
    SuggestionSource,
    SuggestionStatus,
)
from billwise.domain.errors import ConflictError, NotFoundError, suggestion_not_found
from billwise.domain.frequency import advance_by_frequency
from billwise.domain.pattern_detection import PatternDetectionService
from billwise.utils.merchant import normalize_merchant_pattern

logger = logging.getLogger(__name__)

DISMISSED_RETENTION_DAYS = 30

# Confidence given to subscriptions flagged by the upstream message parser
SUBSCRIPTION_CONFIDENCE = 0.85


class SuggestionService:
    """Service for moving pattern suggestions from detection to a decision.

    A suggestion is created PENDING and ends either CONFIRMED (becoming a
    recurring rule) or DISMISSED (purged after the retention window).
    """

    def __init__(self, db: Database, detector: Optional[PatternDetectionService] = None):
        """Initialize suggestion service.

        Args:
            db: Database instance
            detector: Pattern detector used by run_detection (defaults to
                one built on the same database)
        """
        self.db = db
        self.detector = detector or PatternDetectionService(db)

    def create_from_candidate(self, candidate: PatternCandidate) -> Optional[PatternSuggestion]:
        """Persist a detected pattern as a pending suggestion.

        Args:
            candidate: Pattern candidate from the detector

        Returns:
            The new suggestion, or None if the merchant is already covered
        """
        return self._create(
            merchant_pattern=candidate.merchant_pattern,
            display_name=candidate.display_name,
            average_amount=candidate.average_amount,
            amount_variance=candidate.amount_variance,
            frequency=candidate.frequency,
            typical_day_of_period=candidate.typical_day_of_period,
            occurrence_count=candidate.occurrence_count,
            confidence=candidate.confidence,
            next_expected=candidate.next_expected,
            source=SuggestionSource.PATTERN_DETECTION,
            category_id=candidate.category_id,
        )

    def create_from_subscription(
        self, parsed: ParsedTransaction, category_id: Optional[int] = None
    ) -> Optional[PatternSuggestion]:
        """Create a suggestion from a single payment the parser flagged as a subscription.

        The subscription is assumed to be monthly and due again on the same
        day next month.

        Args:
            parsed: Structured transaction from the message parser
            category_id: Optional category ID

        Returns:
            The new suggestion, or None if the merchant is already covered
        """
        payment_date = parsed.transaction_date
        if isinstance(payment_date, datetime):
            payment_date = payment_date.date()

        return self._create(
            merchant_pattern=normalize_merchant_pattern(parsed.merchant_name),
            display_name=parsed.merchant_name.strip(),
            average_amount=Decimal(parsed.amount),
            amount_variance=0.0,
            frequency=RecurringFrequency.MONTHLY,
            typical_day_of_period=payment_date.day,
            occurrence_count=1,
            confidence=SUBSCRIPTION_CONFIDENCE,
            next_expected=advance_by_frequency(
                payment_date, RecurringFrequency.MONTHLY, payment_date.day
            ),
            source=SuggestionSource.SMS_SUBSCRIPTION,
            category_id=category_id,
        )

    def _create(self, merchant_pattern: str, **fields) -> Optional[PatternSuggestion]:
        if not merchant_pattern:
            return None
        if self.db.suggestion_exists(merchant_pattern):
            logger.debug("Suggestion for %s already exists", merchant_pattern)
            return None
        if self.db.find_rule_by_merchant_pattern(merchant_pattern) is not None:
            logger.debug("Rule already covers %s", merchant_pattern)
            return None

        try:
            suggestion_id = self.db.create_suggestion(merchant_pattern=merchant_pattern, **fields)
        except ConflictError:
            # Another writer created it between the check and the insert
            logger.debug("Lost race creating suggestion for %s", merchant_pattern)
            return None

        logger.info(
            "Created %s suggestion %d for %s",
            fields["source"].value,
            suggestion_id,
            merchant_pattern,
        )
        return self.db.get_suggestion(suggestion_id)

    def get_suggestion(self, suggestion_id: int) -> Optional[PatternSuggestion]:
        """Get suggestion by ID."""
        return self.db.get_suggestion(suggestion_id)

    def list_pending(self) -> list[PatternSuggestion]:
        """List pending suggestions, most confident first."""
        return self.db.list_suggestions(status=SuggestionStatus.PENDING)

    def confirm_suggestion(self, suggestion_id: int) -> int:
        """Turn a pending suggestion into a user-confirmed recurring rule.

        Args:
            suggestion_id: Suggestion ID

        Returns:
            ID of the created rule

        Raises:
            NotFoundError: If the suggestion doesn't exist or is no longer pending
        """
        suggestion = self.db.get_suggestion(suggestion_id)
        if suggestion is None or suggestion.status != SuggestionStatus.PENDING:
            raise NotFoundError(suggestion_not_found(suggestion_id))

        rule_id = self.db.create_rule(
            merchant_pattern=suggestion.merchant_pattern,
            expected_amount=suggestion.average_amount,
            frequency=suggestion.frequency,
            category_id=suggestion.category_id,
            amount_variance=suggestion.amount_variance,
            day_of_period=suggestion.typical_day_of_period,
            next_expected=suggestion.next_expected,
            occurrence_count=suggestion.occurrence_count,
            is_user_confirmed=True,
        )
        self.db.update_suggestion_status(suggestion_id, SuggestionStatus.CONFIRMED)
        logger.info(
            "Confirmed suggestion %d for %s as rule %d",
            suggestion_id,
            suggestion.merchant_pattern,
            rule_id,
        )
        return rule_id

    def dismiss_suggestion(self, suggestion_id: int, now: Optional[datetime] = None) -> None:
        """Dismiss a suggestion.

        Args:
            suggestion_id: Suggestion ID
            now: Dismissal timestamp (defaults to the current UTC time)

        Raises:
            NotFoundError: If the suggestion doesn't exist
        """
        suggestion = self.db.get_suggestion(suggestion_id)
        if suggestion is None:
            raise NotFoundError(suggestion_not_found(suggestion_id))

        dismissed_at = now or datetime.now(UTC)
        self.db.update_suggestion_status(
            suggestion_id, SuggestionStatus.DISMISSED, dismissed_at=dismissed_at
        )
        logger.info("Dismissed suggestion %d for %s", suggestion_id, suggestion.merchant_pattern)

    def cleanup_dismissed(
        self, older_than: Optional[datetime] = None, now: Optional[datetime] = None
    ) -> int:
        """Purge dismissed suggestions past the retention window.

        Args:
            older_than: Explicit cutoff; overrides the retention window
            now: Reference time for the retention window

        Returns:
            Number of suggestions purged
        """
        if older_than is None:
            older_than = (now or datetime.now(UTC)) - timedelta(days=DISMISSED_RETENTION_DAYS)
        deleted = self.db.delete_dismissed_suggestions(older_than)
        if deleted:
            logger.info("Purged %d dismissed suggestion(s) older than %s", deleted, older_than)
        return deleted

    def run_detection(self, now: Optional[datetime] = None) -> list[PatternSuggestion]:
        """Purge stale dismissals, then detect patterns and persist new suggestions.

        Cleanup runs first so that merchants whose dismissal has expired can
        be suggested again in the same run.

        Args:
            now: Reference time for the cleanup step

        Returns:
            Suggestions created during this run
        """
        self.cleanup_dismissed(now=now)

        created = []
        for candidate in self.detector.detect_patterns():
            suggestion = self.create_from_candidate(candidate)
            if suggestion is not None:
                created.append(suggestion)

        logger.info("Detection run created %d suggestion(s)", len(created))
        return created
