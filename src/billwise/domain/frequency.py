"""Frequency classification for recurring payment detection.

Given the occurrence dates and amounts of a single merchant, infers whether
the payments recur weekly, monthly or yearly, how confident that inference
is, and when the next payment is expected. Everything here is pure.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

import numpy as np
from dateutil.relativedelta import relativedelta

from billwise.domain.entities import RecurringFrequency

logger = logging.getLogger(__name__)

MIN_OCCURRENCES = 2

# Inclusive (min_days, max_days) windows for the median gap
FREQUENCY_WINDOWS: dict[RecurringFrequency, tuple[int, int]] = {
    RecurringFrequency.WEEKLY: (6, 8),
    RecurringFrequency.MONTHLY: (27, 34),
    RecurringFrequency.YEARLY: (350, 380),
}

NOMINAL_PERIOD_DAYS: dict[RecurringFrequency, float] = {
    RecurringFrequency.WEEKLY: 7.0,
    RecurringFrequency.MONTHLY: 365.25 / 12,
    RecurringFrequency.YEARLY: 365.25,
}

# Coefficient of variation above which amounts are flagged as unstable
AMOUNT_VARIANCE_CEILING = 0.35

# Mean relative gap deviation at which gap regularity scores zero
GAP_DEVIATION_TOLERANCE = 0.15

# Occurrences beyond this count add no further confidence
OCCURRENCE_CAP = 6


@dataclass(frozen=True)
class ConfidenceWeights:
    """Weights for the confidence score components.

    All weights must sum to 1.0 so that the score stays within [0, 1].
    """

    gap_regularity: float = 0.45
    occurrence_count: float = 0.35
    amount_regularity: float = 0.20

    def __post_init__(self):
        total = self.gap_regularity + self.occurrence_count + self.amount_regularity
        if abs(total - 1.0) > 0.001:
            raise ValueError(
                f"Confidence weights must sum to 1.0, got {total}. "
                f"Weights: gap={self.gap_regularity}, "
                f"occurrences={self.occurrence_count}, "
                f"amount={self.amount_regularity}"
            )


DEFAULT_WEIGHTS = ConfidenceWeights()


@dataclass(frozen=True)
class FrequencyClassification:
    """Result of classifying one merchant's occurrences."""

    frequency: RecurringFrequency
    typical_day_of_period: int
    average_amount: Decimal
    amount_variance: float
    amount_variance_flagged: bool
    occurrence_count: int
    median_gap: float
    confidence: float
    next_expected: date


def compute_gaps(dates: Sequence[date]) -> np.ndarray:
    """Return the day gaps between consecutive sorted dates."""
    if len(dates) < 2:
        return np.array([], dtype=float)
    ordinals = np.array([d.toordinal() for d in dates], dtype=float)
    return np.diff(ordinals)


def classify_gap(median_gap: float) -> Optional[RecurringFrequency]:
    """Match a median gap to a frequency window.

    Returns:
        The matching frequency, or None when the gap falls outside every window
    """
    for frequency, (min_days, max_days) in FREQUENCY_WINDOWS.items():
        if min_days <= median_gap <= max_days:
            return frequency
    return None


def typical_day_of_period(dates: Sequence[date], frequency: RecurringFrequency) -> int:
    """Modal ISO weekday (weekly) or day of month (monthly/yearly)."""
    if not dates:
        return 1
    if frequency == RecurringFrequency.WEEKLY:
        days = [d.isoweekday() for d in dates]
    elif frequency in (RecurringFrequency.MONTHLY, RecurringFrequency.YEARLY):
        days = [d.day for d in dates]
    else:
        return 1
    return Counter(days).most_common(1)[0][0]


def amount_variance(amounts: Sequence[Decimal]) -> float:
    """Coefficient of variation (population std / mean) of amounts."""
    if len(amounts) <= 1:
        return 0.0
    values = np.array([float(a) for a in amounts], dtype=float)
    mean = float(np.mean(values))
    if mean == 0.0:
        return 0.0
    return float(np.std(values) / abs(mean))


def average_amount(amounts: Sequence[Decimal]) -> Decimal:
    """Mean amount rounded to cents."""
    if not amounts:
        return Decimal("0.00")
    total = sum((Decimal(str(a)) for a in amounts), Decimal("0"))
    return (total / len(amounts)).quantize(Decimal("0.01"))


def step_deviations(
    dates: Sequence[date], frequency: RecurringFrequency, day_of_period: Optional[int] = None
) -> np.ndarray:
    """Days each occurrence lands away from one calendar step after the previous one.

    Monthly and yearly steps follow the calendar, so a payment on the 1st of
    every month deviates by zero whether the month has 28 or 31 days.
    """
    if len(dates) < 2:
        return np.array([], dtype=float)
    return np.array(
        [
            (current - advance_by_frequency(previous, frequency, day_of_period)).days
            for previous, current in zip(dates, dates[1:])
        ],
        dtype=float,
    )


def gap_regularity(deviations: np.ndarray, frequency: RecurringFrequency) -> float:
    """Score how closely occurrences track the expected schedule (1.0 is perfect).

    The mean absolute deviation is taken relative to the nominal period so
    that a single off-schedule payment is still penalized.
    """
    nominal = NOMINAL_PERIOD_DAYS.get(frequency)
    if not nominal or deviations.size == 0:
        return 0.0
    relative_deviation = float(np.mean(np.abs(deviations))) / nominal
    return 1.0 - min(1.0, relative_deviation / GAP_DEVIATION_TOLERANCE)


def occurrence_score(occurrence_count: int) -> float:
    """Saturating score for repeat count: 2 -> 0.5, 3 -> 0.75, 4 -> 0.875."""
    capped = min(occurrence_count, OCCURRENCE_CAP)
    if capped < 1:
        return 0.0
    return 1.0 - 0.5 ** (capped - 1)


def amount_regularity(variance: float) -> float:
    """Score amount stability (1.0 for identical amounts)."""
    return 1.0 - min(1.0, max(0.0, variance) / AMOUNT_VARIANCE_CEILING)


def score_confidence(
    deviations: np.ndarray,
    frequency: RecurringFrequency,
    occurrence_count: int,
    variance: float,
    weights: Optional[ConfidenceWeights] = None,
) -> float:
    """Weighted confidence score clamped to [0, 1]."""
    weights = weights or DEFAULT_WEIGHTS
    confidence = (
        weights.gap_regularity * gap_regularity(deviations, frequency)
        + weights.occurrence_count * occurrence_score(occurrence_count)
        + weights.amount_regularity * amount_regularity(variance)
    )
    return round(min(1.0, max(0.0, confidence)), 4)


def advance_by_frequency(
    start: date, frequency: RecurringFrequency, day_of_period: Optional[int] = None
) -> date:
    """Advance a date by exactly one recurrence period.

    Monthly and yearly steps land on ``day_of_period`` when given, clamped to
    the target month's length (day 31 in February becomes the last day of
    February). Weekly steps always add seven days. One-time frequencies do
    not repeat and return ``start`` unchanged.

    Args:
        start: Date to advance from
        frequency: Recurrence frequency
        day_of_period: Optional day of month to land on

    Returns:
        The advanced date
    """
    if frequency == RecurringFrequency.WEEKLY:
        return start + timedelta(days=7)
    if frequency == RecurringFrequency.MONTHLY:
        step = relativedelta(months=1)
    elif frequency == RecurringFrequency.YEARLY:
        step = relativedelta(years=1)
    else:
        return start

    if day_of_period is not None and day_of_period > 0:
        # relativedelta clamps an absolute day to the target month's length
        step += relativedelta(day=day_of_period)
    return start + step


def classify_occurrences(
    dates: Sequence[date],
    amounts: Sequence[Decimal],
    weights: Optional[ConfidenceWeights] = None,
) -> Optional[FrequencyClassification]:
    """Classify a merchant's payment history.

    Args:
        dates: Occurrence dates, one per payment
        amounts: Payment amounts, aligned with ``dates``
        weights: Optional confidence weights

    Returns:
        FrequencyClassification, or None if the history is too short,
        degenerate (all on one day), or irregular
    """
    if len(dates) != len(amounts):
        raise ValueError("dates and amounts must have the same length")
    if len(dates) < MIN_OCCURRENCES:
        return None

    pairs = sorted(zip(dates, amounts), key=lambda pair: pair[0])
    sorted_dates = [d for d, _ in pairs]
    sorted_amounts = [a for _, a in pairs]

    gaps = compute_gaps(sorted_dates)
    median_gap = float(np.median(gaps))
    if median_gap <= 0:
        return None

    frequency = classify_gap(median_gap)
    if frequency is None:
        logger.debug("Median gap of %.1f days matches no frequency window", median_gap)
        return None

    typical_day = typical_day_of_period(sorted_dates, frequency)
    variance = amount_variance(sorted_amounts)
    day_anchor = typical_day if frequency != RecurringFrequency.WEEKLY else None
    deviations = step_deviations(sorted_dates, frequency, day_anchor)
    confidence = score_confidence(
        deviations, frequency, len(sorted_dates), variance, weights
    )
    return FrequencyClassification(
        frequency=frequency,
        typical_day_of_period=typical_day,
        average_amount=average_amount(sorted_amounts),
        amount_variance=round(variance, 4),
        amount_variance_flagged=variance > AMOUNT_VARIANCE_CEILING,
        occurrence_count=len(sorted_dates),
        median_gap=median_gap,
        confidence=confidence,
        next_expected=advance_by_frequency(sorted_dates[-1], frequency, day_anchor),
    )
