"""Tests for RecurringPredictionService."""

import pytest
from datetime import date
from decimal import Decimal

from billwise.domain.entities import (
    DormantStatus,
    ParsedTransaction,
    PredictionSource,
    RecurringFrequency,
)
from billwise.domain.predictions import count_missed_payments

TODAY = date(2024, 6, 15)


@pytest.fixture
def record(transaction_service):
    """Record debits for a merchant on the given dates."""

    def _record(merchant, amount, *dates):
        for day in dates:
            transaction_service.create_transaction(Decimal(amount), merchant, day)

    return _record


@pytest.mark.parametrize(
    "last_date,frequency,expected",
    [
        (date(2024, 6, 1), RecurringFrequency.MONTHLY, 0),
        (date(2024, 5, 11), RecurringFrequency.MONTHLY, 1),
        (date(2024, 4, 6), RecurringFrequency.MONTHLY, 2),
        (date(2024, 6, 1), RecurringFrequency.WEEKLY, 1),
        (date(2022, 6, 1), RecurringFrequency.YEARLY, 2),
        (date(2024, 1, 1), RecurringFrequency.ONE_TIME, 0),
        (date(2024, 7, 1), RecurringFrequency.MONTHLY, 0),
    ],
)
def test_count_missed_payments(last_date, frequency, expected):
    assert count_missed_payments(last_date, frequency, TODAY) == expected


class TestPredictNextMonth:
    """Tests for next-month expense prediction."""

    def test_combines_rules_patterns_and_suggestions(
        self, prediction_service, rule_service, suggestion_service, monthly_netflix
    ):
        rule_service.create_rule(
            "Electricity", Decimal("1800"), RecurringFrequency.MONTHLY, next_expected=date(2024, 7, 5)
        )
        rule_service.create_rule(
            "Insurance", Decimal("12000"), RecurringFrequency.YEARLY, next_expected=date(2024, 9, 1)
        )
        suggestion_service.create_from_subscription(
            ParsedTransaction("Spotify", Decimal("119"), date(2024, 6, 10), True)
        )

        predictions = prediction_service.predict_next_month_expenses(TODAY)

        assert [(p.merchant_name, p.source) for p in predictions] == [
            ("NETFLIX", PredictionSource.DETECTED_PATTERN),
            ("ELECTRICITY", PredictionSource.CONFIRMED_RULE),
            ("SPOTIFY", PredictionSource.DETECTED_PATTERN),
        ]
        netflix, electricity, spotify = predictions
        assert netflix.expected_date == date(2024, 7, 1)
        assert netflix.category_id == 7
        assert electricity.confidence == 0.95
        assert electricity.display_name == "Electricity"
        assert spotify.confidence == 0.85

    def test_rule_replaces_detected_pattern(self, prediction_service, rule_service, monthly_netflix):
        rule_service.create_rule(
            "Netflix", Decimal("499"), RecurringFrequency.MONTHLY, next_expected=date(2024, 7, 1)
        )

        predictions = prediction_service.predict_next_month_expenses(TODAY)

        assert len(predictions) == 1
        assert predictions[0].source == PredictionSource.CONFIRMED_RULE

    def test_nothing_to_predict(self, prediction_service):
        assert prediction_service.predict_next_month_expenses(TODAY) == []


class TestNewSubscriptions:
    """Tests for new subscription detection."""

    def test_identifies_recent_merchants(self, prediction_service, record, monthly_netflix):
        record("Hotstar", "299", date(2024, 5, 1), date(2024, 6, 1))
        record("Gym", "1500", date(2024, 4, 20), date(2024, 5, 28))
        record("Bakery", "80", date(2024, 6, 3))

        subscriptions = prediction_service.identify_new_subscriptions(TODAY)

        assert [s.merchant_name for s in subscriptions] == ["HOTSTAR", "GYM"]
        hotstar, gym = subscriptions
        assert hotstar.display_name == "Hotstar"
        assert hotstar.first_seen_date == date(2024, 5, 1)
        assert hotstar.occurrence_count == 2
        assert hotstar.amount == Decimal("299.00")
        assert hotstar.detected_frequency == RecurringFrequency.MONTHLY
        assert gym.detected_frequency is None
        assert gym.confidence == 0.6

    def test_merchant_with_history_is_not_new(self, prediction_service, record):
        record("Hotstar", "299", date(2024, 2, 1), date(2024, 5, 1), date(2024, 6, 1))

        assert prediction_service.identify_new_subscriptions(TODAY) == []


class TestDormantSubscriptions:
    """Tests for dormant subscription flagging."""

    def test_flags_stopped_payments(self, prediction_service, rule_service, record, monthly_netflix):
        rule_service.create_rule("Netflix", Decimal("499"), RecurringFrequency.MONTHLY)
        rule_service.create_rule("Gym", Decimal("1500"), RecurringFrequency.MONTHLY)
        rule_service.create_rule("Spotify", Decimal("119"), RecurringFrequency.MONTHLY)
        rule_service.create_rule("Car Service", Decimal("4500"), RecurringFrequency.ONE_TIME)
        record("Gym", "1500", date(2024, 2, 1), date(2024, 3, 1))
        record("Spotify", "119", date(2024, 5, 5))

        dormant = prediction_service.flag_dormant_subscriptions(TODAY)

        assert [(d.merchant_name, d.status, d.missed_payments) for d in dormant] == [
            ("GYM", DormantStatus.POSSIBLY_CANCELLED, 3),
            ("SPOTIFY", DormantStatus.PAYMENT_ISSUE, 1),
        ]
        assert dormant[0].last_transaction_date == date(2024, 3, 1)
        assert dormant[0].expected_amount == Decimal("1500.00")

    def test_rule_without_transactions_is_inactive(self, prediction_service, rule_service, temp_db):
        rule_id = rule_service.create_rule("Newspaper", Decimal("300"), RecurringFrequency.MONTHLY)
        rule_service.record_occurrence(rule_id, date(2024, 2, 1), date(2024, 3, 1))

        dormant = prediction_service.flag_dormant_subscriptions(TODAY)

        assert len(dormant) == 1
        assert dormant[0].status == DormantStatus.INACTIVE
        assert dormant[0].last_transaction_date == date(2024, 2, 1)
        assert dormant[0].missed_payments == 4

    def test_within_grace_period(self, prediction_service, rule_service, record):
        rule_service.create_rule("Spotify", Decimal("119"), RecurringFrequency.MONTHLY)
        record("Spotify", "119", date(2024, 5, 13))

        assert prediction_service.flag_dormant_subscriptions(TODAY) == []


def test_health_summary(prediction_service, rule_service, record, monthly_netflix):
    rule_service.create_rule(
        "Electricity", Decimal("1800"), RecurringFrequency.MONTHLY, next_expected=date(2024, 7, 5)
    )
    record("Electricity", "1800", date(2024, 6, 5))
    rule_service.create_rule("Gym", Decimal("1500"), RecurringFrequency.MONTHLY)
    record("Gym", "1500", date(2024, 2, 1), date(2024, 3, 1))
    record("Hotstar", "299", date(2024, 5, 1), date(2024, 6, 1))

    summary = prediction_service.get_recurring_health_summary(TODAY)

    assert summary.confirmed_recurring_total == Decimal("1800")
    assert summary.detected_pattern_total == Decimal("798.00")
    assert summary.next_month_predicted_total == Decimal("2598.00")
    assert summary.predicted_expense_count == 3
    assert summary.new_subscription_count == 1
    assert summary.dormant_subscription_count == 1
    assert summary.potential_savings == Decimal("1500.00")
