"""Tests for CLI commands."""

from datetime import date
from decimal import Decimal

from billwise.cli.main import cli
from billwise.domain.entities import PaymentStatus, RecurringFrequency, SuggestionStatus


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_card_add_and_list(cli_runner, temp_db):
    """Test adding and listing credit cards via CLI."""
    result = run(cli_runner, temp_db, "card", "add", "HDFC", "1234", "--due", "12,000", "--due-date", "2024-03-20")
    assert result.exit_code == 0
    assert "Added card HDFC ****1234" in result.output

    result = run(cli_runner, temp_db, "card", "list")
    assert result.exit_code == 0
    assert "HDFC" in result.output
    assert "12000.00" in result.output
    assert "2024-03-20" in result.output


def test_card_add_rejects_bad_digits(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "card", "add", "HDFC", "12a4")
    assert result.exit_code == 1
    assert "Error: Last four digits must be exactly 4 digits" in result.output


def test_card_due_update(cli_runner, temp_db, card_service):
    card_id = card_service.add_card("HDFC", "1234", Decimal("12000"), date(2024, 3, 20))

    result = run(cli_runner, temp_db, "card", "due", str(card_id), "8,500", "--due-date", "2024-04-20")
    assert result.exit_code == 0
    assert f"Updated due for card {card_id}" in result.output
    temp_db.disconnect()
    card = temp_db.get_credit_card(card_id)
    assert card.previous_due == Decimal("8500")
    assert card.previous_due_date == date(2024, 4, 20)

    result = run(cli_runner, temp_db, "card", "due", str(card_id), "--", "-500")
    assert result.exit_code == 1
    assert "Error: Due amount cannot be negative" in result.output

    result = run(cli_runner, temp_db, "card", "due", "99", "100")
    assert result.exit_code == 1
    assert "Error: Credit card 99 not found" in result.output


def test_transaction_add_and_list(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "transaction", "add", "Netflix", "499", "--date", "2024-01-01")
    assert result.exit_code == 0
    assert "Recorded transaction" in result.output

    result = run(
        cli_runner, temp_db, "transaction", "add", "Salary", "85000", "--date", "2024-01-01", "--type", "credit"
    )
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "transaction", "list", "--start-date", "2024-01-01")
    assert result.exit_code == 0
    assert "Netflix" in result.output
    assert "CREDIT" in result.output


def test_transaction_add_invalid_date(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "transaction", "add", "Netflix", "499", "--date", "not a date")
    assert result.exit_code == 1
    assert "Error: Invalid date" in result.output


def test_transaction_pay(cli_runner, temp_db, transaction_service):
    txn_id = transaction_service.create_transaction(
        Decimal("15000"),
        "Rent",
        date(2024, 3, 1),
        due_date=date(2024, 3, 1),
        payment_status=PaymentStatus.PENDING,
    )

    result = run(cli_runner, temp_db, "transaction", "pay", str(txn_id))
    assert result.exit_code == 0
    assert f"Marked transaction {txn_id} as paid" in result.output
    temp_db.disconnect()
    assert temp_db.get_transaction(txn_id).payment_status == PaymentStatus.PAID

    result = run(cli_runner, temp_db, "transaction", "pay", "999")
    assert result.exit_code == 1
    assert "Error: Transaction 999 not found" in result.output


def test_rule_lifecycle(cli_runner, temp_db):
    result = run(
        cli_runner, temp_db, "rule", "add", "Car Insurance", "12000", "--frequency", "yearly", "--next-due", "2024-09-15"
    )
    assert result.exit_code == 0
    assert "Created rule 1 for Car Insurance" in result.output

    rule = temp_db.get_rule(1)
    assert rule.frequency == RecurringFrequency.YEARLY
    assert rule.is_user_confirmed is True

    result = run(cli_runner, temp_db, "rule", "list")
    assert "CAR INSURANCE" in result.output
    assert "2024-09-15" in result.output

    result = run(cli_runner, temp_db, "rule", "deactivate", "1")
    assert result.exit_code == 0
    assert "Deactivated rule 1" in result.output

    result = run(cli_runner, temp_db, "rule", "list")
    assert "No active rules found." in result.output


def test_rule_errors(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "rule", "add", "Rent", "-5")
    assert result.exit_code != 0

    result = run(cli_runner, temp_db, "rule", "add", "Rent", "0")
    assert result.exit_code == 1
    assert "Error: Expected amount must be positive" in result.output

    result = run(cli_runner, temp_db, "rule", "deactivate", "42")
    assert result.exit_code == 1
    assert "Error: Recurring rule 42 not found" in result.output


def test_suggestion_workflow(cli_runner, temp_db, monthly_netflix):
    """Detect, list and confirm a suggestion end to end."""
    result = run(cli_runner, temp_db, "suggestion", "detect")
    assert result.exit_code == 0
    assert "Found 1 new recurring pattern(s):" in result.output
    assert "Netflix" in result.output

    result = run(cli_runner, temp_db, "suggestion", "detect")
    assert "No new recurring patterns found." in result.output

    suggestion = temp_db.list_suggestions()[0]
    result = run(cli_runner, temp_db, "suggestion", "list")
    assert result.exit_code == 0
    assert "Next: 2024-07-01" in result.output

    result = run(cli_runner, temp_db, "suggestion", "confirm", str(suggestion.id))
    assert result.exit_code == 0
    assert f"Confirmed suggestion {suggestion.id} as rule" in result.output
    temp_db.disconnect()
    assert temp_db.get_suggestion(suggestion.id).status == SuggestionStatus.CONFIRMED
    assert temp_db.find_rule_by_merchant_pattern("NETFLIX") is not None

    result = run(cli_runner, temp_db, "suggestion", "list")
    assert "No pending suggestions." in result.output


def test_suggestion_dismiss_and_errors(cli_runner, temp_db, monthly_netflix):
    run(cli_runner, temp_db, "suggestion", "detect")
    suggestion = temp_db.list_suggestions()[0]

    result = run(cli_runner, temp_db, "suggestion", "dismiss", str(suggestion.id))
    assert result.exit_code == 0
    assert f"Dismissed suggestion {suggestion.id}" in result.output

    result = run(cli_runner, temp_db, "suggestion", "confirm", str(suggestion.id))
    assert result.exit_code == 1
    assert f"Error: Suggestion {suggestion.id} not found" in result.output

    result = run(cli_runner, temp_db, "suggestion", "dismiss", "99")
    assert result.exit_code == 1

    result = run(cli_runner, temp_db, "suggestion", "cleanup")
    assert result.exit_code == 0
    assert "Purged 0 dismissed suggestion(s)" in result.output


def test_bills_views(cli_runner, temp_db, rule_service, card_service):
    rule_service.create_rule(
        "Netflix", Decimal("499"), RecurringFrequency.MONTHLY, next_expected=date(2024, 3, 20)
    )
    rule_service.create_rule(
        "Insurance", Decimal("2000"), RecurringFrequency.MONTHLY, next_expected=date(2024, 3, 10)
    )
    card_service.add_card("HDFC", "1234", Decimal("12000"), date(2024, 4, 5))

    result = run(
        cli_runner, temp_db, "bills", "upcoming", "--start-date", "2024-03-01", "--end-date", "2024-04-30",
        "--today", "2024-03-15",
    )
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 3
    assert lines[0].startswith("2024-03-10 | OVERDUE")
    assert "Netflix [RECURRING_RULE_1]" in lines[1]
    assert "HDFC Credit Card [CREDIT_CARD_1]" in lines[2]

    result = run(cli_runner, temp_db, "bills", "summary", "--today", "2024-03-15")
    assert result.exit_code == 0
    assert "March 2024" in result.output
    assert "2499.00 (2 bills)" in result.output
    assert "Overdue: 1 | Due today: 0" in result.output

    result = run(cli_runner, temp_db, "bills", "groups", "--today", "2024-03-15")
    assert result.exit_code == 0
    assert "Today (1, total 2000.00)" in result.output
    assert "This Week" in result.output
    assert "Next Month" in result.output

    result = run(cli_runner, temp_db, "bills", "calendar", "2024", "3", "--today", "2024-03-15")
    assert result.exit_code == 0
    assert "Insurance: 2000.00 (OVERDUE)" in result.output


def test_bills_upcoming_rejects_reversed_range(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "bills", "upcoming", "--start-date", "2024-04-01", "--end-date", "2024-03-01")
    assert result.exit_code == 1
    assert "Error: Start date must be on or before end date" in result.output


def test_bills_pay(cli_runner, temp_db, rule_service, card_service):
    rule_id = rule_service.create_rule(
        "Rent", Decimal("15000"), RecurringFrequency.MONTHLY, next_expected=date(2024, 3, 1)
    )
    card_service.add_card("HDFC", "1234", Decimal("12000"), date(2024, 3, 20))

    result = run(cli_runner, temp_db, "bills", "pay", f"RECURRING_RULE_{rule_id}", "--today", "2024-03-04")
    assert result.exit_code == 0
    assert "Marked Rent as paid" in result.output
    temp_db.disconnect()
    assert temp_db.get_rule(rule_id).next_expected == date(2024, 4, 4)

    result = run(cli_runner, temp_db, "bills", "pay", "CREDIT_CARD_1", "--today", "2024-03-04")
    assert result.exit_code == 1
    assert "cannot be marked paid here" in result.output

    result = run(cli_runner, temp_db, "bills", "pay", "RECURRING_RULE_99", "--today", "2024-03-04")
    assert result.exit_code == 1
    assert "Error: Bill RECURRING_RULE_99 not found" in result.output


def test_budget_status(cli_runner, temp_db, transaction_service):
    transaction_service.create_transaction(Decimal("3000"), "Grocery Mart", date(2024, 3, 5))

    result = run(cli_runner, temp_db, "budget", "status", "8000", "--today", "2024-03-11")
    assert result.exit_code == 0
    assert "Period:     2024-03-01 to 2024-03-31" in result.output
    assert "Spent:      3000.00 of 8000.00 (37.5%)" in result.output
    assert "Projected:  9000.00" in result.output
    assert "Alert:      NORMAL" in result.output
    assert "Warning: on track to exceed the budget" in result.output


def test_budget_status_invalid_amount(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "budget", "status", "lots")
    assert result.exit_code == 1
    assert "Error: Could not parse amount" in result.output


def test_predict_commands(cli_runner, temp_db, rule_service, monthly_netflix):
    rule_service.create_rule(
        "Electricity", Decimal("1800"), RecurringFrequency.MONTHLY, next_expected=date(2024, 7, 5)
    )

    result = run(cli_runner, temp_db, "predict", "next-month", "--today", "2024-06-15")
    assert result.exit_code == 0
    assert "2024-07-01 |     499.00 | Netflix (DETECTED_PATTERN" in result.output
    assert "Electricity (CONFIRMED_RULE, 95%)" in result.output

    result = run(cli_runner, temp_db, "predict", "health", "--today", "2024-06-15")
    assert result.exit_code == 0
    assert "Predicted next month:   2299.00 (2 expenses)" in result.output
    assert "ELECTRICITY: INACTIVE" in result.output


def test_help_does_not_need_database(cli_runner, tmp_path):
    result = cli_runner.invoke(cli, ["--db-path", str(tmp_path / "unused.db"), "--help"])
    assert result.exit_code == 0
    assert "Recurring expense and upcoming bill tracking" in result.output
    assert not (tmp_path / "unused.db").exists()
