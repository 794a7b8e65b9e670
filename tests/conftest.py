"""Shared pytest fixtures for billwise tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from billwise.database.factories import create_sqlite_database
from billwise.domain.bills import BillAggregationService
from billwise.domain.cards import CreditCardService
from billwise.domain.pattern_detection import PatternDetectionService
from billwise.domain.predictions import RecurringPredictionService
from billwise.domain.rules import RecurringRuleService
from billwise.domain.suggestions import SuggestionService
from billwise.domain.transactions import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def card_service(temp_db):
    """Create a CreditCardService with a temporary database."""
    return CreditCardService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    """Create a RecurringRuleService with a temporary database."""
    return RecurringRuleService(temp_db)


@pytest.fixture
def detection_service(temp_db):
    """Create a PatternDetectionService with a temporary database."""
    return PatternDetectionService(temp_db)


@pytest.fixture
def suggestion_service(temp_db):
    """Create a SuggestionService with a temporary database."""
    return SuggestionService(temp_db)


@pytest.fixture
def bill_service(temp_db):
    """Create a BillAggregationService with a temporary database."""
    return BillAggregationService(temp_db)


@pytest.fixture
def prediction_service(temp_db):
    """Create a RecurringPredictionService with a temporary database."""
    return RecurringPredictionService(temp_db)


@pytest.fixture
def monthly_netflix(transaction_service):
    """Six monthly Netflix debits of 499 on the 1st, Jan through Jun 2024."""
    return [
        transaction_service.create_transaction(
            amount=Decimal("499"),
            merchant_name="Netflix",
            date=date(2024, month, 1),
            category_id=7,
        )
        for month in range(1, 7)
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
