"""SQLAlchemy models for billwise database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Float,
    Boolean,
    Enum,
    Index,
    create_engine,
    text,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from billwise.domain.entities import (
    PaymentStatus,
    RecurringFrequency,
    SuggestionSource,
    SuggestionStatus,
    TransactionType,
)

Base = declarative_base()


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    amount = Column(Numeric(12, 2), nullable=False)
    merchant_name = Column(String, nullable=False)
    merchant_normalized = Column(String, nullable=True)
    date = Column(Date, nullable=True)
    type = Column(Enum(TransactionType, native_enum=False), nullable=False)
    category_id = Column(Integer, nullable=True)
    due_date = Column(Date, nullable=True)
    payment_status = Column(Enum(PaymentStatus, native_enum=False), nullable=True)


class CreditCard(Base):
    """Credit card model."""

    __tablename__ = "credit_cards"

    id = Column(Integer, primary_key=True)
    bank_name = Column(String, nullable=False)
    last_four_digits = Column(String(4), nullable=False)
    previous_due = Column(Numeric(12, 2), default=0, nullable=False)
    previous_due_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class RecurringRule(Base):
    """Recurring rule model."""

    __tablename__ = "recurring_rules"

    id = Column(Integer, primary_key=True)
    merchant_pattern = Column(String, nullable=False, index=True)
    category_id = Column(Integer, nullable=True)
    expected_amount = Column(Numeric(12, 2), nullable=False)
    amount_variance = Column(Float, default=0.1, nullable=False)
    frequency = Column(Enum(RecurringFrequency, native_enum=False), nullable=False)
    day_of_period = Column(Integer, nullable=True)
    last_occurrence = Column(Date, nullable=True)
    next_expected = Column(Date, nullable=True)
    occurrence_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_user_confirmed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class PatternSuggestion(Base):
    """Pattern suggestion model."""

    __tablename__ = "pattern_suggestions"

    id = Column(Integer, primary_key=True)
    merchant_pattern = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    average_amount = Column(Numeric(12, 2), nullable=False)
    amount_variance = Column(Float, default=0.0, nullable=False)
    frequency = Column(Enum(RecurringFrequency, native_enum=False), nullable=False)
    typical_day_of_period = Column(Integer, nullable=False)
    occurrence_count = Column(Integer, nullable=False)
    confidence = Column(Float, nullable=False)
    next_expected = Column(Date, nullable=False)
    category_id = Column(Integer, nullable=True)
    status = Column(
        Enum(SuggestionStatus, native_enum=False),
        default=SuggestionStatus.PENDING,
        nullable=False,
        index=True,
    )
    source = Column(Enum(SuggestionSource, native_enum=False), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    dismissed_at = Column(DateTime, nullable=True)

    # At most one live (non-dismissed) suggestion per merchant pattern
    __table_args__ = (
        Index(
            "uq_pattern_suggestions_live_pattern",
            "merchant_pattern",
            unique=True,
            sqlite_where=text("status != 'DISMISSED'"),
            postgresql_where=text("status != 'DISMISSED'"),
        ),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
