"""SQLAlchemy models for the budgetbot ledger store."""

from sqlalchemy import (
    Column,
    Integer,
    BigInteger,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, scoped_session

from budgetbot.utils.date_parser import utcnow

Base = declarative_base()


class User(Base):
    """Chat user model. The id is assigned by the transport."""

    __tablename__ = "users"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    first_name = Column(String, nullable=True)
    username = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Account(Base):
    """Money account model (one live account per user)."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(8), nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    transactions = relationship("Transaction", back_populates="account")


class Category(Base):
    """User-scoped category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    icon = Column(String, nullable=True)
    # NULL means the category is offered for both directions
    direction = Column(String(8), nullable=True)
    priority = Column(Integer, nullable=False, default=2)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Ledger movement model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    direction = Column(String(8), nullable=False)
    description = Column(String, nullable=True)
    is_impulsive = Column(Boolean, default=False, nullable=False)
    is_error = Column(Boolean, default=False, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (Index("ix_transactions_account_date", "account_id", "date"),)

    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


class Limit(Base):
    """Monthly category limit model."""

    __tablename__ = "limits"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    spent_amount = Column(Numeric(14, 2), nullable=False, default=0)
    period_start = Column(DateTime, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)
    blocked_until = Column(DateTime, nullable=True)
    last_warning_level = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "category_id", name="uq_limit_user_category"),)

    category = relationship("Category")


class Debt(Base):
    """Debt model."""

    __tablename__ = "debts"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    person_name = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    remaining_amount = Column(Numeric(14, 2), nullable=False)
    debt_type = Column(String(16), nullable=False)
    description = Column(String, nullable=True)
    taken_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=True)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    payments = relationship("DebtPayment", back_populates="debt", cascade="all, delete-orphan")


class DebtPayment(Base):
    """Single repayment of a debt."""

    __tablename__ = "debt_payments"

    id = Column(Integer, primary_key=True)
    debt_id = Column(Integer, ForeignKey("debts.id"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    paid_at = Column(DateTime, nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    debt = relationship("Debt", back_populates="payments")


class Goal(Base):
    """Savings goal model."""

    __tablename__ = "goals"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    target_amount = Column(Numeric(14, 2), nullable=False)
    current_amount = Column(Numeric(14, 2), nullable=False, default=0)
    deadline = Column(DateTime, nullable=True)
    priority = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class RegularPayment(Base):
    """Recurring payment model."""

    __tablename__ = "regular_payments"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    name = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    frequency = Column(String(8), nullable=False)
    day_of_month = Column(Integer, nullable=True)
    reminder_days_before = Column(Integer, default=3, nullable=False)
    is_paused = Column(Boolean, default=False, nullable=False)
    last_paid_date = Column(DateTime, nullable=True)
    next_due_date = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    history = relationship(
        "RegularPaymentHistory", back_populates="regular_payment", cascade="all, delete-orphan"
    )


class RegularPaymentHistory(Base):
    """Single payment made against a regular payment."""

    __tablename__ = "regular_payment_history"

    id = Column(Integer, primary_key=True)
    regular_payment_id = Column(Integer, ForeignKey("regular_payments.id"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    paid_at = Column(DateTime, nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    regular_payment = relationship("RegularPayment", back_populates="history")


def create_session_factory(database_url: str) -> scoped_session:
    """Create a thread-local SQLAlchemy session registry.

    The scheduler thread and request handling each get their own session.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    if database_url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)
    return scoped_session(sessionmaker(bind=engine, expire_on_commit=False))
