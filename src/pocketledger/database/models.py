"""SQLAlchemy models for pocketledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    JSON,
    Index,
    UniqueConstraint,
    CheckConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    account_type = Column(String, nullable=False, default="checking")
    closing_day = Column(Integer, nullable=True)
    due_day = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")
    invoice_payments = relationship("InvoicePayment", back_populates="account", cascade="all, delete-orphan")


class Category(Base):
    """Category model with hierarchical structure."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    category_type = Column(String, nullable=False, default="expense")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model.

    Series membership lives in the nullable group columns; rows sharing a
    group id form one series.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    installment_group_id = Column(String(36), nullable=True)
    installment_index = Column(Integer, nullable=True)
    installment_total = Column(Integer, nullable=True)
    recurring_group_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        CheckConstraint(
            "installment_group_id IS NULL OR recurring_group_id IS NULL",
            name="ck_transaction_single_series",
        ),
        Index("ix_transactions_installment_group", "installment_group_id"),
        Index("ix_transactions_recurring_group", "recurring_group_id"),
        Index("ix_transactions_account_date", "account_id", "date"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


class InvoicePayment(Base):
    """Paid state of a credit-card invoice period."""

    __tablename__ = "invoice_payments"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    paid_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("account_id", "period_start", "period_end", name="uq_invoice_period"),
    )

    account = relationship("Account", back_populates="invoice_payments")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
