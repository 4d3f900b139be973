"""
SQLAlchemy ORM models (ledger records)

transactions is the source of truth; budgets.spent_amount, debts.remaining_amount
and savings_goals.current_amount are derived state maintained by the use cases.
"""
from decimal import Decimal
from datetime import date as date_type, datetime
from sqlalchemy import (
    JSON, String, DateTime, Integer, Text, Date, Boolean, Numeric, ForeignKey, UniqueConstraint, Index, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finledger.infrastructure.db.session import Base
from finledger.utils.clock import utcnow


class CategoryRecord(Base):
    """
    Grouping key for transactions and budgets (income / expense)
    """
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)  # NULL = shared default
    kind: Mapped[str] = mapped_column(String(16), nullable=False)  # income, expense
    icon: Mapped[str | None] = mapped_column(String(16), nullable=True)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    labels: Mapped[list["CategoryLabel"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class CategoryLabel(Base):
    """
    One localized label of a category (language code + text)
    """
    __tablename__ = "category_labels"

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    text: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[CategoryRecord] = relationship(back_populates="labels")

    __table_args__ = (
        UniqueConstraint("category_id", "language", name="uq_category_label_language"),
    )


class TransactionRecord(Base):
    """
    Ledger entry: income, expense or transfer
    """
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    category_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    kind: Mapped[str] = mapped_column(String(16), nullable=False, index=True)  # income, expense, transfer
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # {"en": "...", "fr": "..."} - display data only
    descriptions: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_transactions_owner_category_occurred", "owner_id", "category_id", "occurred_at"),
    )


class DebtRecord(Base):
    """
    Money owed to the owner or by the owner

    Mutated only through payment / settlement / cancellation / correction.
    """
    __tablename__ = "debts"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    creditor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    debtor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    debt_type: Mapped[str] = mapped_column(String(16), nullable=False)  # owed_to_me, i_owe, loan, credit_card

    original_amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")
    interest_rate: Mapped[Decimal] = mapped_column(Numeric(precision=7, scale=4), nullable=False, default=Decimal("0"))
    minimum_payment: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    payment_frequency: Mapped[str | None] = mapped_column(String(16), nullable=True)

    debt_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    due_date: Mapped[date_type | None] = mapped_column(Date, nullable=True, index=True)

    priority: Mapped[str] = mapped_column(String(8), nullable=False)  # low, medium, high
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")  # active, paid, cancelled
    is_settled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    settlement_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)

    category_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("remaining_amount >= 0 AND remaining_amount <= original_amount", name="ck_debts_remaining"),
    )


class BudgetRecord(Base):
    """
    Spending cap for one category over one period window

    spent_amount is a cache, rebuilt by reconciliation from transactions.
    """
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    category_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")

    period: Mapped[str] = mapped_column(String(16), nullable=False)  # weekly, monthly, yearly
    start_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    end_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)  # NULL = still open

    spent_amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False, default=Decimal("0"))
    alert_threshold: Mapped[Decimal] = mapped_column(Numeric(precision=5, scale=4), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reconciled_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_budgets_owner_category_active", "owner_id", "category_id", "is_active"),
    )


class SavingsGoalRecord(Base):
    """
    Savings goal; current_amount only moves through contributions
    """
    __tablename__ = "savings_goals"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")
    target_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    priority: Mapped[str] = mapped_column(String(8), nullable=False, default="medium")

    is_achieved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    achievement_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("current_amount >= 0 AND current_amount <= target_amount", name="ck_savings_goals_current"),
    )
