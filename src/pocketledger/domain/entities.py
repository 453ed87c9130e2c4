"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
database schema. Series membership is expressed only through the nullable
group fields on a transaction; there is no separate series entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class CategoryType(str, Enum):
    """Kind of transactions a category groups."""

    INCOME = "income"
    EXPENSE = "expense"


class AccountType(str, Enum):
    """Kind of account."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    INVESTMENT = "investment"
    OTHER = "other"


class SeriesKind(str, Enum):
    """Kind of series a transaction can belong to."""

    INSTALLMENT = "installment"
    RECURRING = "recurring"


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: int
    name: str
    account_type: AccountType
    created_at: datetime
    closing_day: Optional[int] = None
    due_day: Optional[int] = None


@dataclass(frozen=True)
class Category:
    """Category domain entity with hierarchical structure."""

    id: int
    name: str
    parent_id: Optional[int]
    created_at: datetime
    category_type: CategoryType = CategoryType.EXPENSE


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction that has not been persisted yet."""

    account_id: int
    amount: Decimal
    type: TransactionType
    date: date
    description: Optional[str] = None
    category_id: Optional[int] = None
    tags: frozenset[str] = field(default_factory=frozenset)
    installment_group_id: Optional[str] = None
    installment_index: Optional[int] = None
    installment_total: Optional[int] = None
    recurring_group_id: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    account_id: int
    amount: Decimal
    type: TransactionType
    date: date
    description: Optional[str]
    category_id: Optional[int]
    created_at: datetime
    tags: frozenset[str] = field(default_factory=frozenset)
    installment_group_id: Optional[str] = None
    installment_index: Optional[int] = None
    installment_total: Optional[int] = None
    recurring_group_id: Optional[str] = None


@dataclass(frozen=True)
class SeriesPlan:
    """Planned series of monthly transactions. Never persisted itself."""

    group_id: str
    kind: SeriesKind
    total_count: int
    unit_amount: Decimal
    start_date: date
    drafts: tuple[TransactionDraft, ...]
    cadence: str = "monthly"

    @property
    def total_amount(self) -> Decimal:
        return sum((d.amount for d in self.drafts), Decimal("0"))


@dataclass(frozen=True)
class GroupSummary:
    """Read-side aggregate over all members of one series."""

    group_id: str
    kind: SeriesKind
    description: Optional[str]
    category_id: Optional[int]
    type: TransactionType
    total_installments: int
    paid_installments: int
    monthly_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    first_date: date
    last_date: date

    @property
    def pending_installments(self) -> int:
        return self.total_installments - self.paid_installments

    @property
    def is_active(self) -> bool:
        """True while stored members dated after today remain unpaid."""
        return self.remaining_amount > 0


@dataclass(frozen=True)
class PeriodSummary:
    """Income and expense totals over a date range."""

    start_date: Optional[date]
    end_date: Optional[date]
    total_income: Decimal
    total_expense: Decimal
    transaction_count: int

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class CategoryTotal:
    """Expense total of one category and its share of all expenses."""

    category_id: Optional[int]
    category_name: str
    total: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class OfxCandidate:
    """A transaction parsed from a bank statement, awaiting reconciliation."""

    date: date
    amount: Decimal
    type: TransactionType
    description: str
    suggested_category_id: Optional[int] = None
    fit_id: Optional[str] = None


@dataclass(frozen=True)
class InvoicePeriod:
    """Credit-card billing period with its aggregated charges."""

    account_id: int
    period_start: date
    period_end: date
    closing_day: int
    due_day: Optional[int]
    total: Decimal
    is_paid: bool
    transactions: tuple[Transaction, ...] = ()
