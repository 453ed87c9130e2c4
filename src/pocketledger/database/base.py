"""Storage contract used by the pocketledger services.

Services only talk to this interface. Two parts matter beyond plain CRUD:
the transaction store, which writes whole batches atomically and deletes
by id set, and the invoice paid-state store, which keeps a single flag per
``(account, period_start, period_end)``.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any, Iterable, Mapping
from datetime import date

# Import entities directly to avoid circular import through domain/__init__.py
from pocketledger.domain.entities import (
    Account,
    AccountType,
    Category,
    CategoryType,
    SeriesKind,
    Transaction,
    TransactionDraft,
    TransactionType,
)

# Series columns are fixed at creation time
UPDATABLE_TRANSACTION_FIELDS = frozenset(
    {"account_id", "date", "amount", "type", "description", "category_id", "tags"}
)


class Database(ABC):
    """Abstract store for accounts, categories, transactions and invoice state."""

    @abstractmethod
    def connect(self) -> None:
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        pass

    # Accounts
    @abstractmethod
    def create_account(
        self,
        name: str,
        account_type: AccountType,
        closing_day: Optional[int] = None,
        due_day: Optional[int] = None,
    ) -> int:
        """Create an account and return its ID."""

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """All accounts ordered by name."""

    # Categories
    @abstractmethod
    def create_category(
        self,
        name: str,
        parent_id: Optional[int] = None,
        category_type: CategoryType = CategoryType.EXPENSE,
    ) -> int:
        """Create a category and return its ID."""

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        pass

    @abstractmethod
    def get_category_by_path(self, path: str) -> Optional[Category]:
        """Look up a category by its path, e.g. 'Food > Groceries'."""

    @abstractmethod
    def list_all_categories(self) -> list[Category]:
        """Every category regardless of depth, ordered by name."""

    @abstractmethod
    def get_category_tree(self) -> list[dict[str, Any]]:
        """Root categories as dicts, each with a nested 'children' list."""

    # Transaction store
    @abstractmethod
    def create_transactions(self, drafts: Iterable[TransactionDraft]) -> list[Transaction]:
        """Persist a batch of drafts atomically.

        Either every draft is stored or none is. Returns the stored
        transactions in input order.

        Raises:
            ConflictError: If the store rejects the batch
        """

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, changes: Mapping[str, Any]) -> None:
        """Apply ``changes`` (field name to new value) to one transaction.

        Only names in ``UPDATABLE_TRANSACTION_FIELDS`` are accepted. A
        ``category_id`` of None clears the category.

        Raises:
            ValueError: If the transaction is missing or a field is not updatable
        """

    @abstractmethod
    def delete_transactions(self, transaction_ids: Iterable[int]) -> int:
        """Delete the given ids in one commit and return how many were removed."""

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
        uncategorized: bool = False,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions, newest first.

        Args:
            start_date: Inclusive lower date bound
            end_date: Inclusive upper date bound
            category_id: Only this category
            account_id: Only this account
            uncategorized: Only transactions without a category (wins over category_id)
            transaction_type: Only income or only expenses
        """

    @abstractmethod
    def list_series(self, group_id: str) -> list[Transaction]:
        """Members of the installment or recurring series ``group_id``, oldest first."""

    @abstractmethod
    def list_series_transactions(self, kind: SeriesKind) -> list[Transaction]:
        """Every transaction belonging to some series of ``kind``."""

    # Invoice paid-state store
    @abstractmethod
    def is_invoice_paid(self, account_id: int, period_start: date, period_end: date) -> bool:
        """Stored paid flag of an invoice period, False when never recorded."""

    @abstractmethod
    def set_invoice_paid(
        self, account_id: int, period_start: date, period_end: date, paid: bool = True
    ) -> None:
        """Record or clear the paid flag of an invoice period. Idempotent."""
