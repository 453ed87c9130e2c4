"""Tests for database mappers."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from pocketledger.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)
from pocketledger.database.mappers import (
    account_to_domain,
    category_to_domain,
    draft_to_orm,
    transaction_to_domain,
)
from pocketledger.domain.entities import (
    Account,
    AccountType,
    Category,
    CategoryType,
    Transaction,
    TransactionDraft,
    TransactionType,
)


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        orm_account = ORMAccount(
            id=1,
            name="Visa",
            account_type="credit_card",
            closing_day=10,
            due_day=20,
            created_at=datetime.now(UTC),
        )
        domain_account = account_to_domain(orm_account)

        assert isinstance(domain_account, Account)
        assert domain_account.account_type is AccountType.CREDIT_CARD
        assert domain_account.closing_day == 10
        assert domain_account.due_day == 20
        assert domain_account.created_at == orm_account.created_at


class TestCategoryMapper:
    """Tests for Category mapper."""

    def test_category_to_domain(self):
        """Test converting ORM Category to domain Category."""
        orm_category = ORMCategory(
            id=2,
            name="Salary",
            parent_id=None,
            category_type="income",
            created_at=datetime.now(UTC),
        )
        domain_category = category_to_domain(orm_category)

        assert isinstance(domain_category, Category)
        assert domain_category.category_type is CategoryType.INCOME
        assert domain_category.parent_id is None


class TestTransactionMapper:
    """Tests for Transaction mapper."""

    def test_transaction_to_domain(self):
        """Test converting ORM Transaction to domain Transaction."""
        orm_transaction = ORMTransaction(
            id=5,
            account_id=1,
            category_id=None,
            amount=Decimal("33.3"),
            type="expense",
            date=date(2024, 2, 29),
            description="Laptop",
            tags=["tech", "work"],
            installment_group_id="g-1",
            installment_index=2,
            installment_total=3,
            recurring_group_id=None,
            created_at=datetime.now(UTC),
        )
        txn = transaction_to_domain(orm_transaction)

        assert isinstance(txn, Transaction)
        assert txn.amount == Decimal("33.30")
        assert str(txn.amount) == "33.30"
        assert txn.type is TransactionType.EXPENSE
        assert txn.tags == frozenset({"tech", "work"})
        assert (txn.installment_group_id, txn.installment_index, txn.installment_total) == ("g-1", 2, 3)

    def test_transaction_without_tags(self):
        orm_transaction = ORMTransaction(
            id=6,
            account_id=1,
            amount=Decimal("1.00"),
            type="income",
            date=date(2024, 1, 1),
            tags=None,
            created_at=datetime.now(UTC),
        )
        assert transaction_to_domain(orm_transaction).tags == frozenset()

    def test_draft_to_orm(self):
        draft = TransactionDraft(
            account_id=1,
            amount=Decimal("49.90"),
            type=TransactionType.EXPENSE,
            date=date(2024, 1, 31),
            tags=frozenset({"b", "a"}),
            recurring_group_id="r-1",
        )
        row = draft_to_orm(draft)

        assert row.id is None
        assert row.type == "expense"
        assert row.tags == ["a", "b"]
        assert row.recurring_group_id == "r-1"
        assert row.installment_group_id is None
