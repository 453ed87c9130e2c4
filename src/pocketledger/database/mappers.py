"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so enum values and tag storage
stay out of the domain entities.
"""

from decimal import Decimal

from pocketledger.domain import entities as domain
from pocketledger.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        created_at=orm_account.created_at,
        closing_day=orm_account.closing_day,
        due_day=orm_account.due_day,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        parent_id=orm_category.parent_id,
        created_at=orm_category.created_at,
        category_type=domain.CategoryType(orm_category.category_type),
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        amount=Decimal(orm_transaction.amount).quantize(Decimal("0.01")),
        type=domain.TransactionType(orm_transaction.type),
        date=orm_transaction.date,
        description=orm_transaction.description,
        category_id=orm_transaction.category_id,
        created_at=orm_transaction.created_at,
        tags=frozenset(orm_transaction.tags or ()),
        installment_group_id=orm_transaction.installment_group_id,
        installment_index=orm_transaction.installment_index,
        installment_total=orm_transaction.installment_total,
        recurring_group_id=orm_transaction.recurring_group_id,
    )


def draft_to_orm(draft: domain.TransactionDraft) -> ORMTransaction:
    """Build an unsaved SQLAlchemy Transaction from a domain draft."""
    return ORMTransaction(
        account_id=draft.account_id,
        category_id=draft.category_id,
        amount=draft.amount,
        type=domain.TransactionType(draft.type).value,
        date=draft.date,
        description=draft.description,
        tags=sorted(draft.tags),
        installment_group_id=draft.installment_group_id,
        installment_index=draft.installment_index,
        installment_total=draft.installment_total,
        recurring_group_id=draft.recurring_group_id,
    )
