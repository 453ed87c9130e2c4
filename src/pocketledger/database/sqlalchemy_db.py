"""SQLAlchemy implementation of the pocketledger store."""

from collections import defaultdict
from typing import Optional, Any, Iterable, Mapping
from datetime import date
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import or_

from pocketledger.database.base import Database, UPDATABLE_TRANSACTION_FIELDS
from pocketledger.database.models import (
    Account,
    Category,
    InvoicePayment,
    Transaction,
    create_session_factory,
)
from pocketledger.database.mappers import (
    account_to_domain,
    category_to_domain,
    draft_to_orm,
    transaction_to_domain,
)
from pocketledger.domain.entities import (
    Account as DomainAccount,
    AccountType,
    Category as DomainCategory,
    CategoryType,
    SeriesKind,
    Transaction as DomainTransaction,
    TransactionDraft,
    TransactionType,
)
from pocketledger.domain.errors import ConflictError


class SQLAlchemyDatabase(Database):
    """Database backed by a SQLAlchemy session.

    Every write goes through ``_commit`` so a failed statement leaves the
    session usable and nothing half-written behind. Store failures surface
    as ``ConflictError``; SQLAlchemy exceptions stay inside this module.
    """

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL, e.g. 'sqlite:///path/to.db'
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def _commit(self) -> None:
        session = self._get_session()
        try:
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            reason = getattr(e, "orig", None) or e
            raise ConflictError(f"Store rejected the write: {reason}") from e

    def _by_id(self, model, row_id: int):
        return self._get_session().query(model).filter(model.id == row_id).first()

    def connect(self) -> None:
        """Sessions open lazily on first use."""

    def disconnect(self) -> None:
        """Close the current session, if any."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Tables are created by ``create_session_factory``."""

    # Accounts
    def create_account(
        self,
        name: str,
        account_type: AccountType,
        closing_day: Optional[int] = None,
        due_day: Optional[int] = None,
    ) -> int:
        account = Account(
            name=name,
            account_type=AccountType(account_type).value,
            closing_day=closing_day,
            due_day=due_day,
        )
        self._get_session().add(account)
        self._commit()
        return account.id

    def get_account(self, account_id: int) -> Optional[DomainAccount]:
        account = self._by_id(Account, account_id)
        return account_to_domain(account) if account is not None else None

    def list_accounts(self) -> list[DomainAccount]:
        accounts = self._get_session().query(Account).order_by(Account.name).all()
        return [account_to_domain(acc) for acc in accounts]

    # Categories
    def create_category(
        self,
        name: str,
        parent_id: Optional[int] = None,
        category_type: CategoryType = CategoryType.EXPENSE,
    ) -> int:
        category = Category(
            name=name, parent_id=parent_id, category_type=CategoryType(category_type).value
        )
        self._get_session().add(category)
        self._commit()
        return category.id

    def get_category(self, category_id: int) -> Optional[DomainCategory]:
        category = self._by_id(Category, category_id)
        return category_to_domain(category) if category is not None else None

    def get_category_by_path(self, path: str) -> Optional[DomainCategory]:
        """Walk 'Parent > Child' one level at a time from the roots."""
        session = self._get_session()
        found = None
        for part in (p.strip() for p in path.split(">")):
            parent_filter = (
                Category.parent_id.is_(None) if found is None else Category.parent_id == found.id
            )
            found = session.query(Category).filter(Category.name == part, parent_filter).first()
            if found is None:
                return None
        return category_to_domain(found) if found is not None else None

    def list_all_categories(self) -> list[DomainCategory]:
        categories = self._get_session().query(Category).order_by(Category.name, Category.id).all()
        return [category_to_domain(cat) for cat in categories]

    def get_category_tree(self) -> list[dict[str, Any]]:
        children: dict[Optional[int], list[DomainCategory]] = defaultdict(list)
        for cat in self.list_all_categories():
            children[cat.parent_id].append(cat)

        def nodes(parent_id: Optional[int]) -> list[dict[str, Any]]:
            return [
                {
                    "id": cat.id,
                    "name": cat.name,
                    "parent_id": cat.parent_id,
                    "category_type": cat.category_type,
                    "created_at": cat.created_at,
                    "children": nodes(cat.id),
                }
                for cat in children[parent_id]
            ]

        return nodes(None)

    # Transactions
    def create_transactions(self, drafts: Iterable[TransactionDraft]) -> list[DomainTransaction]:
        rows = [draft_to_orm(draft) for draft in drafts]
        self._get_session().add_all(rows)
        self._commit()
        return [transaction_to_domain(row) for row in rows]

    def get_transaction(self, transaction_id: int) -> Optional[DomainTransaction]:
        txn = self._by_id(Transaction, transaction_id)
        return transaction_to_domain(txn) if txn is not None else None

    def update_transaction(self, transaction_id: int, changes: Mapping[str, Any]) -> None:
        unknown = set(changes) - UPDATABLE_TRANSACTION_FIELDS
        if unknown:
            raise ValueError(f"Cannot update transaction fields: {', '.join(sorted(unknown))}")

        txn = self._by_id(Transaction, transaction_id)
        if txn is None:
            raise ValueError(f"Transaction {transaction_id} not found")

        for field_name, value in changes.items():
            if field_name == "type":
                value = TransactionType(value).value
            elif field_name == "tags":
                value = sorted(value)
            setattr(txn, field_name, value)
        self._commit()

    def delete_transactions(self, transaction_ids: Iterable[int]) -> int:
        ids = set(transaction_ids)
        if not ids:
            return 0
        session = self._get_session()
        deleted = (
            session.query(Transaction)
            .filter(Transaction.id.in_(ids))
            .delete(synchronize_session=False)
        )
        self._commit()
        session.expire_all()
        return deleted

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
        uncategorized: bool = False,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[DomainTransaction]:
        query = self._get_session().query(Transaction)

        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)
        if uncategorized:
            query = query.filter(Transaction.category_id.is_(None))
        elif category_id is not None:
            query = query.filter(Transaction.category_id == category_id)
        if account_id is not None:
            query = query.filter(Transaction.account_id == account_id)
        if transaction_type is not None:
            query = query.filter(Transaction.type == TransactionType(transaction_type).value)

        transactions = query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()
        return [transaction_to_domain(txn) for txn in transactions]

    def _series_rows(self, criterion) -> list[DomainTransaction]:
        rows = (
            self._get_session()
            .query(Transaction)
            .filter(criterion)
            .order_by(Transaction.date, Transaction.id)
            .all()
        )
        return [transaction_to_domain(row) for row in rows]

    def list_series(self, group_id: str) -> list[DomainTransaction]:
        return self._series_rows(
            or_(
                Transaction.installment_group_id == group_id,
                Transaction.recurring_group_id == group_id,
            )
        )

    def list_series_transactions(self, kind: SeriesKind) -> list[DomainTransaction]:
        if SeriesKind(kind) is SeriesKind.INSTALLMENT:
            return self._series_rows(Transaction.installment_group_id.is_not(None))
        return self._series_rows(Transaction.recurring_group_id.is_not(None))

    # Invoice paid state
    def _invoice_payment(
        self, account_id: int, period_start: date, period_end: date
    ) -> Optional[InvoicePayment]:
        return (
            self._get_session()
            .query(InvoicePayment)
            .filter(
                InvoicePayment.account_id == account_id,
                InvoicePayment.period_start == period_start,
                InvoicePayment.period_end == period_end,
            )
            .first()
        )

    def is_invoice_paid(self, account_id: int, period_start: date, period_end: date) -> bool:
        return self._invoice_payment(account_id, period_start, period_end) is not None

    def set_invoice_paid(
        self, account_id: int, period_start: date, period_end: date, paid: bool = True
    ) -> None:
        session = self._get_session()
        payment = self._invoice_payment(account_id, period_start, period_end)
        if paid and payment is None:
            session.add(
                InvoicePayment(account_id=account_id, period_start=period_start, period_end=period_end)
            )
        elif not paid and payment is not None:
            session.delete(payment)
        else:
            return
        self._commit()
