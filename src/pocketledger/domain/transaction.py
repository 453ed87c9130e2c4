"""Transaction domain service."""

import logging
from typing import Iterable, Optional
from datetime import date
from decimal import Decimal

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    GroupSummary,
    SeriesKind,
    SeriesPlan,
    Transaction as TransactionEntity,
    TransactionDraft,
    TransactionType,
)
from pocketledger.domain.errors import (
    NotFoundError,
    ScopeResolutionError,
    ValidationError,
    account_not_found,
    category_not_found,
    category_path_not_found,
    series_not_found,
    transaction_not_found,
)
from pocketledger.domain.planning import plan_installments, plan_recurring, validate_amount
from pocketledger.domain.scope import DeleteMode, resolve_scope
from pocketledger.domain.series import group_id_of, series_kind
from pocketledger.domain.summary import summarize_groups

logger = logging.getLogger(__name__)


def _coerce_type(transaction_type: TransactionType | str) -> TransactionType:
    try:
        return TransactionType(transaction_type)
    except ValueError:
        raise ValidationError(f"Transaction type must be 'income' or 'expense', got {transaction_type!r}")


def _normalize_tags(tags: Iterable[str]) -> frozenset[str]:
    return frozenset(tag.strip() for tag in tags if tag and tag.strip())


class TransactionService:
    """Service for managing transactions and transaction series."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _verify_references(self, account_id: int, category_id: Optional[int]) -> None:
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    def create_transaction(
        self,
        account_id: int,
        amount: Decimal,
        transaction_type: TransactionType | str,
        date: date,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        tags: Iterable[str] = (),
    ) -> int:
        """Create a standalone transaction.

        Args:
            account_id: Account ID
            amount: Positive transaction amount
            transaction_type: income or expense
            date: Transaction date
            description: Optional description
            category_id: Optional category ID
            tags: Optional tags

        Returns:
            Transaction ID

        Raises:
            ValidationError: If amount, type or date is invalid
            NotFoundError: If account or category doesn't exist
        """
        amount = validate_amount(amount)
        transaction_type = _coerce_type(transaction_type)
        if date is None:
            raise ValidationError("Transaction date is required")
        self._verify_references(account_id, category_id)

        draft = TransactionDraft(
            account_id=account_id,
            amount=amount,
            type=transaction_type,
            date=date,
            description=description,
            category_id=category_id,
            tags=_normalize_tags(tags),
        )
        (created,) = self.db.create_transactions([draft])
        return created.id

    def _persist_plan(self, plan: SeriesPlan) -> list[TransactionEntity]:
        created = self.db.create_transactions(plan.drafts)
        logger.info(
            "Created %s series %s with %d transactions from %s",
            plan.kind.value,
            plan.group_id,
            plan.total_count,
            plan.start_date,
        )
        return created

    def create_installment_purchase(
        self,
        account_id: int,
        principal: Decimal,
        installments: int,
        start_date: date,
        transaction_type: TransactionType | str = TransactionType.EXPENSE,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        tags: Iterable[str] = (),
    ) -> list[TransactionEntity]:
        """Split a purchase into monthly installments and store them all.

        The plan is fully validated before anything is written, and the batch
        is stored all-or-nothing.

        Returns:
            Stored installments ordered by index

        Raises:
            ValidationError: If the plan input is invalid
            NotFoundError: If account or category doesn't exist
        """
        transaction_type = _coerce_type(transaction_type)
        plan = plan_installments(
            principal,
            installments,
            start_date,
            account_id=account_id,
            transaction_type=transaction_type,
            description=description,
            category_id=category_id,
            tags=_normalize_tags(tags),
        )
        self._verify_references(account_id, category_id)
        return self._persist_plan(plan)

    def create_recurring_expense(
        self,
        account_id: int,
        monthly_amount: Decimal,
        recurrences: int,
        start_date: date,
        transaction_type: TransactionType | str = TransactionType.EXPENSE,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        tags: Iterable[str] = (),
    ) -> list[TransactionEntity]:
        """Materialize a fixed monthly charge as future transactions.

        Returns:
            Stored occurrences ordered by date

        Raises:
            ValidationError: If the plan input is invalid
            NotFoundError: If account or category doesn't exist
        """
        transaction_type = _coerce_type(transaction_type)
        plan = plan_recurring(
            monthly_amount,
            recurrences,
            start_date,
            account_id=account_id,
            transaction_type=transaction_type,
            description=description,
            category_id=category_id,
            tags=_normalize_tags(tags),
        )
        self._verify_references(account_id, category_id)
        return self._persist_plan(plan)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def update_transaction(
        self,
        transaction_id: int,
        account_id: Optional[int] = None,
        date: Optional[date] = None,
        amount: Optional[Decimal] = None,
        transaction_type: Optional[TransactionType | str] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
        clear_category: bool = False,
    ) -> None:
        """Update transaction fields.

        Series fields are never touched. Moving a series member to another
        date or amount is allowed and only affects that member.

        Raises:
            NotFoundError: If transaction, account or category doesn't exist
            ValidationError: If new values are invalid
        """
        self.require_transaction(transaction_id)
        changes = {}

        if account_id is not None:
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))
            changes["account_id"] = account_id
        if date is not None:
            changes["date"] = date
        if amount is not None:
            changes["amount"] = validate_amount(amount)
        if transaction_type is not None:
            changes["type"] = _coerce_type(transaction_type)
        if description is not None:
            changes["description"] = description
        if tags is not None:
            changes["tags"] = _normalize_tags(tags)

        if clear_category:
            if category_id is not None:
                raise ValidationError("Cannot set both category_id and clear_category")
            changes["category_id"] = None
        elif category_id is not None:
            if self.db.get_category(category_id) is None:
                raise NotFoundError(category_not_found(category_id))
            changes["category_id"] = category_id

        if changes:
            self.db.update_transaction(transaction_id, changes)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a single transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self.require_transaction(transaction_id)
        self.db.delete_transactions([transaction_id])

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_path: Optional[str] = None,
        account_id: Optional[int] = None,
        transaction_type: Optional[TransactionType | str] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            category_path: Optional category path filter (empty string for uncategorized)
            account_id: Optional account ID filter
            transaction_type: Optional income/expense filter

        Returns:
            List of transaction entities, newest first
        """
        category_id = None
        uncategorized = False
        if category_path is not None:
            if category_path == "":
                uncategorized = True
            else:
                category = self.db.get_category_by_path(category_path)
                if category is None:
                    raise NotFoundError(category_path_not_found(category_path))
                category_id = category.id

        if transaction_type is not None:
            transaction_type = _coerce_type(transaction_type)

        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
            account_id=account_id,
            uncategorized=uncategorized,
            transaction_type=transaction_type,
        )

    def list_series(self, group_id: str) -> list[TransactionEntity]:
        """List the members of a series ordered by date.

        Raises:
            NotFoundError: If no transaction carries ``group_id``
        """
        members = self.db.list_series(group_id)
        if not members:
            raise NotFoundError(series_not_found(group_id))
        return members

    def resolve_delete_scope(self, transaction_id: int, mode: DeleteMode | str) -> frozenset[int]:
        """Compute the ids a scoped deletion of ``transaction_id`` would remove.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If mode is unknown
            ScopeResolutionError: If the transaction's series reference is inconsistent
        """
        try:
            mode = DeleteMode(mode)
        except ValueError:
            raise ValidationError(f"Delete mode must be single, future or all, got {mode!r}")

        target = self.require_transaction(transaction_id)
        group_id = group_id_of(target)
        series = self.db.list_series(group_id) if group_id is not None else [target]
        if all(txn.id != transaction_id for txn in series):
            series = [*series, target]
        return resolve_scope(series, transaction_id, mode)

    def delete_with_scope(
        self,
        transaction_id: int,
        mode: DeleteMode | str,
        allow_safe_fallback: bool = False,
    ) -> int:
        """Delete a transaction and, depending on ``mode``, its series siblings.

        The affected set is computed before anything is deleted.

        Args:
            transaction_id: Transaction the user acted on
            mode: single, future or all
            allow_safe_fallback: When the series reference is inconsistent,
                delete only the target instead of raising

        Returns:
            Number of deleted transactions

        Raises:
            NotFoundError: If the transaction doesn't exist
            ScopeResolutionError: If the series reference is inconsistent and
                ``allow_safe_fallback`` is False
        """
        try:
            ids = self.resolve_delete_scope(transaction_id, mode)
        except ScopeResolutionError as e:
            logger.warning("Series integrity fault: %s", e)
            if not allow_safe_fallback:
                raise
            ids = e.safe_scope

        deleted = self.db.delete_transactions(ids)
        logger.info("Deleted %d transaction(s) for %s scope of %s", deleted, DeleteMode(mode).value, transaction_id)
        return deleted

    def installment_groups(
        self, today: Optional[date] = None, active_only: bool = False
    ) -> list[GroupSummary]:
        """Summaries of every installment series.

        Args:
            today: Reference date for paid members, defaults to today
            active_only: Only return purchases that still have unpaid installments
        """
        today = today or date.today()
        groups = summarize_groups(
            self.db.list_series_transactions(SeriesKind.INSTALLMENT), today, SeriesKind.INSTALLMENT
        )
        if active_only:
            groups = [group for group in groups if group.is_active]
        return groups

    def recurring_groups(self, today: Optional[date] = None) -> list[GroupSummary]:
        """Summaries of every recurring series."""
        today = today or date.today()
        return summarize_groups(
            self.db.list_series_transactions(SeriesKind.RECURRING), today, SeriesKind.RECURRING
        )

    def cancel_recurring(self, group_id: str, today: Optional[date] = None) -> int:
        """Stop a recurring expense by deleting its occurrences after ``today``.

        Past occurrences are kept as history.

        Returns:
            Number of deleted occurrences

        Raises:
            NotFoundError: If the series doesn't exist
            ValidationError: If ``group_id`` is not a recurring series
        """
        today = today or date.today()
        members = self.list_series(group_id)
        if any(series_kind(txn) is not SeriesKind.RECURRING for txn in members):
            raise ValidationError(f"Series '{group_id}' is not a recurring expense")

        future_ids = [txn.id for txn in members if txn.date > today]
        deleted = self.db.delete_transactions(future_ids)
        logger.info("Cancelled recurring series %s: %d future occurrence(s) deleted", group_id, deleted)
        return deleted
