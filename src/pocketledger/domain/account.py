"""Account domain service."""

import logging
from datetime import date
from typing import Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Account as AccountEntity,
    AccountType,
    InvoicePeriod,
)
from pocketledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
)
from pocketledger.domain.invoice import aggregate, resolve_current_period

logger = logging.getLogger(__name__)


def _check_day(value: Optional[int], label: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 31:
        raise ValidationError(f"{label} must be between 1 and 31, got {value!r}")


class AccountService:
    """Service for managing accounts and credit-card invoices."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        account_type: AccountType | str = AccountType.CHECKING,
        closing_day: Optional[int] = None,
        due_day: Optional[int] = None,
    ) -> int:
        """Create a new account.

        Args:
            name: Account name
            account_type: Kind of account
            closing_day: Day of month a credit card closes (required for credit cards)
            due_day: Day of month a credit card invoice is due

        Returns:
            Account ID

        Raises:
            ValidationError: If type or billing days are invalid
            ConflictError: If account name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Account name cannot be empty")
        try:
            account_type = AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Unknown account type '{account_type}'")

        _check_day(closing_day, "Closing day")
        _check_day(due_day, "Due day")
        if account_type is AccountType.CREDIT_CARD and closing_day is None:
            raise ValidationError("Credit card accounts require a closing day")

        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(
            name=name, account_type=account_type, closing_day=closing_day, due_day=due_day
        )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts."""
        return self.db.list_accounts()

    def resolve_account(self, reference: str | int) -> int:
        """Turn an account ID or name into an account ID.

        Digits are read as an ID. Names match case-insensitively after trimming.

        Raises:
            NotFoundError: If no account matches
        """
        if isinstance(reference, int) or str(reference).strip().isdigit():
            return self.require_account(int(reference)).id

        wanted = str(reference).strip().casefold()
        matches = [acc for acc in self.db.list_accounts() if acc.name.casefold() == wanted]
        if not matches:
            raise NotFoundError(f"Account '{reference}' not found")
        return matches[0].id

    def _require_credit_card(self, account_id: int) -> AccountEntity:
        account = self.require_account(account_id)
        if account.account_type is not AccountType.CREDIT_CARD or account.closing_day is None:
            raise ValidationError(f"Account {account_id} is not a credit card with a closing day")
        return account

    def get_current_invoice(
        self, account_id: int, reference_date: Optional[date] = None
    ) -> InvoicePeriod:
        """Compute the invoice period containing ``reference_date``.

        Totals are recomputed from stored transactions on every call; only the
        paid flag is read from storage.

        Args:
            account_id: Credit card account ID
            reference_date: Date to locate (defaults to today)

        Returns:
            InvoicePeriod with total, paid state and member transactions

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If the account is not a credit card
        """
        account = self._require_credit_card(account_id)
        reference_date = reference_date or date.today()

        period_start, period_end = resolve_current_period(account.closing_day, reference_date)
        transactions = self.db.list_transactions(
            start_date=period_start, end_date=period_end, account_id=account_id
        )
        total, members = aggregate(period_start, period_end, transactions, account_id)

        return InvoicePeriod(
            account_id=account_id,
            period_start=period_start,
            period_end=period_end,
            closing_day=account.closing_day,
            due_day=account.due_day,
            total=total,
            is_paid=self.db.is_invoice_paid(account_id, period_start, period_end),
            transactions=tuple(members),
        )

    def mark_invoice_paid(
        self, account_id: int, period_start: date, period_end: date, paid: bool = True
    ) -> None:
        """Record (or clear) the paid state of an invoice period.

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If the account is not a credit card or the range is inverted
        """
        self._require_credit_card(account_id)
        if period_start > period_end:
            raise ValidationError("Invoice period start must not be after its end")
        self.db.set_invoice_paid(account_id, period_start, period_end, paid=paid)
        logger.info(
            "Invoice %s..%s of account %s marked %s",
            period_start,
            period_end,
            account_id,
            "paid" if paid else "unpaid",
        )
