"""Period reports: income and expense totals, expenses by category."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from pocketledger.database.base import Database
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import CategoryTotal, PeriodSummary, TransactionType
from pocketledger.domain.errors import ValidationError

UNCATEGORIZED_NAME = "Uncategorized"

_CENT = Decimal("0.01")


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError(f"Start date {start_date} is after end date {end_date}")


class ReportService:
    """Service for building period reports from stored transactions."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def summary(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> PeriodSummary:
        """Total income and expenses between two dates, both inclusive.

        Args:
            start_date: Optional start date
            end_date: Optional end date
            account_id: Only count this account

        Returns:
            PeriodSummary whose ``balance`` is income minus expenses

        Raises:
            ValidationError: If the start date is after the end date
        """
        _check_range(start_date, end_date)
        transactions = self.db.list_transactions(
            start_date=start_date, end_date=end_date, account_id=account_id
        )
        income = sum(
            (t.amount for t in transactions if t.type is TransactionType.INCOME), Decimal("0")
        )
        expense = sum(
            (t.amount for t in transactions if t.type is TransactionType.EXPENSE), Decimal("0")
        )
        return PeriodSummary(
            start_date=start_date,
            end_date=end_date,
            total_income=income,
            total_expense=expense,
            transaction_count=len(transactions),
        )

    def by_category(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[CategoryTotal]:
        """Expense totals per category, largest first.

        Each transaction counts toward its own category only; uncategorized
        expenses are reported under UNCATEGORIZED_NAME. Percentages are of
        all expenses in the range and rounded to cents.

        Raises:
            ValidationError: If the start date is after the end date
        """
        _check_range(start_date, end_date)
        expenses = self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            transaction_type=TransactionType.EXPENSE,
        )
        totals: dict[Optional[int], Decimal] = defaultdict(Decimal)
        for txn in expenses:
            totals[txn.category_id] += txn.amount

        grand_total = sum(totals.values(), Decimal("0"))
        category_service = CategoryService(self.db)
        rows = []
        for category_id, total in totals.items():
            name = ""
            if category_id is not None:
                name = category_service.format_category_path(category_id)
            percentage = (total / grand_total * 100).quantize(_CENT) if grand_total else Decimal("0")
            rows.append(
                CategoryTotal(
                    category_id=category_id,
                    category_name=name or UNCATEGORIZED_NAME,
                    total=total,
                    percentage=percentage,
                )
            )
        return sorted(rows, key=lambda row: (-row.total, row.category_name))
