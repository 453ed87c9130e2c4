"""Credit-card invoice period resolution."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from dateutil.relativedelta import relativedelta

from pocketledger.domain.entities import Transaction, TransactionType
from pocketledger.domain.errors import ValidationError


def _closing_date(year: int, month: int, closing_day: int) -> date:
    """Closing date of a month, clamped to its last day."""
    return date(year, month, 1) + relativedelta(day=closing_day)


def resolve_current_period(closing_day: int, reference_date: date) -> tuple[date, date]:
    """Return the billing period ``reference_date`` falls into.

    A period runs from the day after the previous closing date up to and
    including the current closing date.

    Args:
        closing_day: Day of month the card closes (1-31)
        reference_date: Date to locate

    Returns:
        Tuple of (period_start, period_end)

    Raises:
        ValidationError: If closing_day is outside 1-31
    """
    if isinstance(closing_day, bool) or not isinstance(closing_day, int) or not 1 <= closing_day <= 31:
        raise ValidationError(f"Closing day must be between 1 and 31, got {closing_day!r}")

    this_month_end = _closing_date(reference_date.year, reference_date.month, closing_day)
    if reference_date <= this_month_end:
        period_end = this_month_end
    else:
        following = reference_date.replace(day=1) + relativedelta(months=1)
        period_end = _closing_date(following.year, following.month, closing_day)

    previous = period_end.replace(day=1) - relativedelta(months=1)
    period_start = _closing_date(previous.year, previous.month, closing_day) + timedelta(days=1)
    return period_start, period_end


def aggregate(
    period_start: date,
    period_end: date,
    transactions: Iterable[Transaction],
    account_id: int,
) -> tuple[Decimal, list[Transaction]]:
    """Sum the expenses of ``account_id`` inside an inclusive date range.

    Returns:
        Tuple of (total, member transactions ordered by date)
    """
    members = sorted(
        (
            txn
            for txn in transactions
            if txn.account_id == account_id
            and txn.type == TransactionType.EXPENSE
            and period_start <= txn.date <= period_end
        ),
        key=lambda txn: (txn.date, txn.id),
    )
    total = sum((abs(txn.amount) for txn in members), Decimal("0"))
    return total, members
