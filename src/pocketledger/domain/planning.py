"""Installment and recurring series planning.

Both planners are pure: they validate their input and return a SeriesPlan
holding every draft of the series, or raise before producing anything.
"""

from datetime import date
from decimal import Decimal, ROUND_DOWN
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from pocketledger.domain.entities import (
    SeriesKind,
    SeriesPlan,
    TransactionDraft,
    TransactionType,
)
from pocketledger.domain.errors import ValidationError, series_count_out_of_range
from pocketledger.domain.series import new_group_id

MIN_SERIES_COUNT = 2
MAX_SERIES_COUNT = 60
CENT = Decimal("0.01")


def add_months(start: date, months: int) -> date:
    """Return ``start`` advanced by ``months`` calendar months.

    The day of month is clamped to the last valid day of the target month
    (Jan 31 + 1 month is Feb 28/29). Always offset from the original start so
    a clamp in one month does not carry into later months.
    """
    return start + relativedelta(months=months)


def validate_amount(amount: Decimal, field_name: str = "Amount") -> Decimal:
    """Check an amount is positive with at most two decimal places.

    Returns:
        The amount quantized to cents

    Raises:
        ValidationError: If the amount is not a positive cent value
    """
    if not isinstance(amount, Decimal):
        try:
            amount = Decimal(str(amount))
        except ArithmeticError:
            raise ValidationError(f"{field_name} must be a number, got {amount!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name} must be greater than zero, got {amount}")
    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise ValidationError(f"{field_name} must have at most two decimal places, got {amount}")
    return quantized


def validate_count(count: int) -> int:
    """Check a series count is an integer in the allowed range."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(series_count_out_of_range(count, MIN_SERIES_COUNT, MAX_SERIES_COUNT))
    if not MIN_SERIES_COUNT <= count <= MAX_SERIES_COUNT:
        raise ValidationError(series_count_out_of_range(count, MIN_SERIES_COUNT, MAX_SERIES_COUNT))
    return count


def _validate_start(start_date: Optional[date]) -> date:
    if start_date is None:
        raise ValidationError("Start date is required")
    return start_date


def split_principal(principal: Decimal, count: int) -> list[Decimal]:
    """Split a principal into ``count`` cent amounts summing exactly to it.

    Every installment gets the floored unit; the last one absorbs the
    remainder.
    """
    unit = (principal / count).quantize(CENT, rounding=ROUND_DOWN)
    last = principal - unit * (count - 1)
    return [unit] * (count - 1) + [last]


def plan_installments(
    principal: Decimal,
    count: int,
    start_date: date,
    *,
    account_id: int,
    transaction_type: TransactionType = TransactionType.EXPENSE,
    description: Optional[str] = None,
    category_id: Optional[int] = None,
    tags: Iterable[str] = (),
    group_id: Optional[str] = None,
) -> SeriesPlan:
    """Plan a purchase split into ``count`` monthly installments.

    Args:
        principal: Total amount of the purchase
        count: Number of installments, 2 to 60
        start_date: Date of the first installment
        account_id: Account charged by every installment
        transaction_type: Type shared by all installments
        description: Optional description shared by all installments
        category_id: Optional category shared by all installments
        tags: Optional tags shared by all installments
        group_id: Group id to stamp; a fresh one is generated when omitted

    Returns:
        SeriesPlan with ``count`` drafts

    Raises:
        ValidationError: If count, principal or start date is invalid
    """
    principal = validate_amount(principal, "Principal")
    count = validate_count(count)
    if principal < CENT * count:
        raise ValidationError(f"Principal {principal} is too small to split into {count} installments")
    start_date = _validate_start(start_date)
    group_id = group_id or new_group_id()
    tag_set = frozenset(tags)

    drafts = tuple(
        TransactionDraft(
            account_id=account_id,
            amount=amount,
            type=transaction_type,
            date=add_months(start_date, i),
            description=description,
            category_id=category_id,
            tags=tag_set,
            installment_group_id=group_id,
            installment_index=i + 1,
            installment_total=count,
        )
        for i, amount in enumerate(split_principal(principal, count))
    )
    return SeriesPlan(
        group_id=group_id,
        kind=SeriesKind.INSTALLMENT,
        total_count=count,
        unit_amount=drafts[0].amount,
        start_date=start_date,
        drafts=drafts,
    )


def plan_recurring(
    monthly_amount: Decimal,
    count: int,
    start_date: date,
    *,
    account_id: int,
    transaction_type: TransactionType = TransactionType.EXPENSE,
    description: Optional[str] = None,
    category_id: Optional[int] = None,
    tags: Iterable[str] = (),
    group_id: Optional[str] = None,
) -> SeriesPlan:
    """Plan a fixed monthly charge materialized as ``count`` transactions.

    Every draft carries the same amount. Arguments mirror
    ``plan_installments``.
    """
    monthly_amount = validate_amount(monthly_amount, "Monthly amount")
    count = validate_count(count)
    start_date = _validate_start(start_date)
    group_id = group_id or new_group_id()
    tag_set = frozenset(tags)

    drafts = tuple(
        TransactionDraft(
            account_id=account_id,
            amount=monthly_amount,
            type=transaction_type,
            date=add_months(start_date, i),
            description=description,
            category_id=category_id,
            tags=tag_set,
            recurring_group_id=group_id,
        )
        for i in range(count)
    )
    return SeriesPlan(
        group_id=group_id,
        kind=SeriesKind.RECURRING,
        total_count=count,
        unit_amount=monthly_amount,
        start_date=start_date,
        drafts=drafts,
    )
