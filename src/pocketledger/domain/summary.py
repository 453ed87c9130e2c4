"""Series summaries computed from stored transactions."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pocketledger.domain.entities import GroupSummary, SeriesKind, Transaction
from pocketledger.domain.series import group_id_of, series_kind


def summarize_group(members: Iterable[Transaction], today: date) -> GroupSummary:
    """Aggregate the members of one series.

    A member counts as paid once its date is on or before ``today``.
    Installment groups report the count stamped on their members at
    creation, so deleting an installment does not shrink the plan. Amounts
    are always summed over the members still stored.

    Raises:
        ValueError: If ``members`` is empty or spans more than one series
    """
    ordered = sorted(members, key=_member_order)
    if not ordered:
        raise ValueError("Cannot summarize an empty series")

    group_ids = {group_id_of(txn) for txn in ordered}
    if len(group_ids) != 1 or None in group_ids:
        raise ValueError("Members must share exactly one series group id")

    first = ordered[0]
    paid = [txn for txn in ordered if txn.date <= today]
    total_amount = sum((txn.amount for txn in ordered), Decimal("0"))
    paid_amount = sum((txn.amount for txn in paid), Decimal("0"))
    kind = series_kind(first)

    return GroupSummary(
        group_id=group_id_of(first),
        kind=kind,
        description=first.description,
        category_id=first.category_id,
        type=first.type,
        total_installments=_planned_count(ordered, kind),
        paid_installments=len(paid),
        monthly_amount=first.amount,
        total_amount=total_amount,
        paid_amount=paid_amount,
        remaining_amount=total_amount - paid_amount,
        first_date=min(txn.date for txn in ordered),
        last_date=max(txn.date for txn in ordered),
    )


def summarize_groups(
    transactions: Iterable[Transaction], today: date, kind: Optional[SeriesKind] = None
) -> list[GroupSummary]:
    """Group transactions by series and summarize each group.

    Standalone transactions are ignored. Results are ordered by first date.
    """
    groups: dict[str, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        if kind is not None and series_kind(txn) is not kind:
            continue
        group_id = group_id_of(txn)
        if group_id is not None:
            groups[group_id].append(txn)

    summaries = [summarize_group(members, today) for members in groups.values()]
    return sorted(summaries, key=lambda s: (s.first_date, s.group_id))


def _member_order(txn: Transaction) -> tuple:
    return (txn.installment_index or 0, txn.date, txn.id)


def _planned_count(members: list[Transaction], kind: SeriesKind) -> int:
    if kind is SeriesKind.INSTALLMENT:
        stamped = [txn.installment_total for txn in members if txn.installment_total]
        if stamped:
            return max(stamped)
    return len(members)
