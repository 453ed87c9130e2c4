"""Scoped mutation of transaction series."""

from enum import Enum
from typing import Iterable

from pocketledger.domain.entities import SeriesKind, Transaction
from pocketledger.domain.errors import NotFoundError, ScopeResolutionError, transaction_not_found
from pocketledger.domain.series import group_id_of, inconsistency_of, series_kind


class DeleteMode(str, Enum):
    """How far a deletion or update reaches into a series."""

    SINGLE = "single"
    FUTURE = "future"
    ALL = "all"


def resolve_scope(
    series: Iterable[Transaction], target_id: int, mode: DeleteMode
) -> frozenset[int]:
    """Compute the ids affected by a scoped mutation of ``target_id``.

    ``future`` cuts on installment index for installment series and on
    calendar date for recurring series. Members of ``series`` that do not
    share the target's group id are never included.

    Args:
        series: Transactions of the target's series (extra rows are ignored)
        target_id: Transaction the user acted on
        mode: single, future or all

    Returns:
        Non-empty set of ids, always containing ``target_id``

    Raises:
        NotFoundError: If ``target_id`` is not in ``series``
        ScopeResolutionError: If the target's group reference is inconsistent;
            the error's ``safe_scope`` is ``{target_id}``
    """
    mode = DeleteMode(mode)
    members = list(series)
    target = next((txn for txn in members if txn.id == target_id), None)
    if target is None:
        raise NotFoundError(transaction_not_found(target_id))

    reason = inconsistency_of(target)
    if reason is not None:
        raise ScopeResolutionError(
            f"Transaction {target_id} has an inconsistent series reference: {reason}",
            target_id,
        )

    kind = series_kind(target)
    if kind is None or mode is DeleteMode.SINGLE:
        return frozenset({target_id})

    group_id = group_id_of(target)
    same_group = [txn for txn in members if group_id_of(txn) == group_id]

    if mode is DeleteMode.ALL:
        return frozenset(txn.id for txn in same_group)

    if kind is SeriesKind.INSTALLMENT:
        cut = target.installment_index
        affected = {
            txn.id
            for txn in same_group
            if txn.installment_index is not None and txn.installment_index >= cut
        }
    else:
        affected = {txn.id for txn in same_group if txn.date >= target.date}
    affected.add(target_id)
    return frozenset(affected)
