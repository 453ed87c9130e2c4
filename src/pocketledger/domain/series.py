"""Series identity helpers.

A series is the set of transactions sharing one group id. Group ids are
generated once per planning operation; membership is inferred purely from
the group fields on each transaction.
"""

import uuid
from typing import Optional, Union

from pocketledger.domain.entities import SeriesKind, Transaction, TransactionDraft
from pocketledger.domain.errors import ValidationError

SeriesMember = Union[Transaction, TransactionDraft]


def new_group_id() -> str:
    """Return a fresh series group id."""
    return str(uuid.uuid4())


def series_kind(txn: SeriesMember) -> Optional[SeriesKind]:
    """Return the kind of series a transaction belongs to, if any.

    Installment membership wins when both group ids are set; such a
    transaction is reported by ``inconsistency_of``.
    """
    if txn.installment_group_id is not None:
        return SeriesKind.INSTALLMENT
    if txn.recurring_group_id is not None:
        return SeriesKind.RECURRING
    return None


def group_id_of(txn: SeriesMember) -> Optional[str]:
    """Return the group id of a transaction, or None if standalone."""
    kind = series_kind(txn)
    if kind is SeriesKind.INSTALLMENT:
        return txn.installment_group_id
    if kind is SeriesKind.RECURRING:
        return txn.recurring_group_id
    return None


def check_series_fields(
    installment_group_id: Optional[str],
    installment_index: Optional[int],
    installment_total: Optional[int],
    recurring_group_id: Optional[str],
) -> None:
    """Validate series fields before a transaction is created.

    Raises:
        ValidationError: If the fields describe both series kinds or an
            incomplete installment reference
    """
    if installment_group_id is not None and recurring_group_id is not None:
        raise ValidationError("A transaction cannot belong to both an installment and a recurring series")

    has_index = installment_index is not None or installment_total is not None
    if installment_group_id is None:
        if has_index:
            raise ValidationError("Installment index/total require an installment group id")
        return

    if installment_index is None or installment_total is None:
        raise ValidationError("Installment members need both an index and a total")
    if not 1 <= installment_index <= installment_total:
        raise ValidationError(
            f"Installment index {installment_index} outside 1..{installment_total}"
        )


def inconsistency_of(txn: SeriesMember) -> Optional[str]:
    """Describe an inconsistent group reference on a stored transaction.

    Returns:
        Human readable reason, or None when the series fields are coherent
    """
    try:
        check_series_fields(
            txn.installment_group_id,
            txn.installment_index,
            txn.installment_total,
            txn.recurring_group_id,
        )
    except ValidationError as e:
        return str(e)
    return None
