"""Reconciliation of imported statement candidates against stored transactions.

A ReconciliationSession is a value: every edit returns a new session and
leaves the original untouched. Candidates are addressed by their position in
the session, so structural removal re-indexes the selection and duplicate
sets.
"""

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Iterable, Optional

from pocketledger.domain.entities import OfxCandidate, Transaction
from pocketledger.domain.errors import ValidationError, index_out_of_range

# Symmetric window, in days, for matching a candidate against an existing
# transaction with the same amount and type
DUPLICATE_DATE_TOLERANCE_DAYS = 1


def is_duplicate_of(
    candidate: OfxCandidate,
    existing: Transaction,
    tolerance_days: int = DUPLICATE_DATE_TOLERANCE_DAYS,
) -> bool:
    """Return True if ``existing`` looks like the same movement as ``candidate``."""
    if candidate.amount != existing.amount or candidate.type != existing.type:
        return False
    return abs((candidate.date - existing.date).days) <= tolerance_days


def find_duplicates(
    candidates: Iterable[OfxCandidate],
    existing: Iterable[Transaction],
    account_id: int,
    tolerance_days: int = DUPLICATE_DATE_TOLERANCE_DAYS,
) -> frozenset[int]:
    """Return the indexes of candidates matching a transaction on ``account_id``."""
    window = timedelta(days=tolerance_days)
    same_account = [txn for txn in existing if txn.account_id == account_id]

    duplicates = set()
    for index, candidate in enumerate(candidates):
        low, high = candidate.date - window, candidate.date + window
        for txn in same_account:
            if low <= txn.date <= high and is_duplicate_of(candidate, txn, tolerance_days):
                duplicates.add(index)
                break
    return frozenset(duplicates)


@dataclass(frozen=True)
class ReconciliationSession:
    """Working set of one statement import."""

    account_id: int
    candidates: tuple[OfxCandidate, ...]
    selected: frozenset[int]
    duplicates: frozenset[int]

    def __len__(self) -> int:
        return len(self.candidates)

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValidationError(f"Candidate index must be an integer, got {index!r}")
        if not 0 <= index < len(self.candidates):
            raise ValidationError(index_out_of_range(index, len(self.candidates)))

    def is_selected(self, index: int) -> bool:
        self._check_index(index)
        return index in self.selected

    def is_duplicate(self, index: int) -> bool:
        self._check_index(index)
        return index in self.duplicates

    @property
    def all_selected(self) -> bool:
        return len(self.selected) == len(self.candidates)

    def selected_candidates(self) -> list[OfxCandidate]:
        """Return the selected candidates in statement order."""
        return [c for i, c in enumerate(self.candidates) if i in self.selected]

    def toggle_one(self, index: int) -> "ReconciliationSession":
        """Flip the selection of one candidate."""
        self._check_index(index)
        return replace(self, selected=self.selected ^ {index})

    def toggle_all(self) -> "ReconciliationSession":
        """Select none when everything is selected, otherwise select all."""
        if self.all_selected:
            return replace(self, selected=frozenset())
        return replace(self, selected=frozenset(range(len(self.candidates))))

    def set_selected(self, indexes: Iterable[int], selected: bool) -> "ReconciliationSession":
        """Force the selection state of several candidates."""
        indexes = set(indexes)
        for index in indexes:
            self._check_index(index)
        if selected:
            return replace(self, selected=self.selected | indexes)
        return replace(self, selected=self.selected - indexes)

    def set_category(self, index: int, category_id: Optional[int]) -> "ReconciliationSession":
        """Replace the suggested category of one candidate."""
        self._check_index(index)
        updated = replace(self.candidates[index], suggested_category_id=category_id)
        candidates = self.candidates[:index] + (updated,) + self.candidates[index + 1 :]
        return replace(self, candidates=candidates)

    def remove(self, index: int) -> "ReconciliationSession":
        """Drop one candidate from the session and shift later indexes down."""
        self._check_index(index)
        candidates = self.candidates[:index] + self.candidates[index + 1 :]
        return replace(
            self,
            candidates=candidates,
            selected=_drop_index(self.selected, index),
            duplicates=_drop_index(self.duplicates, index),
        )


def _drop_index(indexes: frozenset[int], removed: int) -> frozenset[int]:
    return frozenset(i - 1 if i > removed else i for i in indexes if i != removed)


def build_session(
    candidates: Iterable[OfxCandidate],
    existing: Iterable[Transaction],
    account_id: int,
) -> ReconciliationSession:
    """Create a session with duplicates flagged and every candidate selected.

    Duplicates stay selected; flagging is advisory and the user decides.
    """
    candidates = tuple(candidates)
    return ReconciliationSession(
        account_id=account_id,
        candidates=candidates,
        selected=frozenset(range(len(candidates))),
        duplicates=find_duplicates(candidates, existing, account_id),
    )
