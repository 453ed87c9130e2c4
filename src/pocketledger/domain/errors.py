"""Shared domain error messages and error types."""

from typing import Iterable


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ParseError(DomainError):
    """Statement file is unreadable or in an unrecognized format."""


class CommitConflict(ConflictError):
    """The store rejected a reconciliation commit.

    The reconciliation session that produced the batch is left untouched,
    so the caller can adjust the selection and retry.
    """


class ScopeResolutionError(DomainError):
    """A series member carries an inconsistent group reference.

    This is a data-integrity fault, not a user input problem. ``safe_scope``
    holds the narrowest scope (only the target) that can still be applied.
    """

    def __init__(self, message: str, target_id: int):
        super().__init__(message)
        self.target_id = target_id
        self.safe_scope = frozenset({target_id})


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_path_not_found(path: str) -> str:
    """Return message for missing category by path."""
    return f"Category '{path}' not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def series_not_found(group_id: str) -> str:
    """Return message for a group id with no members."""
    return f"No transactions found for series '{group_id}'"


def series_count_out_of_range(count: object, minimum: int, maximum: int) -> str:
    """Return message for an installment/recurrence count outside bounds."""
    return f"Count must be an integer between {minimum} and {maximum}, got {count!r}"


def index_out_of_range(index: int, size: int) -> str:
    """Return message for a candidate index outside the session."""
    return f"Candidate index {index} out of range (session has {size} candidates)"


def missing_categories(category_ids: Iterable[int]) -> str:
    """Return message for a commit referencing deleted categories."""
    ids = ", ".join(str(cid) for cid in sorted(category_ids))
    return f"Categories no longer exist: {ids}"
