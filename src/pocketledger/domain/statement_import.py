"""Bank statement import: preview, reconcile and commit."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from pocketledger.database.base import Database
from pocketledger.domain.entities import (
    Category,
    CategoryType,
    OfxCandidate,
    TransactionDraft,
    TransactionType,
)
from pocketledger.domain.errors import (
    CommitConflict,
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    missing_categories,
)
from pocketledger.domain.reconciliation import ReconciliationSession, build_session
from pocketledger.utils.ofx_parser import parse_ofx, parse_ofx_file

logger = logging.getLogger(__name__)

MAX_IMPORT_TRANSACTIONS = 500

# Lowercase keywords per expense category name, checked in order.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Food": (
        "market",
        "supermarket",
        "grocery",
        "bakery",
        "restaurant",
        "uber eats",
        "doordash",
        "pizza",
        "burger",
        "cafe",
        "butcher",
    ),
    "Transport": (
        "uber",
        "lyft",
        "fuel",
        "gas station",
        "petrol",
        "parking",
        "toll",
        "taxi",
        "bus",
        "metro",
        "train",
    ),
    "Housing": (
        "rent",
        "mortgage",
        "electricity",
        "water",
        "internet",
        "property tax",
        "hoa",
    ),
    "Health": (
        "pharmacy",
        "drugstore",
        "clinic",
        "hospital",
        "laboratory",
        "doctor",
        "dentist",
        "health",
    ),
    "Leisure": (
        "cinema",
        "netflix",
        "spotify",
        "theater",
        "concert",
        "steam",
        "playstation",
        "travel",
        "hotel",
    ),
    "Shopping": ("amazon", "ebay", "store", "shop", "mall"),
    "Bills": ("insurance", "phone", "mobile", "subscription", "fee"),
}


def suggest_category(
    description: str,
    transaction_type: TransactionType,
    categories: list[Category],
) -> Optional[int]:
    """Guess a category for an imported transaction.

    Income goes to a "salary" category when one exists, otherwise to the first
    income category. Expenses are matched against CATEGORY_KEYWORDS; no match
    leaves the candidate uncategorized.
    """
    if transaction_type is TransactionType.INCOME:
        income = [c for c in categories if c.category_type is CategoryType.INCOME]
        for category in income:
            if "salary" in category.name.lower():
                return category.id
        return income[0].id if income else None

    lowered = description.lower()
    for category_name, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            for category in categories:
                if category.category_type is CategoryType.EXPENSE and category.name == category_name:
                    return category.id
    return None


class StatementImportService:
    """Service for importing OFX statements into an account."""

    def __init__(self, db: Database):
        """Initialize statement import service.

        Args:
            db: Database instance
        """
        self.db = db

    def preview(self, source: Union[str, Path, bytes], account_id: int) -> ReconciliationSession:
        """Parse a statement and reconcile it against the account's transactions.

        Args:
            source: Path to an OFX file, or the raw statement as bytes
            account_id: Account the statement belongs to

        Returns:
            Session with every candidate selected and duplicates flagged

        Raises:
            ParseError: If the statement cannot be parsed
            ValidationError: If a row has no positive amount or the statement
                exceeds MAX_IMPORT_TRANSACTIONS
            NotFoundError: If the account doesn't exist
        """
        if isinstance(source, bytes):
            candidates = parse_ofx(source)
        else:
            candidates = parse_ofx_file(source)

        not_positive = [str(row) for row, c in enumerate(candidates, start=1) if c.amount <= 0]
        if not_positive:
            raise ValidationError(
                f"Statement rows must have a positive amount (rows {', '.join(not_positive)})"
            )
        if len(candidates) > MAX_IMPORT_TRANSACTIONS:
            raise ValidationError(
                f"Statement has {len(candidates)} transactions; at most "
                f"{MAX_IMPORT_TRANSACTIONS} can be imported at once"
            )
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        categories = self.db.list_all_categories()
        candidates = [
            _with_suggestion(c, suggest_category(c.description, c.type, categories))
            for c in candidates
        ]
        existing = self.db.list_transactions(account_id=account_id)
        session = build_session(candidates, existing, account_id)

        logger.info(
            "Previewed %d statement transactions for account %s (%d possible duplicates)",
            len(session),
            account_id,
            len(session.duplicates),
        )
        return session

    def commit(self, session: ReconciliationSession) -> dict[str, int]:
        """Store the selected candidates of a session as transactions.

        Duplicate flags are advisory; selected duplicates are imported.

        Args:
            session: Reconciliation session to commit

        Returns:
            Dictionary with ``imported_count``

        Raises:
            ValidationError: If nothing is selected
            CommitConflict: If the account or a referenced category no longer
                exists, or the store rejects the batch
        """
        selected = session.selected_candidates()
        if not selected:
            raise ValidationError("No transactions selected for import")

        if self.db.get_account(session.account_id) is None:
            raise CommitConflict(account_not_found(session.account_id))
        referenced = {c.suggested_category_id for c in selected if c.suggested_category_id is not None}
        gone = {cid for cid in referenced if self.db.get_category(cid) is None}
        if gone:
            raise CommitConflict(missing_categories(gone))

        drafts = [
            TransactionDraft(
                account_id=session.account_id,
                amount=c.amount,
                type=c.type,
                date=c.date,
                description=c.description,
                category_id=c.suggested_category_id,
            )
            for c in selected
        ]
        try:
            created = self.db.create_transactions(drafts)
        except ConflictError as e:
            logger.warning("Statement commit for account %s rejected: %s", session.account_id, e)
            raise CommitConflict(f"Import rejected by the store: {e}") from e

        logger.info("Imported %d transactions into account %s", len(created), session.account_id)
        return {"imported_count": len(created)}


def _with_suggestion(candidate: OfxCandidate, category_id: Optional[int]) -> OfxCandidate:
    if category_id is None:
        return candidate
    return replace(candidate, suggested_category_id=category_id)
