"""Tests for the SQLAlchemy Database implementation."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from pocketledger.domain import entities
from pocketledger.domain.errors import ConflictError
from pocketledger.domain.entities import SeriesKind, TransactionDraft, TransactionType


def draft(account_id, day, amount="10.00", **series):
    return TransactionDraft(
        account_id=account_id,
        amount=Decimal(amount),
        type=TransactionType.EXPENSE,
        date=date(2024, 1, day),
        **series,
    )


class TestDatabaseInterface:
    """The store returns domain entities and honours batch semantics."""

    def test_get_account_returns_domain_model(self, temp_db):
        account_id = temp_db.create_account(name="Checking", account_type=entities.AccountType.CHECKING)

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.name == "Checking"
        assert isinstance(account.created_at, datetime)

    def test_create_transactions_returns_entities_with_ids(self, temp_db, sample_account):
        created = temp_db.create_transactions([draft(sample_account.id, 1), draft(sample_account.id, 2)])

        assert all(isinstance(t, entities.Transaction) for t in created)
        assert len({t.id for t in created}) == 2
        assert temp_db.get_transaction(created[0].id) == created[0]

    def test_batch_is_all_or_nothing(self, temp_db, sample_account):
        bad = draft(sample_account.id, 3, amount="0.00")
        with pytest.raises(ConflictError, match="Store rejected"):
            temp_db.create_transactions([draft(sample_account.id, 1), draft(sample_account.id, 2), bad])
        assert temp_db.list_transactions() == []

        # The session is usable again after the rollback
        assert len(temp_db.create_transactions([draft(sample_account.id, 4)])) == 1

    def test_both_series_kinds_rejected_by_schema(self, temp_db, sample_account):
        both = draft(
            sample_account.id,
            1,
            installment_group_id="g",
            installment_index=1,
            installment_total=2,
            recurring_group_id="r",
        )
        with pytest.raises(ConflictError, match="Store rejected"):
            temp_db.create_transactions([both])

    def test_list_series_and_series_transactions(self, temp_db, sample_account):
        temp_db.create_transactions(
            [
                draft(sample_account.id, 5, installment_group_id="g", installment_index=2, installment_total=2),
                draft(sample_account.id, 1, installment_group_id="g", installment_index=1, installment_total=2),
                draft(sample_account.id, 2, recurring_group_id="r"),
                draft(sample_account.id, 3),
            ]
        )

        assert [t.installment_index for t in temp_db.list_series("g")] == [1, 2]
        assert len(temp_db.list_series("r")) == 1
        assert temp_db.list_series("missing") == []
        assert len(temp_db.list_series_transactions(SeriesKind.INSTALLMENT)) == 2
        assert len(temp_db.list_series_transactions(SeriesKind.RECURRING)) == 1

    def test_delete_transactions_counts(self, temp_db, sample_account):
        created = temp_db.create_transactions([draft(sample_account.id, d) for d in (1, 2, 3)])

        assert temp_db.delete_transactions([created[0].id, created[1].id, 999]) == 2
        assert temp_db.delete_transactions([]) == 0
        assert [t.id for t in temp_db.list_transactions()] == [created[2].id]

    def test_invoice_paid_state(self, temp_db, credit_card):
        start, end = date(2024, 3, 11), date(2024, 4, 10)
        assert temp_db.is_invoice_paid(credit_card.id, start, end) is False

        temp_db.set_invoice_paid(credit_card.id, start, end)
        assert temp_db.is_invoice_paid(credit_card.id, start, end) is True
        assert temp_db.is_invoice_paid(credit_card.id, date(2024, 4, 11), date(2024, 5, 10)) is False

        temp_db.set_invoice_paid(credit_card.id, start, end, paid=False)
        assert temp_db.is_invoice_paid(credit_card.id, start, end) is False

    def test_update_transaction_applies_changes(self, temp_db, sample_account):
        (txn,) = temp_db.create_transactions([draft(sample_account.id, 1)])

        temp_db.update_transaction(
            txn.id, {"amount": Decimal("12.00"), "type": TransactionType.INCOME, "tags": {"b", "a"}}
        )

        updated = temp_db.get_transaction(txn.id)
        assert updated.amount == Decimal("12.00")
        assert updated.type is TransactionType.INCOME
        assert updated.tags == frozenset({"a", "b"})

    def test_update_transaction_rejects_series_fields(self, temp_db, sample_account):
        (txn,) = temp_db.create_transactions([draft(sample_account.id, 1)])
        with pytest.raises(ValueError):
            temp_db.update_transaction(txn.id, {"installment_group_id": "g"})
        with pytest.raises(ValueError):
            temp_db.update_transaction(999, {"description": "x"})
