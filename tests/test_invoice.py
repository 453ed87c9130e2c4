"""Tests for credit-card invoice periods."""

import pytest
from datetime import date
from decimal import Decimal

from pocketledger.domain.entities import TransactionType
from pocketledger.domain.errors import NotFoundError, ValidationError
from pocketledger.domain.invoice import aggregate, resolve_current_period


def test_reference_after_closing_day_moves_to_next_period():
    assert resolve_current_period(10, date(2024, 3, 15)) == (date(2024, 3, 11), date(2024, 4, 10))


def test_reference_on_closing_day_belongs_to_current_period():
    assert resolve_current_period(10, date(2024, 3, 10)) == (date(2024, 2, 11), date(2024, 3, 10))


def test_reference_before_closing_day():
    assert resolve_current_period(10, date(2024, 3, 1)) == (date(2024, 2, 11), date(2024, 3, 10))


def test_closing_day_31_clamps_to_month_end():
    assert resolve_current_period(31, date(2024, 2, 15)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert resolve_current_period(31, date(2024, 4, 30)) == (date(2024, 4, 1), date(2024, 4, 30))


def test_closing_day_30_in_february_and_march():
    start, end = resolve_current_period(30, date(2023, 3, 5))
    assert (start, end) == (date(2023, 3, 1), date(2023, 3, 30))


def test_period_crosses_year_boundary():
    assert resolve_current_period(10, date(2023, 12, 20)) == (date(2023, 12, 11), date(2024, 1, 10))
    assert resolve_current_period(10, date(2024, 1, 5)) == (date(2023, 12, 11), date(2024, 1, 10))


def test_consecutive_periods_are_contiguous():
    _, end = resolve_current_period(5, date(2024, 6, 1))
    next_start, _ = resolve_current_period(5, date(2024, 6, 6))
    assert (next_start - end).days == 1


@pytest.mark.parametrize("closing_day", [0, 32, None, True])
def test_invalid_closing_day(closing_day):
    with pytest.raises(ValidationError):
        resolve_current_period(closing_day, date(2024, 3, 15))


def test_aggregate_sums_account_expenses_in_range(make_transaction):
    transactions = [
        make_transaction(1, date(2024, 3, 11), "100.00"),
        make_transaction(2, date(2024, 4, 10), "20.50"),
        make_transaction(3, date(2024, 4, 11), "999.00"),
        make_transaction(4, date(2024, 3, 20), "50.00", type=TransactionType.INCOME),
        make_transaction(5, date(2024, 3, 20), "70.00", account_id=2),
    ]
    total, members = aggregate(date(2024, 3, 11), date(2024, 4, 10), transactions, account_id=1)

    assert total == Decimal("120.50")
    assert [txn.id for txn in members] == [1, 2]


def test_empty_period_totals_zero():
    total, members = aggregate(date(2024, 3, 11), date(2024, 4, 10), [], account_id=1)
    assert total == Decimal("0")
    assert members == []


class TestInvoiceService:
    """Invoice computation through AccountService."""

    def test_current_invoice(self, account_service, transaction_service, credit_card):
        transaction_service.create_transaction(credit_card.id, Decimal("100.00"), "expense", date(2024, 3, 12))
        transaction_service.create_transaction(credit_card.id, Decimal("40.00"), "expense", date(2024, 4, 10))
        transaction_service.create_transaction(credit_card.id, Decimal("5.00"), "expense", date(2024, 3, 10))

        invoice = account_service.get_current_invoice(credit_card.id, date(2024, 3, 15))

        assert invoice.period_start == date(2024, 3, 11)
        assert invoice.period_end == date(2024, 4, 10)
        assert invoice.total == Decimal("140.00")
        assert len(invoice.transactions) == 2
        assert invoice.closing_day == 10
        assert invoice.due_day == 20
        assert invoice.is_paid is False

    def test_installments_land_in_successive_invoices(self, account_service, transaction_service, credit_card):
        transaction_service.create_installment_purchase(
            credit_card.id, Decimal("300.00"), 3, date(2024, 3, 12)
        )
        for month in (3, 4, 5):
            invoice = account_service.get_current_invoice(credit_card.id, date(2024, month, 15))
            assert invoice.total == Decimal("100.00")

    def test_total_recomputed_after_deletion(self, account_service, transaction_service, credit_card):
        txn_id = transaction_service.create_transaction(credit_card.id, Decimal("60.00"), "expense", date(2024, 3, 20))
        assert account_service.get_current_invoice(credit_card.id, date(2024, 3, 15)).total == Decimal("60.00")

        transaction_service.delete_transaction(txn_id)
        assert account_service.get_current_invoice(credit_card.id, date(2024, 3, 15)).total == Decimal("0")

    def test_mark_paid_and_unpaid(self, account_service, credit_card):
        invoice = account_service.get_current_invoice(credit_card.id, date(2024, 3, 15))
        account_service.mark_invoice_paid(credit_card.id, invoice.period_start, invoice.period_end)

        assert account_service.get_current_invoice(credit_card.id, date(2024, 3, 20)).is_paid is True
        assert account_service.get_current_invoice(credit_card.id, date(2024, 4, 20)).is_paid is False

        account_service.mark_invoice_paid(credit_card.id, invoice.period_start, invoice.period_end, paid=False)
        assert account_service.get_current_invoice(credit_card.id, date(2024, 3, 20)).is_paid is False

    def test_marking_paid_twice_is_harmless(self, account_service, credit_card):
        start, end = date(2024, 3, 11), date(2024, 4, 10)
        account_service.mark_invoice_paid(credit_card.id, start, end)
        account_service.mark_invoice_paid(credit_card.id, start, end)
        assert account_service.get_current_invoice(credit_card.id, date(2024, 4, 1)).is_paid is True

    def test_non_credit_card_rejected(self, account_service, sample_account):
        with pytest.raises(ValidationError):
            account_service.get_current_invoice(sample_account.id, date(2024, 3, 15))

    def test_unknown_account(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.get_current_invoice(999, date(2024, 3, 15))

    def test_inverted_range_rejected(self, account_service, credit_card):
        with pytest.raises(ValidationError):
            account_service.mark_invoice_paid(credit_card.id, date(2024, 4, 10), date(2024, 3, 11))
