"""Tests for series identity and scoped deletion resolution."""

import pytest
from datetime import date

from pocketledger.domain.entities import SeriesKind
from pocketledger.domain.errors import NotFoundError, ScopeResolutionError, ValidationError
from pocketledger.domain.scope import DeleteMode, resolve_scope
from pocketledger.domain.series import check_series_fields, group_id_of, inconsistency_of, series_kind


@pytest.fixture
def installment_series(make_transaction):
    """Five installments of one purchase, ids 11-15."""
    return [
        make_transaction(
            10 + i,
            date(2024, i, 5),
            installment_group_id="inst-1",
            installment_index=i,
            installment_total=5,
        )
        for i in range(1, 6)
    ]


@pytest.fixture
def recurring_series(make_transaction):
    """Four monthly occurrences, ids 21-24."""
    return [
        make_transaction(20 + i, date(2024, i, 28), recurring_group_id="rec-1")
        for i in range(1, 5)
    ]


def test_future_on_installment_three_of_five(installment_series):
    ids = resolve_scope(installment_series, 13, DeleteMode.FUTURE)
    assert ids == {13, 14, 15}


def test_all_returns_whole_group(installment_series):
    assert resolve_scope(installment_series, 12, DeleteMode.ALL) == {11, 12, 13, 14, 15}


def test_single_returns_only_target(installment_series):
    assert resolve_scope(installment_series, 12, DeleteMode.SINGLE) == {12}


def test_scopes_are_nested(installment_series, recurring_series):
    for series in (installment_series, recurring_series):
        for txn in series:
            single = resolve_scope(series, txn.id, DeleteMode.SINGLE)
            future = resolve_scope(series, txn.id, DeleteMode.FUTURE)
            everything = resolve_scope(series, txn.id, DeleteMode.ALL)
            assert txn.id in single
            assert single <= future <= everything


def test_future_on_recurring_cuts_by_date(recurring_series):
    assert resolve_scope(recurring_series, 22, DeleteMode.FUTURE) == {22, 23, 24}


def test_future_uses_index_even_when_dates_were_edited(make_transaction):
    """Installment 2 was moved after installment 3; index still decides."""
    series = [
        make_transaction(1, date(2024, 1, 5), installment_group_id="g", installment_index=1, installment_total=3),
        make_transaction(2, date(2024, 4, 1), installment_group_id="g", installment_index=2, installment_total=3),
        make_transaction(3, date(2024, 3, 5), installment_group_id="g", installment_index=3, installment_total=3),
    ]
    assert resolve_scope(series, 2, DeleteMode.FUTURE) == {2, 3}


def test_standalone_transaction_any_mode(make_transaction):
    txn = make_transaction(5, date(2024, 1, 1))
    for mode in DeleteMode:
        assert resolve_scope([txn], 5, mode) == {5}


def test_other_groups_never_included(installment_series, recurring_series, make_transaction):
    other = make_transaction(99, date(2024, 6, 5), installment_group_id="inst-2", installment_index=1, installment_total=2)
    mixed = installment_series + recurring_series + [other]
    assert resolve_scope(mixed, 11, DeleteMode.ALL) == {11, 12, 13, 14, 15}


def test_missing_target_raises(installment_series):
    with pytest.raises(NotFoundError):
        resolve_scope(installment_series, 404, DeleteMode.SINGLE)


def test_inconsistent_target_raises_with_safe_scope(make_transaction):
    broken = make_transaction(7, date(2024, 1, 1), installment_group_id="g", installment_index=None, installment_total=None)
    with pytest.raises(ScopeResolutionError) as excinfo:
        resolve_scope([broken], 7, DeleteMode.ALL)
    assert excinfo.value.safe_scope == frozenset({7})
    assert excinfo.value.target_id == 7


def test_target_in_both_series_kinds_is_inconsistent(make_transaction):
    broken = make_transaction(
        8,
        date(2024, 1, 1),
        installment_group_id="g",
        installment_index=1,
        installment_total=2,
        recurring_group_id="r",
    )
    assert inconsistency_of(broken) is not None
    with pytest.raises(ScopeResolutionError):
        resolve_scope([broken], 8, DeleteMode.FUTURE)


def test_series_kind_and_group_id(installment_series, recurring_series, make_transaction):
    assert series_kind(installment_series[0]) is SeriesKind.INSTALLMENT
    assert group_id_of(installment_series[0]) == "inst-1"
    assert series_kind(recurring_series[0]) is SeriesKind.RECURRING
    assert group_id_of(recurring_series[0]) == "rec-1"
    standalone = make_transaction(1, date(2024, 1, 1))
    assert series_kind(standalone) is None
    assert group_id_of(standalone) is None


@pytest.mark.parametrize(
    "fields",
    [
        ("g", 1, 2, "r"),
        (None, 1, 2, None),
        ("g", None, 2, None),
        ("g", 3, 2, None),
        ("g", 0, 2, None),
    ],
)
def test_check_series_fields_rejects_bad_combinations(fields):
    with pytest.raises(ValidationError):
        check_series_fields(*fields)


def test_check_series_fields_accepts_valid_combinations():
    check_series_fields(None, None, None, None)
    check_series_fields("g", 1, 1, None)
    check_series_fields(None, None, None, "r")
