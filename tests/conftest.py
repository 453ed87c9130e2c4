"""Shared pytest fixtures for pocketledger tests."""

import tempfile
import os
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
import pytest

from pocketledger.database.factories import create_sqlite_database
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import AccountType, Transaction, TransactionType
from pocketledger.domain.report import ReportService
from pocketledger.domain.statement_import import StatementImportService
from pocketledger.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that drive the CLI
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a checking account for testing."""
    account_id = account_service.create_account(name="Test Account")
    return account_service.get_account(account_id)


@pytest.fixture
def credit_card(account_service):
    """Create a credit card closing on the 10th and due on the 20th."""
    account_id = account_service.create_account(
        name="Test Card", account_type=AccountType.CREDIT_CARD, closing_day=10, due_day=20
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service):
    """Create the default categories and return their IDs keyed by path."""
    from pocketledger.cli.commands.init_categories import INITIAL_CATEGORIES

    category_ids = {}
    for category_name, parent_name, category_type in INITIAL_CATEGORIES:
        if parent_name is None:
            category_ids[category_name] = category_service.create_category(
                name=category_name, category_type=category_type
            )
    for category_name, parent_name, category_type in INITIAL_CATEGORIES:
        if parent_name is not None:
            category_ids[f"{parent_name} > {category_name}"] = category_service.create_category(
                name=category_name, parent_path=parent_name, category_type=category_type
            )
    return category_ids


@pytest.fixture
def make_transaction():
    """Build in-memory Transaction entities for pure-logic tests."""

    def _make(
        id,
        txn_date,
        amount="10.00",
        account_id=1,
        type=TransactionType.EXPENSE,
        **series,
    ):
        return Transaction(
            id=id,
            account_id=account_id,
            amount=Decimal(amount),
            type=type,
            date=txn_date,
            description=None,
            category_id=None,
            created_at=datetime(2024, 1, 1),
            **series,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def today():
    """Fixed reference date for paid/pending computations."""
    return date(2024, 3, 15)
