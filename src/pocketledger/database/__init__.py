"""Storage for pocketledger: the abstract store and its SQLite-backed implementation."""

from pocketledger.database.base import Database, UPDATABLE_TRANSACTION_FIELDS
from pocketledger.database.factories import DB_PATH_ENV_VAR, create_sqlite_database

__all__ = ["DB_PATH_ENV_VAR", "Database", "UPDATABLE_TRANSACTION_FIELDS", "create_sqlite_database"]
