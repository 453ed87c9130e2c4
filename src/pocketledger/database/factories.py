"""Database construction from a path, the environment, or the default location."""

import os
from pathlib import Path
from typing import Optional

from pocketledger.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV_VAR = "POCKETLEDGER_DB_PATH"
DEFAULT_DB_DIR = Path.home() / ".pocketledger"
DEFAULT_DB_NAME = "pocketledger.db"


def default_database_path() -> Path:
    """Location used when neither an explicit path nor the env var is set."""
    DEFAULT_DB_DIR.mkdir(parents=True, exist_ok=True)
    return DEFAULT_DB_DIR / DEFAULT_DB_NAME


def create_sqlite_database(database_path: Optional[str | Path] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed database.

    Args:
        database_path: SQLite file. Falls back to ``POCKETLEDGER_DB_PATH`` and
            then to ``~/.pocketledger/pocketledger.db``.

    Returns:
        Unconnected SQLAlchemyDatabase
    """
    path = database_path or os.environ.get(DB_PATH_ENV_VAR) or default_database_path()
    return SQLAlchemyDatabase(f"sqlite:///{path}")
