"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from contaparse.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV_VAR = "CONTAPARSE_DB_PATH"
DEFAULT_DB_DIR = Path.home() / ".contaparse"
DEFAULT_DB_NAME = "contaparse.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the database file: explicit path, then CONTAPARSE_DB_PATH, then the default.

    The parent directory is created so a fresh install can open the store.
    """
    path = database_path or os.environ.get(DB_PATH_ENV_VAR)
    resolved = Path(path).expanduser() if path else DEFAULT_DB_DIR / DEFAULT_DB_NAME
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to the SQLite ledger store. If None, checks
            CONTAPARSE_DB_PATH, then defaults to ~/.contaparse/contaparse.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = resolve_database_path(database_path)
    logger.debug("Using ledger store %s", path)
    return SQLAlchemyDatabase(f"sqlite:///{path}")
