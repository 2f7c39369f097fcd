"""Persistence layer for the ledger store."""

from contaparse.database.base import Database
from contaparse.database.factories import create_sqlite_database, resolve_database_path

__all__ = ["Database", "create_sqlite_database", "resolve_database_path"]
