"""Database layer for hangarledger application."""

from hangarledger.database.base import Database
from hangarledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
