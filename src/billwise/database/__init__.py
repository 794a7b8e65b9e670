"""Database layer for billwise application."""

from billwise.database.base import Database
from billwise.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
