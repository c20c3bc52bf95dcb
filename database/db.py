"""
SQLite database connection and query manager
"""

import sqlite3
from pathlib import Path
from typing import Iterable, Optional

from database.config import DB_PATH


class Database:
    """Database connection manager for SQLite"""

    def __init__(self, db_path: str = DB_PATH):
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        """
        Open the ledger database once and reuse the connection
        """
        if self._connection is None:
            self._connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=30.0,
            )

            self._connection.execute("PRAGMA journal_mode=WAL")

        return self._connection

    def close(self):
        """Close database connection"""
        if self._connection:
            self._connection.close()
            self._connection = None

    def execute(self, query: str, params: tuple = None):
        """Execute a query"""
        conn = self.connect()
        if params:
            return conn.execute(query, params)
        return conn.execute(query)

    def execute_script(self, script: str):
        """Run a multi-statement SQL script (schema creation)"""
        conn = self.connect()
        conn.executescript(script)
        conn.commit()

    def write_execute(self, query: str, params: tuple = None):
        """
        Execute a write query and commit

        Use this for INSERT, UPDATE, DELETE operations.
        """
        conn = self.connect()
        try:
            if params:
                cursor = conn.execute(query, params)
            else:
                cursor = conn.execute(query)
            conn.commit()
            return cursor
        except Exception as e:
            conn.rollback()
            raise e

    def write_many(self, statements: Iterable[tuple]):
        """
        Execute several (query, params) writes in a single transaction

        Either every statement is committed or none is.
        """
        conn = self.connect()
        try:
            for query, params in statements:
                conn.execute(query, params or ())
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise e

    def fetch_one(self, query: str, params: tuple = None):
        """Execute query and return single row"""
        result = self.execute(query, params)
        return result.fetchone()

    def fetch_all(self, query: str, params: tuple = None):
        """Execute query and return all rows"""
        result = self.execute(query, params)
        return result.fetchall()
