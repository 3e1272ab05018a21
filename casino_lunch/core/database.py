"""
Database connection and management module
Owns the DuckDB connection, the table definitions and transaction helpers
used by the local persistence and identity gateways

Tables:
- auth_users: local identity provider accounts
- profiles: employee profile per owner
- reservations: one row per owner and calendar date
- logs: business action audit trail
"""

import duckdb
import threading
from pathlib import Path
from typing import Optional, Generator
from contextlib import contextmanager

from .exceptions import PersistenceError
from ..config.settings import settings

MEMORY_PATH = ":memory:"

# Full schema definition
SCHEMA_SQL = r"""
CREATE TABLE IF NOT EXISTS auth_users (
  id TEXT PRIMARY KEY,
  email TEXT UNIQUE NOT NULL,
  password_hash TEXT NOT NULL,
  metadata_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS profiles (
  owner_id TEXT PRIMARY KEY,
  email TEXT NOT NULL,
  full_name TEXT NOT NULL,
  employee_id TEXT NOT NULL,
  department TEXT,
  role TEXT DEFAULT 'employee',
  created_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS reservations (
  id TEXT PRIMARY KEY,
  owner_id TEXT NOT NULL,
  date DATE NOT NULL,
  menu_type TEXT CHECK(menu_type IN ('Normal','Hipocaloric')) NOT NULL,
  status TEXT CHECK(status IN ('confirmed','cancelled')) NOT NULL,
  created_at TIMESTAMP DEFAULT now()
);

CREATE UNIQUE INDEX IF NOT EXISTS uniq_reservation_owner_date ON reservations(owner_id, date);
CREATE INDEX IF NOT EXISTS idx_reservations_owner ON reservations(owner_id);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  owner_id TEXT,
  action TEXT,
  detail_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_owner ON logs(owner_id);
CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""


def path_from_url(db_url: str) -> str:
    """``duckdb://<path>`` -> ``<path>``; ``:memory:`` passes through"""
    if db_url.startswith("duckdb://"):
        return db_url.replace("duckdb://", "")
    return db_url


class DatabaseManager:
    """Database manager wrapping the single DuckDB connection"""

    def __init__(self, db_path: Optional[str] = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self.db_path = db_path or path_from_url(settings.database_url)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """Lazily open the connection and create the schema"""
        with self._lock:
            if self._connection is None:
                if self.db_path != MEMORY_PATH:
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._connection = duckdb.connect(self.db_path)
                self._init_schema()
            return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self.connection

    def _init_schema(self):
        """Create tables and indexes"""
        try:
            self._connection.execute(SCHEMA_SQL)
        except duckdb.Error as e:
            raise PersistenceError(f"Failed to initialize schema: {e}")

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        Transaction context manager

        Commits on success and rolls back on any exception, re-raising the
        original error so callers can classify it.
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN")
            try:
                yield conn
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def init_database(self):
        """Force connection and schema creation"""
        self.get_connection()

    def execute_query(self, query: str, params: list = None) -> list:
        """Run a query and return all rows"""
        with self._lock:
            try:
                con = self.get_connection()
                if params:
                    return con.execute(query, params).fetchall()
                return con.execute(query).fetchall()
            except duckdb.Error as e:
                raise PersistenceError(f"Query execution failed: {e}")

    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """Run a query and return the first row"""
        with self._lock:
            try:
                con = self.get_connection()
                if params:
                    return con.execute(query, params).fetchone()
                return con.execute(query).fetchone()
            except duckdb.Error as e:
                raise PersistenceError(f"Query execution failed: {e}")

    def close(self):
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None


# Global database manager instance
db_manager = DatabaseManager()
