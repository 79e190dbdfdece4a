#!/usr/bin/env python3
"""Centralized PostgreSQL connection manager with pooling."""

from typing import Optional, Any
import logging
from contextlib import contextmanager
from threading import Lock

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool
from psycopg.pq import TransactionStatus

from .config import DatabaseConfig, get_database_config

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Centralized database connection manager with connection pooling
    Provides consistent database access patterns for the PostgreSQL repository
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config_obj = config or get_database_config()
        self.pool: Optional[ConnectionPool] = None
        self._initialized = False
        self.setup_connection_pool()

    def setup_connection_pool(self):
        """Setup PostgreSQL connection pool"""
        try:
            conninfo = self.config_obj.get_connection_string(hide_password=False)
            self.pool = ConnectionPool(
                conninfo=conninfo,
                min_size=1,
                max_size=self.config_obj.pool_size or 10,
                timeout=self.config_obj.timeout,
                name="duech_pool",
                open=True,
            )
            self._initialized = True
            logger.info("Database connection pool initialized successfully")
        except Exception as exc:
            logger.error(f"Failed to create PostgreSQL connection pool: {exc}")
            raise

    @contextmanager
    def get_connection(self, autocommit: bool = False):
        """
        Get a database connection from the pool

        Args:
            autocommit: Whether to enable autocommit mode

        Yields:
            Database connection
        """
        if not self.pool:
            raise RuntimeError("Database connection pool is not initialized")

        with self.pool.connection() as connection:
            connection.autocommit = autocommit
            try:
                if self.config_obj.schema:
                    connection.execute(
                        f'SET search_path TO "{self.config_obj.schema}"',
                        prepare=False,
                    )
                yield connection
                if not autocommit:
                    connection.commit()
            except Exception:
                if not autocommit:
                    connection.rollback()
                raise
            finally:
                if connection.info.transaction_status == TransactionStatus.IDLE:
                    connection.autocommit = False

    @contextmanager
    def get_cursor(self, dictionary: bool = False, autocommit: bool = False):
        """
        Get a database cursor (convenience method)

        Example:
            with db_manager.get_cursor(dictionary=True) as cursor:
                cursor.execute("SELECT * FROM words WHERE lemma = %s", ("cachai",))
                result = cursor.fetchone()
        """
        cursor_kwargs = {}
        if dictionary:
            cursor_kwargs['row_factory'] = dict_row

        with self.get_connection(autocommit=autocommit) as conn:
            with conn.cursor(**cursor_kwargs) as real_cursor:
                yield CursorWrapper(real_cursor)

    def execute_script(self, sql: str) -> int:
        """Run a multi-statement SQL script, returns the number of statements"""
        statements = [stmt.strip() for stmt in sql.split(';') if stmt.strip()]
        with self.get_cursor() as cursor:
            for statement in statements:
                cursor.execute(statement)
        logger.info(f"Executed {len(statements)} schema statements")
        return len(statements)

    def test_connection(self) -> bool:
        try:
            with self.get_cursor() as cursor:
                cursor.execute("SELECT 1")
                return cursor.fetchone()[0] == 1
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    def close_pool(self):
        if self.pool:
            self.pool.close()
            self._initialized = False
            logger.info("Database connection pool closed")


class CursorWrapper:
    """
    Wrapper around psycopg cursor that disables prepared statements by default.
    Prevents "prepared statement already exists" errors behind poolers.
    """

    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, query, params=None, **kwargs):
        kwargs.setdefault('prepare', False)
        return self._cursor.execute(query, params, **kwargs)

    def executemany(self, query, params_seq, **kwargs):
        kwargs.pop('prepare', None)
        return self._cursor.executemany(query, params_seq, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cursor, name)


_db_manager: Optional[DatabaseManager] = None
_manager_lock = Lock()


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance, creating the pool on first use"""
    global _db_manager
    if _db_manager is None:
        with _manager_lock:
            if _db_manager is None:
                _db_manager = DatabaseManager()
    return _db_manager


def close_database_manager():
    """Close the global pool if one was ever opened"""
    global _db_manager
    with _manager_lock:
        if _db_manager is not None:
            _db_manager.close_pool()
            _db_manager = None
